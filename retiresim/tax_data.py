"""Tax law constants and reference tables for retiresim."""

from __future__ import annotations

from typing import Final

BASE_CALENDAR_YEAR: Final[int] = 2026

DEFAULT_FEDERAL_EFFECTIVE_RATE_PCT: Final[float] = 22.0
DEFAULT_CAP_GAINS_RATE_PCT: Final[float] = 15.0

STANDARD_DEDUCTIONS: Final[dict[str, float]] = {
    "single": 15_000.0,
    "mfj": 30_000.0,
    "survivor": 30_000.0,
    "hoh": 22_500.0,
}

EXTRA_DEDUCTION_SINGLE_65_PLUS: Final[float] = 1_550.0
EXTRA_DEDUCTION_MFJ_65_PLUS_PER_PERSON: Final[float] = 1_300.0
AGE_65_BONUS_AGE: Final[int] = 65

SALT_CAP: Final[float] = 10_000.0
MEDICAL_EXPENSE_FLOOR_PCT: Final[float] = 0.075

# Pub. 915 base amounts as (lower, upper). Survivor files as if still MFJ.
SS_PROVISIONAL_INCOME_THRESHOLDS: Final[dict[str, tuple[float, float]]] = {
    "mfj": (32_000.0, 44_000.0),
    "survivor": (32_000.0, 44_000.0),
    "single": (25_000.0, 34_000.0),
    "hoh": (25_000.0, 34_000.0),
}

# Number of survivor years (1-indexed, year of death included) filed as "survivor".
SURVIVOR_FILING_YEARS: Final[int] = 2

# Capital gains enter the provisional income base net of losses, floored at zero.
PROVISIONAL_BASE_INCLUDES_NET_GAINS: Final[bool] = True

WITHDRAWAL_CONVERGENCE_THRESHOLD: Final[float] = 100.0
MAX_CONVERGENCE_ITERATIONS: Final[int] = 5

# Year-one tax seed: share of spending assumed to come from taxable sources.
INITIAL_TAX_ESTIMATE_FRACTION: Final[float] = 0.5

GUARDRAIL_PORTFOLIO_CEILING_MULTIPLIER: Final[float] = 20.0
GUARDRAIL_MAX_WITHDRAWAL_RATE_PCT: Final[float] = 6.0

REBALANCE_MIN_DELTA: Final[float] = 0.01

# Brackets are (upper_bound, marginal_rate). Upper bound None means infinity.
FEDERAL_BRACKETS: Final[dict[str, list[tuple[float | None, float]]]] = {
    "single": [
        (11_925.0, 0.10),
        (48_475.0, 0.12),
        (103_350.0, 0.22),
        (197_300.0, 0.24),
        (250_525.0, 0.32),
        (626_350.0, 0.35),
        (None, 0.37),
    ],
    "mfj": [
        (23_850.0, 0.10),
        (96_950.0, 0.12),
        (206_700.0, 0.22),
        (394_600.0, 0.24),
        (501_050.0, 0.32),
        (751_600.0, 0.35),
        (None, 0.37),
    ],
    "survivor": [
        (23_850.0, 0.10),
        (96_950.0, 0.12),
        (206_700.0, 0.22),
        (394_600.0, 0.24),
        (501_050.0, 0.32),
        (751_600.0, 0.35),
        (None, 0.37),
    ],
    "hoh": [
        (17_000.0, 0.10),
        (64_850.0, 0.12),
        (103_350.0, 0.22),
        (197_300.0, 0.24),
        (250_500.0, 0.32),
        (626_350.0, 0.35),
        (None, 0.37),
    ],
}

# Long-term capital gains brackets are (upper_bound, marginal_rate).
CAPITAL_GAINS_BRACKETS: Final[dict[str, list[tuple[float | None, float]]]] = {
    "single": [(48_350.0, 0.00), (533_400.0, 0.15), (None, 0.20)],
    "mfj": [(96_700.0, 0.00), (600_050.0, 0.15), (None, 0.20)],
    "survivor": [(96_700.0, 0.00), (600_050.0, 0.15), (None, 0.20)],
    "hoh": [(64_750.0, 0.00), (566_700.0, 0.15), (None, 0.20)],
}

# State rows are (income_rate_pct, capital_gains_rate_pct, ss_tax_exempt, standard_deduction).
# A standard deduction of None means "derive from the federal deduction".
STATE_TAX_DATA: Final[dict[str, tuple[float, float, str, float | None]]] = {
    "AL": (5.0, 5.0, "yes", 3_000.0),
    "AK": (0.0, 0.0, "yes", None),
    "AZ": (2.5, 2.5, "yes", 14_600.0),
    "AR": (4.4, 4.4, "yes", 2_340.0),
    "CA": (13.3, 13.3, "yes", 5_540.0),
    "CO": (4.4, 4.4, "partial", 14_600.0),
    "CT": (6.99, 6.99, "partial", 0.0),
    "DE": (6.6, 6.6, "yes", 3_250.0),
    "FL": (0.0, 0.0, "yes", None),
    "GA": (5.49, 5.49, "yes", 5_400.0),
    "HI": (11.0, 7.25, "yes", 2_200.0),
    "ID": (5.8, 5.8, "yes", 14_600.0),
    "IL": (4.95, 4.95, "yes", 0.0),
    "IN": (3.05, 3.05, "yes", 0.0),
    "IA": (5.7, 5.7, "yes", 2_210.0),
    "KS": (5.7, 5.7, "partial", 3_500.0),
    "KY": (4.0, 4.0, "yes", 3_160.0),
    "LA": (4.25, 4.25, "yes", 4_500.0),
    "ME": (7.15, 7.15, "yes", 14_600.0),
    "MD": (5.75, 5.75, "yes", 2_550.0),
    "MA": (5.0, 9.0, "yes", 0.0),
    "MI": (4.25, 4.25, "yes", 0.0),
    "MN": (9.85, 9.85, "partial", 14_575.0),
    "MS": (5.0, 5.0, "yes", 2_300.0),
    "MO": (4.95, 4.95, "partial", 14_600.0),
    "MT": (6.75, 6.75, "partial", 5_540.0),
    "NE": (6.64, 6.64, "yes", 7_900.0),
    "NV": (0.0, 0.0, "yes", None),
    "NH": (0.0, 0.0, "yes", None),
    "NJ": (10.75, 10.75, "yes", 0.0),
    "NM": (5.9, 5.9, "partial", 14_600.0),
    "NY": (10.9, 10.9, "yes", 8_000.0),
    "NC": (4.5, 4.5, "yes", 12_750.0),
    "ND": (2.5, 2.5, "partial", 14_600.0),
    "OH": (3.5, 3.5, "yes", 0.0),
    "OK": (4.75, 4.75, "yes", 6_350.0),
    "OR": (9.9, 9.9, "yes", 2_745.0),
    "PA": (3.07, 3.07, "yes", 0.0),
    "RI": (5.99, 5.99, "partial", 10_550.0),
    "SC": (6.4, 6.4, "yes", 14_600.0),
    "SD": (0.0, 0.0, "yes", None),
    "TN": (0.0, 0.0, "yes", None),
    "TX": (0.0, 0.0, "yes", None),
    "UT": (4.65, 4.65, "partial", 0.0),
    "VT": (8.75, 8.75, "partial", 6_500.0),
    "VA": (5.75, 5.75, "yes", 8_000.0),
    "WA": (0.0, 7.0, "yes", None),
    "WV": (6.5, 6.5, "partial", 0.0),
    "WI": (7.65, 7.65, "yes", 12_760.0),
    "WY": (0.0, 0.0, "yes", None),
    "DC": (10.75, 10.75, "yes", 14_600.0),
}
