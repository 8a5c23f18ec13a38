import json

from retiresim.__main__ import main
from tests.helpers import clone_plan, write_plan


def test_summary_mode_exits_zero(capsys):
    code = main(["sample_plan.json", "--summary"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Mode: deterministic" in out
    assert "Years: 2026-2053" in out
    assert "Median terminal value" in out


def test_missing_plan_file_returns_two(tmp_path):
    missing = tmp_path / "nope.json"
    code = main([str(missing)])
    assert code == 2


def test_malformed_plan_returns_two(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    del data["spending"]
    path = write_plan(tmp_path, data)

    assert main([str(path)]) == 2


def test_invalid_horizon_returns_one(tmp_path, sample_plan_dict):
    data = clone_plan(sample_plan_dict)
    data["household"]["primary"]["current_age"] = 95
    data["household"]["spouse"]["current_age"] = 95
    path = write_plan(tmp_path, data)

    assert main([str(path)]) == 1


def test_json_output(tmp_path, sample_plan_dict, capsys):
    plan_path = write_plan(tmp_path, sample_plan_dict)
    output_path = tmp_path / "result.json"

    code = main([str(plan_path), "--json", "-o", str(output_path)])

    assert code == 0
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["mode"] == "deterministic"
    assert len(payload["yearly"]) == 28
    assert payload["yearly"][0]["year"] == 2026
    assert "summary" in payload
    assert "Wrote results to" in capsys.readouterr().out


def test_stress_mode_with_scenario_file(tmp_path, sample_plan_dict, capsys):
    data = clone_plan(sample_plan_dict)
    data["market"]["stress_scenario_ids"] = ["lost-decade"]
    plan_path = write_plan(tmp_path, data)
    scenarios_path = tmp_path / "scenarios.json"
    scenarios_path.write_text(json.dumps({"lost-decade": {"returns": [-5.0] * 10}}), encoding="utf-8")

    code = main([str(plan_path), "--mode", "stress", "--scenarios", str(scenarios_path), "--summary"])

    assert code == 0
    assert "Mode: stress" in capsys.readouterr().out


def test_monte_carlo_prints_seed(capsys):
    code = main(["sample_plan.json", "--mode", "monteCarlo", "--runs", "5", "--seed", "11"])

    assert code == 0
    out = capsys.readouterr().out
    assert "(5 runs)" in out
    assert "Seed: 11" in out
