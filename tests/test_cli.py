"""
CLI smoke tests: argument parsing and JSON output of each subcommand.
"""

import json

import pytest

from breakout_sim.cli import handle_run, handle_scenarios, handle_timeline, setup_argparse


def run_json(handler, argv, capsys):
    args = setup_argparse(argv)
    code = handler(args)
    out = capsys.readouterr().out
    return code, json.loads(out) if code == 0 else out


class TestArgparse:
    def test_run_options(self):
        args = setup_argparse([
            "-q", "run", "--scenario", "bullish", "--seed", "7",
            "--window", "5", "--steps", "20", "--step-seconds", "0.5", "--json",
        ])
        assert args.quiet
        assert args.command == "run"
        assert args.scenario == "bullish"
        assert args.seed == 7
        assert args.window == 5
        assert args.steps == 20
        assert args.step_seconds == 0.5
        assert args.json_output
        assert args.tail == 10
        assert args.model_path is None

    def test_verbosity_exclusive(self):
        with pytest.raises(SystemExit):
            setup_argparse(["-q", "--debug", "scenarios"])

    def test_scenario_required(self):
        with pytest.raises(SystemExit):
            setup_argparse(["timeline"])


class TestCommands:
    def test_scenarios_json(self, capsys, tmp_path):
        (tmp_path / "extra.yml").write_text("start_price: 1.0\nduration: 10\n", encoding="utf-8")
        code, data = run_json(handle_scenarios, ["scenarios", "--dir", str(tmp_path), "--json"], capsys)
        assert code == 0
        assert "extra" in data["scenarios"]
        assert "bullish" in data["scenarios"]

    def test_timeline_json(self, capsys):
        code, data = run_json(
            handle_timeline, ["timeline", "--scenario", "fake_then_real", "--seed", "3", "--json"], capsys
        )
        assert code == 0
        assert data["breakout"]["type"] == "bullish"
        assert data["breakout"]["target_price"] == pytest.approx(101.0)
        assert [s["regime"] for s in data["segments"]].count("N,B") == 3
        assert data["segments"][0]["start_time"] == 0.0

    def test_run_json(self, capsys, tmp_path):
        code, data = run_json(handle_run, [
            "run", "--scenario", "bullish", "--seed", "3",
            "--model", str(tmp_path / "missing.json"),
            "--window", "3", "--steps", "45", "--json",
        ], capsys)
        assert code == 0
        assert data["status"] == "pass"
        summary = data["summary"]
        assert summary["steps"] == 45
        # empty model: no ticks, quotes never move
        assert summary["ticks"] == 0
        assert summary["final_bid"] == 100.0
        assert summary["pivot_highs"] == 0
        assert summary["breakout_target"] == pytest.approx(101.0)
        assert any(e["kind"] == "start" for e in data["events"])

    def test_run_writes_csv(self, capsys, tmp_path):
        csv_path = tmp_path / "out" / "run.csv"
        code, _ = run_json(handle_run, [
            "run", "--scenario", "ranging", "--seed", "1",
            "--model", str(tmp_path / "missing.json"),
            "--steps", "12", "--csv", str(csv_path), "--json",
        ], capsys)
        assert code == 0
        lines = csv_path.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("elapsed,bid,ask,mid,pivot")
        assert len(lines) == 13

    def test_malformed_scenario_file_fails_cleanly(self, capsys, tmp_path):
        bad = tmp_path / "bad.yml"
        bad.write_text("- start_price: 10.0\n- duration: 10\n", encoding="utf-8")
        args = setup_argparse(["run", "--scenario", str(bad), "--json"])
        assert handle_run(args) == 1
        assert "FAIL" in capsys.readouterr().out

    def test_unknown_scenario_fails(self, capsys, tmp_path):
        args = setup_argparse(["timeline", "--scenario", "nope", "--dir", str(tmp_path)])
        assert handle_timeline(args) == 1
