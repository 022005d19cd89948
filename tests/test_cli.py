"""
Test suite for the command-line front end.

Validates:
1. buffer / reverse subcommands: text and JSON output
2. Input errors: exit code 2 with the validation message
3. settings subcommand: show and save

Author: TRR Buffer Planner Team
"""

import json

import pytest

from trr_buffer.cli import main


@pytest.fixture
def base_args(tmp_path):
    """Global options that keep settings and logs inside tmp_path."""
    return ["--log-dir", str(tmp_path / "logs"), "--settings", str(tmp_path / "settings.json")]


class TestBufferCommand:
    def test_json_output(self, base_args, capsys):
        code = main(base_args + [
            "buffer", "--demands", "10 10 10 10 10 10", "--horizon-days", "30",
            "--service-level", "95", "--json",
        ])
        data = json.loads(capsys.readouterr().out)

        assert code == 0
        assert data["method"] == "Normal"
        assert data["safety_stock"] == 0.0
        assert data["total_buffer"] == pytest.approx(10.0 * (1 - 0.15 / 2))

    def test_text_output(self, base_args, capsys):
        code = main(base_args + ["buffer", "--demands", "7,8,9,9,10,10,10,11,11,12,13"])
        out = capsys.readouterr().out

        assert code == 0
        assert "Total buffer:" in out
        assert "Method:         Normal" in out

    def test_demands_from_file(self, base_args, tmp_path, capsys):
        history = tmp_path / "history.txt"
        history.write_text("0\n0\n0\n0\n0\n0\n0\n0\n0\n0\n0\n100\n", encoding="utf-8")

        code = main(base_args + [
            "buffer", "--file", str(history), "--horizon-days", "60",
            "--iterations", "10000", "--seed", "42",
        ])
        out = capsys.readouterr().out

        assert code == 0
        assert "Monte Carlo" in out
        assert "Simulation:     10,000 iterations" in out

    def test_invalid_demands(self, base_args, capsys):
        code = main(base_args + ["buffer", "--demands", "abc"])
        assert code == 2
        assert "Please enter valid demand data." in capsys.readouterr().err

    def test_invalid_service_level(self, base_args, capsys):
        code = main(base_args + ["buffer", "--demands", "1 2 3", "--service-level", "120"])
        assert code == 2
        assert "Service level must be between" in capsys.readouterr().err

    def test_negative_seed(self, base_args, capsys):
        code = main(base_args + ["buffer", "--demands", "1 2 3", "--seed", "-1"])
        assert code == 2
        assert "Random seed must be a non-negative integer" in capsys.readouterr().err

    def test_file_not_utf8(self, base_args, tmp_path, capsys):
        history = tmp_path / "history.txt"
        history.write_bytes(b"1 2 \xff\xfe 3")

        code = main(base_args + ["buffer", "--file", str(history)])
        assert code == 2
        assert "Cannot read demand file" in capsys.readouterr().err

    def test_missing_file(self, base_args, tmp_path, capsys):
        code = main(base_args + ["buffer", "--file", str(tmp_path / "nope.txt")])
        assert code == 2
        assert "Cannot read demand file" in capsys.readouterr().err


class TestReverseCommand:
    def test_constant_series(self, base_args, capsys):
        code = main(base_args + ["reverse", "--demands", "10 10 10 10 10 10", "--buffer", "9.25"])
        out = capsys.readouterr().out

        assert code == 0
        assert "TRR of up to 30.0 days" in out

    def test_json_output(self, base_args, capsys):
        code = main(base_args + ["reverse", "--demands", "10 10 10 10 10 10", "--buffer", "18.5", "--json"])
        data = json.loads(capsys.readouterr().out)

        assert code == 0
        assert data["max_horizon"] == pytest.approx(60.0)

    def test_negative_seed(self, base_args, capsys):
        code = main(base_args + ["reverse", "--demands", "1 2 3", "--buffer", "5", "--seed", "-7"])
        assert code == 2
        assert "Random seed" in capsys.readouterr().err

    def test_buffer_must_be_positive(self, base_args, capsys):
        code = main(base_args + ["reverse", "--demands", "1 2 3", "--buffer", "0"])
        assert code == 2
        assert "Current buffer must be greater than 0." in capsys.readouterr().err


class TestSettingsCommand:
    def test_show_defaults(self, base_args, capsys):
        assert main(base_args + ["settings"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["service_level_percent"] == 90.0

    def test_save(self, base_args, tmp_path, capsys):
        assert main(base_args + ["settings", "--save"]) == 0
        saved = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
        assert saved["planner"]["iterations"]["value"] == 50000

    def test_saved_defaults_feed_commands(self, base_args, tmp_path, capsys):
        (tmp_path / "settings.json").write_text(
            json.dumps({"planner": {"horizon_days": {"value": 60}}}), encoding="utf-8",
        )
        main(base_args + ["buffer", "--demands", "10 10 10 10 10 10", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["horizon_periods"] == pytest.approx(2.0)
