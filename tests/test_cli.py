"""
Tests for the command-line interface and the session logger.
"""

import json
import os

import pytest
from PIL import Image

from snapfit.cli import main, parse_command, resolve_level
from snapfit.core.config import load_level
from snapfit.utils.logger import SessionLogger


def feed_input(monkeypatch, lines):
    """Replace input() with a scripted sequence that ends in EOF."""
    remaining = list(lines)

    def fake_input(prompt=""):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    monkeypatch.setattr("builtins.input", fake_input)


class TestParseCommand:
    """Tests for REPL command parsing."""

    @pytest.mark.parametrize("line, action_type, params", [
        ("grab", "grab", {}),
        ("  SNAP ", "snap", {}),
        ("reset", "reset_part", {}),
        ("restart", "reset_level", {}),
        ("next", "select", {"direction": "next"}),
        ("select 2", "select", {"index": 1}),
        ("select part3", "select", {"part_id": "part3"}),
        ("up", "move", {"delta": [0.0, 0.02, 0.0]}),
        ("left", "move", {"delta": [-0.05, 0.0, 0.0]}),
        ("forward fine", "move", {"delta": [0.0, 0.0, -0.01]}),
        ("move 1 -0.5 2", "move", {"delta": [1.0, -0.5, 2.0]}),
        ("rotate Y", "rotate", {"axis": "y"}),
        ("rotate x 45", "rotate", {"axis": "x", "degrees": 45.0}),
        ("rotate z coarse", "rotate", {"axis": "z", "degrees": 90.0}),
        ("wait 2.5", "wait", {"seconds": 2.5}),
    ])
    def test_commands_map_to_actions(self, line, action_type, params):
        action = parse_command(line)
        assert action.action_type == action_type
        assert action.parameters == params

    def test_empty_line_returns_none(self):
        assert parse_command("   ") is None

    @pytest.mark.parametrize("line", ["jump", "select", "move 1 2", "rotate w", "wait"])
    def test_bad_commands_raise_value_error(self, line):
        with pytest.raises(ValueError):
            parse_command(line)


class TestResolveLevel:
    """Tests for level references."""

    def test_builtin_id(self):
        assert resolve_level("level_02").id == "level_02"

    def test_path(self, tmp_path):
        path = tmp_path / "mine.yaml"
        assert main(["create-level", "--output", str(path), "--from-level", "level_03"]) == 0
        assert resolve_level(str(path)).id == "level_03"


class TestMain:
    """Tests for CLI sub-commands."""

    def test_no_arguments_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_list_levels_json(self, capsys):
        assert main(["list-levels", "--format", "json"]) == 0
        levels = json.loads(capsys.readouterr().out)
        assert [lv["id"] for lv in levels] == ["level_01", "level_02", "level_03"]

    def test_list_levels_table(self, capsys):
        assert main(["list-levels"]) == 0
        assert "level_02" in capsys.readouterr().out

    def test_create_level_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "level.yaml"
        assert main(["create-level", "--output", str(path)]) == 0
        assert load_level(str(path)).id == "level_01"
        assert main(["create-level", "--output", str(path)]) == 1
        assert main(["create-level", "--output", str(path), "--force"]) == 0

    def test_create_level_unknown_builtin_fails(self, tmp_path):
        assert main(["create-level", "--output", str(tmp_path / "x.yaml"), "--from-level", "nope"]) == 1

    def test_validate_level(self, tmp_path):
        path = tmp_path / "level.yaml"
        main(["create-level", "--output", str(path)])
        assert main(["validate-level", str(path)]) == 0
        assert main(["validate-level", "level_01", "--strict"]) == 0
        assert main(["validate-level", str(tmp_path / "missing.yaml")]) == 1

    def test_validate_level_reports_missing_socket(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text(
            "id: broken\nname: Broken\ntarget: target\n"
            "parts:\n  - {id: p, model: part1, snap_to: socket9}\n"
        )
        assert main(["validate-level", str(path)]) == 1

    def test_render_writes_png(self, tmp_path):
        output = tmp_path / "level.png"
        assert main(["render", "--output", str(output), "--width", "320", "--height", "240"]) == 0
        with Image.open(output) as image:
            assert image.size == (320, 240)


class TestPlay:
    """Tests for the interactive play loop."""

    def test_play_tutorial_to_completion(self, monkeypatch, capsys):
        feed_input(monkeypatch, [
            "select part1", "grab", "move 2 -0.25 0", "snap",
            "select 2", "grab", "move -2 0.3 0", "snap",
            "next", "grab", "move 0 0.75 -2", "snap",
        ])
        assert main(["play", "--level", "level_01"]) == 0
        out = capsys.readouterr().out
        assert "Level Complete!" in out
        assert "★★★" in out

    def test_play_handles_bad_commands_and_quit(self, monkeypatch, capsys):
        feed_input(monkeypatch, ["help", "dance", "", "grab", "quit"])
        assert main(["play"]) == 0
        out = capsys.readouterr().out
        assert "Unknown command: dance" in out
        assert "No part selected" in out
        assert "Session ended" in out

    def test_play_unknown_level_fails(self, monkeypatch):
        feed_input(monkeypatch, [])
        assert main(["play", "--level", "no_such_level.yaml"]) == 1

    def test_play_writes_session_log(self, monkeypatch, tmp_path):
        feed_input(monkeypatch, ["select part1", "grab", "snap"])
        assert main(["play", "--log-dir", str(tmp_path)]) == 0
        (run_dir,) = list(tmp_path.iterdir())
        with open(run_dir / "session_log.json", encoding="utf-8") as f:
            log = json.load(f)
        assert [s["step_type"] for s in log["steps"]] == ["initial", "action", "action", "action"]
        assert log["final_state"]["stats"]["mistakes"] == 1
        assert "Snap Attempts: 1" in (run_dir / "summary.txt").read_text(encoding="utf-8")


class TestSessionLogger:
    """Tests for SessionLogger."""

    def test_frames_are_written_and_replaced_by_path(self, tmp_path):
        logger = SessionLogger(str(tmp_path), "level_01")
        logger.log_step(0, {"step_type": "initial", "image": Image.new("RGB", (8, 8))})
        logger.log_step(1, {"step_type": "action", "action": {"action_type": "grab"},
                            "tool_result": {"status": "error", "message": "No part selected"},
                            "image": None})
        assert "image" not in logger.logs[0]
        assert os.path.exists(logger.logs[0]["image_path"])
        assert "image_path" not in logger.logs[1]

    def test_save_logs_writes_json_and_summary(self, tmp_path):
        logger = SessionLogger(str(tmp_path), "level_01")
        logger.log_step(1, {"step_type": "action", "action": {"action_type": "snap", "parameters": {}},
                            "tool_result": {"status": "error", "message": "miss"}})
        logger.set_final_state({"phase": "playing", "snapped": 0, "total_parts": 3, "stats": {}})
        path = logger.save_logs(verbose=False)
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["final_state"]["phase"] == "playing"
        summary = open(os.path.join(logger.run_dir, "summary.txt"), encoding="utf-8").read()
        assert "Rejected Commands: 1" in summary
        assert "Parts Snapped: 0/3" in summary
