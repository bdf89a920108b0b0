"""
Tests for the tool-call environment.
"""

import math

import pytest

from snapfit.core.base import Action
from snapfit.core.config import Config, DisplayConfig
from snapfit.environment.snapfit_env import SnapFitConfig, SnapFitEnvironment


@pytest.fixture
def env():
    environment = SnapFitEnvironment(SnapFitConfig(level_id="level_01"))
    environment.reset()
    yield environment
    environment.close()


class TestEnvironmentLifecycle:
    """Tests for reset/step/observation."""

    def test_reset_returns_initial_observation(self):
        env = SnapFitEnvironment()
        obs = env.reset()
        assert obs.state["level"] == "level_01"
        assert obs.state["step"] == 0
        assert "tool_call" not in obs.state
        assert obs.image is None
        assert "Snapped: 0/3" in obs.description

    def test_step_records_tool_call_and_result(self, env):
        obs = env.step(Action("select", {"part_id": "part2"}))
        assert obs.state["step"] == 1
        assert obs.state["tool_call"] == {"action_type": "select", "parameters": {"part_id": "part2"}}
        assert obs.state["tool_result"]["status"] == "success"
        assert obs.state["selected_part"] == "part2"
        assert "* part2" in obs.description

    def test_config_from_runtime_config(self):
        config = Config(display=DisplayConfig(render_width=320, render_height=200, verbose=True))
        env_config = SnapFitConfig.from_config(config, level_id="level_02")
        assert env_config.render_width == 320
        assert env_config.verbose is True
        assert env_config.level_id == "level_02"

    def test_invalid_render_size_raises_error(self):
        with pytest.raises(ValueError):
            SnapFitConfig(render_width=0)

    def test_schemas_cover_every_tool(self, env):
        names = [s["function"]["name"] for s in env.get_tool_schemas()]
        assert names == list(env._tool_handlers)


class TestToolCalls:
    """Tests for individual tools."""

    def test_unknown_tool_returns_error(self, env):
        result = env.execute_tool_call("fly", {})
        assert result["status"] == "error"
        assert "Unknown tool" in result["message"]

    def test_bad_arguments_return_error_instead_of_raising(self, env):
        result = env.execute_tool_call("move", {"vector": [1, 2, 3]})
        assert result["status"] == "error"
        assert "failed" in result["message"]

    def test_grab_without_selection_returns_error(self, env):
        result = env.execute_tool_call("grab", {})
        assert result == {"status": "error", "message": "No part selected"}

    def test_grab_unknown_part_returns_error(self, env):
        result = env.execute_tool_call("grab", {"part_id": "part9"})
        assert result["message"] == "Part 'part9' not found"

    def test_move_requires_grab(self, env):
        env.execute_tool_call("select", {"index": 0})
        result = env.execute_tool_call("move", {"delta": [1, 0, 0]})
        assert result["status"] == "error"
        assert "grab it first" in result["message"]

    def test_move_with_bad_delta_returns_error(self, env):
        env.execute_tool_call("grab", {"part_id": "part1"})
        result = env.execute_tool_call("move", {"delta": [1, 0]})
        assert result["status"] == "error"

    def test_select_grab_move_snap_succeeds(self, env):
        assert env.execute_tool_call("select", {"direction": "next"})["selected"] == "part1"
        assert env.execute_tool_call("grab", {})["status"] == "success"
        moved = env.execute_tool_call("move", {"delta": [2.0, -0.25, 0.0]})
        assert moved["part"]["pose"]["position"] == pytest.approx([0.0, 0.25, 0.0])
        result = env.execute_tool_call("snap", {})
        assert result["status"] == "success"
        assert result["outcome"]["is_correct_target"] is True
        assert "level_complete" not in result

    def test_snap_miss_reports_feedback(self, env):
        env.execute_tool_call("grab", {"part_id": "part1"})
        result = env.execute_tool_call("snap", {"part_id": "part1"})
        assert result["status"] == "error"
        assert "not close enough" in result["message"]
        assert env.session.stats.mistakes == 1

    def test_snap_when_not_grabbed_returns_error(self, env):
        result = env.execute_tool_call("snap", {"part_id": "part1"})
        assert result["status"] == "error"
        assert "grab it first" in result["message"]

    def test_rotate_defaults_to_part_step(self, env):
        env.execute_tool_call("grab", {"part_id": "part1"})
        result = env.execute_tool_call("rotate", {"axis": "y"})
        assert result["status"] == "success"
        assert env.session.get_part("part1").rotation[1] == pytest.approx(math.radians(15))

    def test_rotate_unknown_axis_returns_error(self, env):
        env.execute_tool_call("grab", {"part_id": "part1"})
        assert env.execute_tool_call("rotate", {"axis": "q"})["status"] == "error"

    def test_hint_flow(self, env):
        assert env.execute_tool_call("hint", {})["message"] == "Select a part first"
        env.execute_tool_call("select", {"part_id": "part3"})
        result = env.execute_tool_call("hint", {})
        assert result["status"] == "success"
        assert result["target_position"] == pytest.approx([0.0, 1.1, 0.0])
        assert result["hints_remaining"] == 2

    def test_wait_advances_clock_and_fails_on_timeout(self, env):
        assert env.execute_tool_call("wait", {"seconds": -1})["status"] == "error"
        result = env.execute_tool_call("wait", {"seconds": 200})
        assert result["phase"] == "fail"
        assert env.execute_tool_call("grab", {"part_id": "part1"})["status"] == "error"

    def test_reset_level_restarts_after_failure(self, env):
        env.execute_tool_call("wait", {"seconds": 200})
        assert env.execute_tool_call("reset_level", {})["status"] == "success"
        assert env.session.is_playing

    def test_state_tool(self, env):
        result = env.execute_tool_call("state", {})
        assert result["state"]["total_parts"] == 3


class TestRender:
    """Tests for rendering."""

    def test_render_matches_configured_size(self, env):
        image = env.render()
        assert image.size == (640, 480)
        assert image.mode == "RGB"

    def test_render_without_level_is_blank(self):
        env = SnapFitEnvironment(SnapFitConfig(render_width=64, render_height=48))
        image = env.render()
        assert image.size == (64, 48)
        assert image.getpixel((0, 0)) == (255, 255, 255)
