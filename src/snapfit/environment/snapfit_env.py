"""
Tool-call environment over a snapfit game session.

Exposes the player commands (select, grab, move, rotate, snap, ...) as tools
with JSON schemas so a REPL, a script or an agent can drive a level.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from PIL import Image

from snapfit.core.base import Action, BaseEnvironment, Observation
from snapfit.core.config import Config, LevelConfig, SessionConfig, load_level
from snapfit.game.levels import get_builtin_level
from snapfit.game.session import GameSession
from snapfit.utils.display import LiveLogger


@dataclass
class SnapFitConfig:
    """Configuration for the snapfit environment."""

    level_id: str = "level_01"
    level_path: Optional[str] = None
    session: SessionConfig = field(default_factory=SessionConfig)
    render_width: int = 640
    render_height: int = 480
    render_observations: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.render_width <= 0 or self.render_height <= 0:
            raise ValueError("render size must be positive")

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> "SnapFitConfig":
        values = dict(
            session=config.session,
            render_width=config.display.render_width,
            render_height=config.display.render_height,
            verbose=config.display.verbose,
        )
        values.update(overrides)
        return cls(**values)


class SnapFitEnvironment(BaseEnvironment):
    """Tool-driven wrapper around a ``GameSession``."""

    def __init__(self, config: Optional[SnapFitConfig] = None, level: Optional[LevelConfig] = None):
        self.config = config or SnapFitConfig()
        self.logger = LiveLogger(verbose=self.config.verbose)
        self.session = GameSession(self.config.session, logger=self.logger)
        self.step_count: int = 0
        self.last_tool_call: Optional[Dict[str, Any]] = None
        self.last_tool_result: Optional[Dict[str, Any]] = None
        self._level = level
        self._tool_handlers = {
            "state": self._tool_state,
            "select": self._tool_select,
            "grab": self._tool_grab,
            "release": self._tool_release,
            "move": self._tool_move,
            "rotate": self._tool_rotate,
            "snap": self._tool_snap,
            "reset_part": self._tool_reset_part,
            "reset_level": self._tool_reset_level,
            "hint": self._tool_hint,
            "wait": self._tool_wait,
        }

    # ------------------------------------------------------------------ #
    # Environment API
    # ------------------------------------------------------------------ #
    def reset(self) -> Observation:
        """Load the configured level from scratch."""
        self.step_count = 0
        self.last_tool_call = None
        self.last_tool_result = None
        self.session.load_level(self._resolve_level())
        return self._create_observation()

    def step(self, action: Action) -> Observation:
        """Execute an action (tool call) and return the new observation."""
        self.step_count += 1
        self.last_tool_call = action.to_dict()
        self.last_tool_result = self.execute_tool_call(action.action_type, action.parameters)
        return self._create_observation()

    def render(self) -> Image.Image:
        """Render the session to a PIL image."""
        if self.session.level is None:
            return Image.new("RGB", (self.config.render_width, self.config.render_height), color="white")
        from snapfit.utils.visualizer import render_session

        return render_session(self.session, self.config.render_width, self.config.render_height)

    def get_tool_schemas(self) -> List[Dict[str, Any]]:
        """Return JSON schemas for the tools."""
        def build_schema(name: str, desc: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
            return {
                "type": "function",
                "function": {
                    "name": name,
                    "description": desc,
                    "parameters": {
                        "type": "object",
                        "properties": properties,
                        "required": required,
                    },
                },
            }

        part_id = {"type": "string", "description": "Part identifier; defaults to the selected part."}
        return [
            build_schema("state", "Show the level, every part's pose and status, and the stats.", {}, []),
            build_schema(
                "select",
                "Select a part by id, by zero-based index, or cycle with direction 'next'/'prev'.",
                {
                    "part_id": {"type": "string"},
                    "index": {"type": "integer", "minimum": 0},
                    "direction": {"type": "string", "enum": ["next", "prev"]},
                },
                [],
            ),
            build_schema("grab", "Grab an idle part so it can be moved and rotated.", {"part_id": part_id}, []),
            build_schema("release", "Release a grabbed part where it is.", {"part_id": part_id}, []),
            build_schema(
                "move",
                "Translate a grabbed part by a delta vector (x, y, z), y is up.",
                {
                    "delta": {
                        "type": "array",
                        "items": {"type": "number"},
                        "minItems": 3,
                        "maxItems": 3,
                    },
                    "part_id": part_id,
                },
                ["delta"],
            ),
            build_schema(
                "rotate",
                "Rotate a grabbed part about one axis. Degrees default to the part's rotation step.",
                {
                    "axis": {"type": "string", "enum": ["x", "y", "z"]},
                    "degrees": {"type": "number"},
                    "part_id": part_id,
                },
                ["axis"],
            ),
            build_schema(
                "snap",
                "Try to lock a grabbed part onto its socket. Fails if it is too far, misoriented, or near the wrong socket.",
                {"part_id": part_id},
                [],
            ),
            build_schema("reset_part", "Put a part back at its start pose.", {"part_id": part_id}, []),
            build_schema("reset_level", "Restart the level.", {}, []),
            build_schema("hint", "Show where the selected part belongs. Uses one hint.", {}, []),
            build_schema(
                "wait",
                "Let time pass; feedback and hints clear, the level timer runs.",
                {"seconds": {"type": "number", "minimum": 0}},
                ["seconds"],
            ),
        ]

    def execute_tool_call(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Dispatch tool calls; never raises."""
        handler = self._tool_handlers.get(tool_name)
        if not handler:
            return {"status": "error", "message": f"Unknown tool '{tool_name}'"}
        try:
            return handler(**(arguments or {}))
        except Exception as exc:
            return {"status": "error", "message": f"Tool '{tool_name}' failed: {exc}"}

    def close(self) -> None:
        self.session.scheduler.cancel_all()
        self.session.level = None

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _resolve_level(self) -> LevelConfig:
        if self._level is not None:
            return self._level
        if self.config.level_path:
            self._level = load_level(self.config.level_path)
        else:
            self._level = get_builtin_level(self.config.level_id)
        return self._level

    def _create_observation(self) -> Observation:
        state = self.session.to_dict()
        state["step"] = self.step_count
        if self.last_tool_call is not None:
            state["tool_call"] = self.last_tool_call
            state["tool_result"] = self.last_tool_result
        image = self.render() if self.config.render_observations else None
        return Observation(state=state, description=self._get_state_description(), image=image)

    def _get_state_description(self) -> str:
        """Textual summary of the session."""
        session = self.session
        if session.level is None:
            return "No level loaded."
        lines = [
            f"Level: {session.level.name} ({session.level.id}) - {session.phase.value}",
            f"Snapped: {session.machine.snapped_count()}/{len(session.machine.ids)}, "
            f"elapsed {session.stats.elapsed:.1f}s, hints used {session.stats.hints_used}, "
            f"mistakes {session.stats.mistakes}",
        ]
        if session.time_remaining is not None:
            lines.append(f"Time remaining: {session.time_remaining:.1f}s")
        for part in session.parts:
            marker = "*" if part.id == session.selected_part_id else " "
            pos = tuple(round(c, 3) for c in part.pose.position)
            lines.append(f"{marker} {part.id}: {part.status.value} at {pos}, target '{part.target_socket_name}'")
        if self.last_tool_call and self.last_tool_result:
            lines.append(
                f"Last tool: {self.last_tool_call.get('action_type')} with {self.last_tool_call.get('parameters')}, "
                f"result: {self.last_tool_result.get('status')} - {self.last_tool_result.get('message')}"
            )
        feedback = session.current_feedback
        if feedback is not None:
            lines.append(f"Feedback: {feedback.message}")
        if session.is_complete():
            lines.append(f"Level complete with {session.stats.stars} star(s).")
        return "\n".join(lines)

    def _check_part(self, part_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """Error dict if the command cannot address a part, else None."""
        if not self.session.is_playing:
            return {"status": "error", "message": f"Level is not being played ({self.session.phase.value})"}
        if part_id is None:
            if self.session.selected_part_id is None:
                return {"status": "error", "message": "No part selected"}
            return None
        if self.session.get_part(part_id) is None:
            return {"status": "error", "message": f"Part '{part_id}' not found"}
        return None

    def _part_result(self, ok: bool, part_id: Optional[str], done: str, refused: str) -> Dict[str, Any]:
        pid = part_id or self.session.selected_part_id
        part = self.session.get_part(pid)
        if ok:
            return {"status": "success", "message": done.format(pid), "part": part.to_dict()}
        return {
            "status": "error",
            "message": refused.format(pid) + f" (part is {part.status.value})",
        }

    # ------------------------------------------------------------------ #
    # Tool implementations
    # ------------------------------------------------------------------ #
    def _tool_state(self) -> Dict[str, Any]:
        if self.session.level is None:
            return {"status": "error", "message": "No level loaded"}
        return {"status": "success", "message": "State retrieved", "state": self.session.to_dict()}

    def _tool_select(self, part_id: Optional[str] = None, index: Optional[int] = None,
                     direction: Optional[str] = None) -> Dict[str, Any]:
        if not self.session.is_playing:
            return {"status": "error", "message": f"Level is not being played ({self.session.phase.value})"}
        if part_id is not None:
            ok = self.session.select_part(part_id)
            if not ok:
                return {"status": "error", "message": f"Part '{part_id}' not found"}
        elif index is not None:
            if not self.session.select_index(int(index)):
                return {"status": "error", "message": f"No part at index {index}"}
        elif direction in (None, "next"):
            self.session.select_next()
        elif direction == "prev":
            self.session.select_prev()
        else:
            return {"status": "error", "message": f"Unknown direction '{direction}'"}
        return {"status": "success", "message": f"Selected {self.session.selected_part_id}",
                "selected": self.session.selected_part_id}

    def _tool_grab(self, part_id: Optional[str] = None) -> Dict[str, Any]:
        error = self._check_part(part_id)
        if error:
            return error
        ok = self.session.grab(part_id)
        return self._part_result(ok, part_id, "Grabbed {}", "Cannot grab {}")

    def _tool_release(self, part_id: Optional[str] = None) -> Dict[str, Any]:
        error = self._check_part(part_id)
        if error:
            return error
        ok = self.session.release(part_id)
        return self._part_result(ok, part_id, "Released {}", "Cannot release {}")

    def _tool_move(self, delta: List[float], part_id: Optional[str] = None) -> Dict[str, Any]:
        error = self._check_part(part_id)
        if error:
            return error
        if not isinstance(delta, (list, tuple)) or len(delta) != 3:
            return {"status": "error", "message": "delta must be a list of 3 numbers"}
        ok = self.session.move([float(d) for d in delta], part_id)
        return self._part_result(ok, part_id, "Moved {}", "Cannot move {}, grab it first")

    def _tool_rotate(self, axis: str, degrees: Optional[float] = None,
                     part_id: Optional[str] = None) -> Dict[str, Any]:
        error = self._check_part(part_id)
        if error:
            return error
        if str(axis).lower() not in ("x", "y", "z"):
            return {"status": "error", "message": f"Unknown axis '{axis}'"}
        if degrees is None:
            degrees = self.session.get_part(part_id or self.session.selected_part_id).config.rot_step
        ok = self.session.rotate(axis, float(degrees), part_id)
        return self._part_result(ok, part_id, f"Rotated {{}} by {float(degrees):g} deg about {axis}",
                                 "Cannot rotate {}, grab it first")

    def _tool_snap(self, part_id: Optional[str] = None) -> Dict[str, Any]:
        error = self._check_part(part_id)
        if error:
            return error
        pid = part_id or self.session.selected_part_id
        outcome = self.session.attempt_snap(pid)
        if outcome is None:
            status = self.session.get_part(pid).status.value
            return {"status": "error", "message": f"Cannot snap {pid}, grab it first (part is {status})"}
        result = {
            "status": "success" if outcome.commits else "error",
            "message": self.session.current_feedback.message,
            "outcome": outcome.to_dict(),
        }
        if self.session.is_complete():
            result["level_complete"] = True
            result["stats"] = self.session.stats.to_dict()
        return result

    def _tool_reset_part(self, part_id: Optional[str] = None) -> Dict[str, Any]:
        error = self._check_part(part_id)
        if error:
            return error
        ok = self.session.reset_part(part_id)
        return self._part_result(ok, part_id, "Reset {} to its start pose", "Cannot reset {}")

    def _tool_reset_level(self) -> Dict[str, Any]:
        if not self.session.reset_level():
            return {"status": "error", "message": "No level loaded"}
        return {"status": "success", "message": f"Level '{self.session.level.id}' restarted"}

    def _tool_hint(self) -> Dict[str, Any]:
        if not self.session.request_hint():
            if not self.session.is_playing:
                return {"status": "error", "message": f"Level is not being played ({self.session.phase.value})"}
            if self.session.selected_part_id is None:
                return {"status": "error", "message": "Select a part first"}
            return {"status": "error", "message": "No hints left"}
        position = self.session.hint_target_position()
        return {
            "status": "success",
            "message": f"{self.session.hint.value} belongs at {position}",
            "target_position": list(position) if position is not None else None,
            "hints_remaining": self.session.hints_remaining,
        }

    def _tool_wait(self, seconds: float) -> Dict[str, Any]:
        seconds = float(seconds)
        if seconds < 0:
            return {"status": "error", "message": "seconds must be non-negative"}
        self.session.tick(seconds)
        return {"status": "success", "message": f"Waited {seconds:g}s", "phase": self.session.phase.value}
