"""
Game session: the explicitly owned state of one play-through.

A ``GameSession`` owns the anchor registry, the part state machine, the
selection, the transient feedback and hint slots and the level statistics.
Renderers and input layers hold a reference to it; nothing here is global.
"""

from typing import Any, Dict, List, Optional, Tuple

from snapfit.core.base import (
    AnchorMarker, GamePhase, GameStats, PartStatus, SnapFeedback, SnapOutcome,
    Transform, Vector3,
)
from snapfit.core.config import LevelConfig, SessionConfig, warn_unmatched_targets
from snapfit.game.feedback import FrameScheduler, TimedSlot
from snapfit.game.models import build_model
from snapfit.game.state_machine import PartStateMachine
from snapfit.geometry.transform_math import lerp_transform
from snapfit.snapping.anchor_registry import AnchorRegistry
from snapfit.snapping.extraction import extract_attach_points
from snapfit.utils.display import LiveLogger


def compute_stars(hints_used: int, mistakes: int) -> int:
    """3 stars for a clean run, 2 for at most two penalties, otherwise 1."""
    penalties = hints_used + mistakes
    if penalties == 0:
        return 3
    if penalties <= 2:
        return 2
    return 1


class GameSession:
    """Session state and the command/query surface used by the input layer."""

    def __init__(self, config: Optional[SessionConfig] = None, logger: Optional[LiveLogger] = None):
        self.config = config or SessionConfig()
        self.logger = logger or LiveLogger(verbose=False)
        self.scheduler = FrameScheduler()
        self.registry = AnchorRegistry()
        self.machine = PartStateMachine(self.registry, seat_attach_point=self.config.seat_attach_point)
        self.level: Optional[LevelConfig] = None
        self.phase: GamePhase = GamePhase.TITLE
        self.selected_part_id: Optional[str] = None
        self.stats = GameStats()
        self.last_outcome: Optional[SnapOutcome] = None
        self.feedback: TimedSlot[SnapFeedback] = TimedSlot(self.scheduler, self.config.feedback_seconds)
        self.hint: TimedSlot[str] = TimedSlot(self.scheduler, self.config.hint_seconds)
        # part id -> (pose before the snap, clock time of the snap)
        self._snap_animations: Dict[str, Tuple[Transform, float]] = {}

    # ------------------------------------------------------------------ #
    # Level lifecycle
    # ------------------------------------------------------------------ #
    def load_level(self, level: LevelConfig, load_models: bool = True) -> None:
        """
        Start ``level`` from scratch.

        Args:
            level: Level to play
            load_models: Resolve and extract the target and part models right
                away. When False the caller reports them later through
                ``on_target_loaded``/``on_part_loaded``; until then snapping
                fails for lack of data.
        """
        self.feedback.clear()
        self.hint.clear()
        self.scheduler.cancel_all()
        self.level = level
        self.registry.clear()
        self.machine.load(level)
        self.selected_part_id = None
        self.stats = GameStats()
        self.last_outcome = None
        self._snap_animations = {}
        self.phase = GamePhase.PLAYING
        self.logger.log_info(f"Loaded level '{level.id}' ({level.name}) with {len(level.parts)} parts")

        if not load_models:
            return
        target = build_model(level.target, level)
        if target is None:
            self.logger.log_warning(f"Target model '{level.target}' not found")
        else:
            self.on_target_loaded(target)
        for part in level.parts:
            model = build_model(part.model, level)
            if model is None:
                self.logger.log_warning(f"Model '{part.model}' of part '{part.id}' not found")
                continue
            self.on_part_loaded(part.id, model)

    def on_target_loaded(self, target_model) -> Tuple[AnchorMarker, ...]:
        """Rebuild the socket snapshot from a freshly loaded target model."""
        sockets = self.registry.load_from(target_model)
        self.logger.log_info(f"Extracted {len(sockets)} sockets: {', '.join(self.registry.names())}")
        if self.level is not None:
            warn_unmatched_targets(self.level, self.registry.names())
        return sockets

    def on_part_loaded(self, part_id: str, part_model) -> List[AnchorMarker]:
        """Rebuild a part's attach points from its freshly loaded model."""
        attach_points = extract_attach_points(part_model)
        if not self.machine.set_attach_points(part_id, attach_points):
            self.logger.log_warning(f"Loaded model for unknown part '{part_id}'")
            return []
        if not attach_points:
            self.logger.log_warning(f"Part '{part_id}' has no attach points and can never snap")
        else:
            self.logger.log_info(f"Part '{part_id}': {len(attach_points)} attach point(s)")
        return attach_points

    def reset_level(self) -> bool:
        """Restart the current level immediately, keeping the loaded geometry."""
        if self.level is None:
            return False
        attach_points = {p.id: p.attach_points for p in self.machine.records}
        sockets = self.registry.sockets
        loaded = self.registry.is_loaded
        self.load_level(self.level, load_models=False)
        if loaded:
            self.registry.update(list(sockets))
        for part_id, points in attach_points.items():
            self.machine.set_attach_points(part_id, points)
        return True

    # ------------------------------------------------------------------ #
    # Phase and timing
    # ------------------------------------------------------------------ #
    @property
    def is_playing(self) -> bool:
        return self.phase == GamePhase.PLAYING

    def pause(self) -> bool:
        if self.phase != GamePhase.PLAYING:
            return False
        self.phase = GamePhase.PAUSED
        return True

    def resume(self) -> bool:
        if self.phase != GamePhase.PAUSED:
            return False
        self.phase = GamePhase.PLAYING
        return True

    def tick(self, dt: float) -> None:
        """
        Per-frame update: advance the clock and fire due feedback/hint clears.

        Level time only runs while playing; running out of time fails the level.
        """
        if self.is_playing:
            self.stats.elapsed += dt
            limit = self.level.time_limit_sec if self.level else None
            if self.config.enforce_time_limit and limit is not None and self.stats.elapsed >= limit:
                self.phase = GamePhase.FAIL
                self.logger.log_result(f"Time is up after {limit:g}s", success=False)
        self.scheduler.advance(dt)

    @property
    def time_remaining(self) -> Optional[float]:
        if self.level is None or self.level.time_limit_sec is None:
            return None
        return max(0.0, self.level.time_limit_sec - self.stats.elapsed)

    # ------------------------------------------------------------------ #
    # Selection
    # ------------------------------------------------------------------ #
    def select_next(self) -> Optional[str]:
        ids = self.machine.ids
        if not self.is_playing or not ids:
            return self.selected_part_id
        index = ids.index(self.selected_part_id) if self.selected_part_id in ids else -1
        self.selected_part_id = ids[(index + 1) % len(ids)]
        return self.selected_part_id

    def select_prev(self) -> Optional[str]:
        ids = self.machine.ids
        if not self.is_playing or not ids:
            return self.selected_part_id
        index = ids.index(self.selected_part_id) if self.selected_part_id in ids else -1
        self.selected_part_id = ids[-1] if index <= 0 else ids[index - 1]
        return self.selected_part_id

    def select_part(self, part_id: str) -> bool:
        if not self.is_playing or self.machine.get(part_id) is None:
            return False
        self.selected_part_id = part_id
        return True

    def select_index(self, index: int) -> bool:
        """Select by zero-based position in the level's part order."""
        ids = self.machine.ids
        if not 0 <= index < len(ids):
            return False
        return self.select_part(ids[index])

    # ------------------------------------------------------------------ #
    # Part commands (default to the selected part)
    # ------------------------------------------------------------------ #
    def _resolve(self, part_id: Optional[str]) -> Optional[str]:
        if not self.is_playing:
            return None
        return part_id if part_id is not None else self.selected_part_id

    def grab(self, part_id: Optional[str] = None) -> bool:
        part_id = self._resolve(part_id)
        if part_id is None or not self.machine.grab(part_id):
            return False
        self.selected_part_id = part_id
        return True

    def release(self, part_id: Optional[str] = None) -> bool:
        part_id = self._resolve(part_id)
        return part_id is not None and self.machine.release(part_id)

    def toggle_grab(self, part_id: Optional[str] = None) -> bool:
        part_id = self._resolve(part_id)
        part = self.machine.get(part_id) if part_id is not None else None
        if part is None:
            return False
        if part.status == PartStatus.GRABBED:
            return self.release(part_id)
        return self.grab(part_id)

    def move(self, delta, part_id: Optional[str] = None) -> bool:
        part_id = self._resolve(part_id)
        return part_id is not None and self.machine.move(part_id, delta)

    def rotate(self, axis: str, degrees: float, part_id: Optional[str] = None) -> bool:
        part_id = self._resolve(part_id)
        return part_id is not None and self.machine.rotate(part_id, axis, degrees)

    def reset_part(self, part_id: Optional[str] = None) -> bool:
        part_id = self._resolve(part_id)
        if part_id is None or not self.machine.reset(part_id):
            return False
        self._snap_animations.pop(part_id, None)
        return True

    def attempt_snap(self, part_id: Optional[str] = None) -> Optional[SnapOutcome]:
        """
        Try to snap a grabbed part and publish the feedback.

        Returns:
            The snap outcome, or None when no attempt was made (not playing,
            unknown part or part not grabbed)
        """
        part_id = self._resolve(part_id)
        part = self.machine.get(part_id) if part_id is not None else None
        if part is None:
            return None
        before = part.pose
        outcome = self.machine.attempt_snap(part_id)
        if outcome is None:
            return None

        self.last_outcome = outcome
        if outcome.commits:
            message = f"{part_id} snapped to '{outcome.matched_socket.name}'"
            if self.config.snap_animation_seconds > 0:
                self._snap_animations[part_id] = (before, self.scheduler.now)
            self.logger.log_result(message)
        elif outcome.success:
            self.stats.mistakes += 1
            message = (f"Wrong socket: {part_id} is near '{outcome.matched_socket.name}', "
                       f"it belongs on '{part.target_socket_name}'")
            self.logger.log_result(message, success=False)
        else:
            self.stats.mistakes += 1
            message = f"{part_id} is not close enough to a socket"
            self.logger.log_result(message, success=False)

        self.feedback.set(SnapFeedback(
            part_id=part_id,
            success=outcome.success,
            is_correct_target=bool(outcome.is_correct_target),
            message=message,
        ))
        if outcome.commits and self.machine.is_assembled():
            self._complete()
        return outcome

    def _complete(self) -> None:
        self.stats.stars = compute_stars(self.stats.hints_used, self.stats.mistakes)
        self.phase = GamePhase.SUCCESS
        self.logger.log_result(
            f"Level complete in {self.stats.elapsed:.1f}s with {self.stats.stars} star(s)"
        )

    # ------------------------------------------------------------------ #
    # Hints
    # ------------------------------------------------------------------ #
    @property
    def hints_remaining(self) -> Optional[int]:
        if self.level is None or self.level.hints is None:
            return None
        return max(0, self.level.hints - self.stats.hints_used)

    def request_hint(self) -> bool:
        """Show the selected part's target socket for a few seconds, if budget allows."""
        if not self.is_playing or self.selected_part_id is None:
            return False
        remaining = self.hints_remaining
        if remaining is not None and remaining <= 0:
            return False
        self.stats.hints_used += 1
        self.hint.set(self.selected_part_id)
        return True

    def hint_target_position(self, part_id: Optional[str] = None) -> Optional[Vector3]:
        """
        Position of the socket a part belongs on.

        Defaults to the part whose hint is showing; None if no hint is active
        or the target has not been loaded.
        """
        part_id = part_id if part_id is not None else self.hint.value
        part = self.machine.get(part_id) if part_id is not None else None
        if part is None:
            return None
        socket = self.registry.get(part.target_socket_name)
        return socket.position if socket is not None else None

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    @property
    def parts(self):
        return self.machine.records

    def get_part(self, part_id: str):
        return self.machine.get(part_id)

    @property
    def current_feedback(self) -> Optional[SnapFeedback]:
        return self.feedback.value

    def is_complete(self) -> bool:
        return self.machine.is_assembled()

    def visual_pose(self, part_id: str) -> Optional[Transform]:
        """Pose to draw: eases into a freshly snapped socket, otherwise the logical pose."""
        part = self.machine.get(part_id)
        if part is None:
            return None
        animation = self._snap_animations.get(part_id)
        if animation is None or not part.is_snapped:
            return part.pose
        start_pose, started = animation
        alpha = (self.scheduler.now - started) / self.config.snap_animation_seconds
        if alpha >= 1.0:
            del self._snap_animations[part_id]
            return part.pose
        return lerp_transform(start_pose, part.pose, alpha)

    def to_dict(self) -> Dict[str, Any]:
        feedback = self.feedback.value
        hint_target = self.hint_target_position()
        return {
            "level": self.level.id if self.level else None,
            "level_name": self.level.name if self.level else None,
            "phase": self.phase.value,
            "selected_part": self.selected_part_id,
            "parts": [p.to_dict() for p in self.machine.records],
            "snapped": self.machine.snapped_count(),
            "total_parts": len(self.machine.ids),
            "sockets": [s.to_dict() for s in self.registry.sockets],
            "feedback": feedback.to_dict() if feedback else None,
            "last_outcome": self.last_outcome.to_dict() if self.last_outcome else None,
            "hint_part": self.hint.value,
            "hint_target": list(hint_target) if hint_target is not None else None,
            "hints_remaining": self.hints_remaining,
            "time_remaining": self.time_remaining,
            "stats": self.stats.to_dict(),
        }
