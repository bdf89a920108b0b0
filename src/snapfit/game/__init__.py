"""
Game layer: part state machine, timed feedback, built-in content and sessions.
"""

from snapfit.game.feedback import FrameScheduler, TimedSlot, TimerHandle
from snapfit.game.state_machine import PartStateMachine
from snapfit.game.models import build_model
from snapfit.game.levels import get_builtin_level, list_builtin_levels
from snapfit.game.session import GameSession, compute_stars

__all__ = [
    "FrameScheduler",
    "TimedSlot",
    "TimerHandle",
    "PartStateMachine",
    "build_model",
    "get_builtin_level",
    "list_builtin_levels",
    "GameSession",
    "compute_stars",
]
