import numpy as np
import pytest

from snapfit.core.base import AnchorMarker, Tolerance, Transform
from snapfit.core.config import LevelConfig, PartConfig, SessionConfig
from snapfit.game.levels import get_builtin_level
from snapfit.game.session import GameSession
from snapfit.geometry.transform_math import quaternion_from_axis_angle


# Moves that bring each tutorial part's attach point onto its socket.
TUTORIAL_SOLUTION = {
    "part1": (2.0, -0.25, 0.0),
    "part2": (-2.0, 0.3, 0.0),
    "part3": (0.0, 0.75, -2.0),
}


@pytest.fixture
def rng():
    """Deterministic random generator for property-style checks."""
    return np.random.default_rng(1234)


@pytest.fixture
def tolerance():
    return Tolerance(position_epsilon=0.05, angle_epsilon_degrees=25.0)


@pytest.fixture
def origin_attach_point():
    """A single attach point sitting at the part's origin."""
    return [AnchorMarker("s1", Transform())]


def rotation(axis, degrees):
    return quaternion_from_axis_angle(axis, degrees)


@pytest.fixture
def single_part_level():
    """One part at the origin targeting socket 's1'."""
    return LevelConfig(
        id="single",
        name="Single part",
        target="target",
        parts=[PartConfig(id="p", model="part1", snap_to="s1")],
        tolerance=Tolerance(0.05, 25.0),
    )


@pytest.fixture
def tutorial_level():
    return get_builtin_level("level_01")


@pytest.fixture
def session(tutorial_level):
    """Session playing the tutorial with built-in models loaded."""
    game = GameSession(SessionConfig())
    game.load_level(tutorial_level)
    return game


def solve_part(game, part_id):
    """Grab, move onto the socket and snap one tutorial part."""
    assert game.grab(part_id)
    assert game.move(TUTORIAL_SOLUTION[part_id], part_id)
    return game.attempt_snap(part_id)
