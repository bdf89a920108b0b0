"""
Built-in levels.
"""

import math
from typing import List

from snapfit.core.base import SymmetryClass, Tolerance
from snapfit.core.config import LevelConfig, PartConfig
from snapfit.core.registry import LEVEL_REGISTRY, register_level


def _parts(starts) -> List[PartConfig]:
    """Three standard parts with the given (pos, rot) start poses."""
    symmetries = [
        (SymmetryClass.BOX, None),
        (SymmetryClass.CYLINDER, "y"),
        (SymmetryClass.NONE, None),
    ]
    parts = []
    for i, ((pos, rot), (symmetry, axis)) in enumerate(zip(starts, symmetries), start=1):
        parts.append(PartConfig(
            id=f"part{i}",
            model=f"part{i}",
            snap_to=f"socket{i}",
            start_pos=pos,
            start_rot=rot,
            symmetry=symmetry,
            symmetry_axis=axis,
            rot_step=15.0,
        ))
    return parts


@register_level("level_01")
def tutorial() -> LevelConfig:
    return LevelConfig(
        id="level_01",
        name="Tutorial - basic assembly",
        target="target",
        parts=_parts([
            ((-2.0, 0.5, 0.0), (0.0, 0.0, 0.0)),
            ((2.0, 0.5, 0.0), (0.0, 0.0, 0.0)),
            ((0.0, 0.5, 2.0), (0.0, 0.0, 0.0)),
        ]),
        tolerance=Tolerance(0.05, 25.0),
        time_limit_sec=180,
        hints=3,
    )


@register_level("level_02")
def rotation_puzzle() -> LevelConfig:
    return LevelConfig(
        id="level_02",
        name="Step up - rotation puzzle",
        target="target",
        parts=_parts([
            ((-2.5, 0.5, -1.0), (0.0, math.pi / 2, 0.0)),
            ((2.5, 0.5, 1.0), (0.0, -math.pi / 2, 0.0)),
            ((0.0, 0.5, 2.5), (0.0, math.pi, 0.0)),
        ]),
        tolerance=Tolerance(0.04, 20.0),
        time_limit_sec=150,
        hints=2,
    )


@register_level("level_03")
def master_challenge() -> LevelConfig:
    return LevelConfig(
        id="level_03",
        name="Challenge - road to mastery",
        target="target",
        parts=_parts([
            ((-3.0, 0.5, -2.0), (0.0, math.pi / 4, 0.0)),
            ((3.0, 0.5, 2.0), (0.0, -math.pi / 4, 0.0)),
            ((0.0, 0.5, 3.0), (0.0, math.pi * 3 / 4, 0.0)),
        ]),
        tolerance=Tolerance(0.03, 15.0),
        time_limit_sec=120,
        hints=1,
    )


def list_builtin_levels() -> List[str]:
    return sorted(LEVEL_REGISTRY.keys())


def get_builtin_level(level_id: str) -> LevelConfig:
    """Fresh copy of a built-in level; raises KeyError for unknown ids."""
    if level_id not in LEVEL_REGISTRY:
        raise KeyError(f"Unknown level '{level_id}'. Available: {', '.join(list_builtin_levels())}")
    return LEVEL_REGISTRY[level_id]()
