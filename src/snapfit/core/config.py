"""
Configuration management for snapfit.

This module handles loading and validation of level files and runtime
configuration, and provides typed configuration objects.
"""

import math
import os
import warnings
import yaml
from typing import Any, Dict, Optional, List, Tuple
from dataclasses import dataclass, field
from pathlib import Path

from snapfit.core.base import SymmetryClass, Tolerance, Transform


@dataclass
class PartConfig:
    """Configuration of a single movable part."""
    id: str
    model: str
    snap_to: str
    start_pos: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    start_rot: Tuple[float, float, float] = (0.0, 0.0, 0.0)  # Euler XYZ, radians
    symmetry: SymmetryClass = SymmetryClass.NONE
    symmetry_axis: Optional[str] = None
    rot_step: float = 15.0

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("part id must be a non-empty string")
        if not isinstance(self.model, str) or not self.model:
            raise ValueError(f"part '{self.id}': model must be a non-empty string")
        if not isinstance(self.snap_to, str) or not self.snap_to:
            raise ValueError(f"part '{self.id}': snap_to must be a non-empty string")
        if not isinstance(self.start_pos, (tuple, list)) or len(self.start_pos) != 3:
            raise ValueError(f"part '{self.id}': start pos must be a tuple of 3 floats")
        if not isinstance(self.start_rot, (tuple, list)) or len(self.start_rot) != 3:
            raise ValueError(f"part '{self.id}': start rot must be a tuple of 3 floats")
        self.start_pos = tuple(float(c) for c in self.start_pos)
        self.start_rot = tuple(float(c) for c in self.start_rot)
        if isinstance(self.symmetry, str):
            self.symmetry = SymmetryClass(self.symmetry)
        if self.symmetry_axis is not None and self.symmetry_axis not in ("x", "y", "z"):
            raise ValueError(f"part '{self.id}': symmetry axis must be 'x', 'y' or 'z'")
        if not isinstance(self.rot_step, (float, int)) or self.rot_step <= 0:
            raise ValueError(f"part '{self.id}': rot_step must be a positive number")

    @property
    def start_pose(self) -> Transform:
        from snapfit.geometry.transform_math import quaternion_from_euler

        return Transform(self.start_pos, quaternion_from_euler(self.start_rot))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PartConfig":
        start = data.get("start") or {}
        symmetry = data.get("symmetry")
        symmetry_axis = None
        if isinstance(symmetry, dict):
            symmetry_axis = symmetry.get("axis")
            symmetry = symmetry.get("type", "none")
        if "rot_deg" in start:
            start_rot = tuple(math.radians(float(a)) for a in start["rot_deg"])
        else:
            start_rot = tuple(start.get("rot", (0.0, 0.0, 0.0)))
        return cls(
            id=data.get("id", ""),
            model=data.get("model", data.get("file", "")),
            snap_to=data.get("snap_to", data.get("snapTo", "")),
            start_pos=tuple(start.get("pos", (0.0, 0.0, 0.0))),
            start_rot=start_rot,
            symmetry=symmetry or SymmetryClass.NONE,
            symmetry_axis=symmetry_axis,
            rot_step=data.get("rot_step", data.get("rotStep", 15.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "model": self.model,
            "snap_to": self.snap_to,
            "rot_step": self.rot_step,
            "start": {"pos": list(self.start_pos), "rot": list(self.start_rot)},
        }
        if self.symmetry != SymmetryClass.NONE:
            result["symmetry"] = {"type": self.symmetry.value}
            if self.symmetry_axis:
                result["symmetry"]["axis"] = self.symmetry_axis
        return result


@dataclass
class LevelConfig:
    """Configuration of a level: target model, parts, tolerance and budgets."""
    id: str
    name: str
    target: str
    parts: List[PartConfig] = field(default_factory=list)
    tolerance: Tolerance = field(default_factory=Tolerance)
    time_limit_sec: Optional[float] = None
    hints: Optional[int] = None
    models: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("level id must be a non-empty string")
        if not isinstance(self.target, str) or not self.target:
            raise ValueError("level target must be a non-empty string")
        if isinstance(self.tolerance, dict):
            self.tolerance = Tolerance.from_dict(self.tolerance)
        ids = [p.id for p in self.parts]
        duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
        if duplicates:
            raise ValueError(f"duplicate part ids: {', '.join(duplicates)}")
        if self.time_limit_sec is not None and self.time_limit_sec <= 0:
            raise ValueError("time_limit_sec must be a positive number")
        if self.hints is not None and (not isinstance(self.hints, int) or self.hints < 0):
            raise ValueError("hints must be a non-negative integer")

    def get_part(self, part_id: str) -> Optional[PartConfig]:
        for part in self.parts:
            if part.id == part_id:
                return part
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelConfig":
        """Create LevelConfig from dictionary."""
        return cls(
            id=data.get("id", ""),
            name=data.get("name", data.get("id", "")),
            target=data.get("target", ""),
            parts=[PartConfig.from_dict(p) for p in data.get("parts", [])],
            tolerance=Tolerance.from_dict(data.get("tolerance")),
            time_limit_sec=data.get("time_limit_sec", data.get("timeLimitSec")),
            hints=data.get("hints"),
            models=data.get("models") or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert LevelConfig to dictionary."""
        result = {
            "id": self.id,
            "name": self.name,
            "target": self.target,
            "parts": [p.to_dict() for p in self.parts],
            "tolerance": self.tolerance.to_dict(),
        }
        if self.time_limit_sec is not None:
            result["time_limit_sec"] = self.time_limit_sec
        if self.hints is not None:
            result["hints"] = self.hints
        if self.models:
            result["models"] = self.models
        return result


@dataclass
class SessionConfig:
    """Timing and snapping policy of a game session."""
    feedback_seconds: float = 2.0
    hint_seconds: float = 3.0
    snap_animation_seconds: float = 0.25
    seat_attach_point: bool = False
    enforce_time_limit: bool = True

    def __post_init__(self):
        if not isinstance(self.feedback_seconds, (float, int)) or self.feedback_seconds <= 0:
            raise ValueError("feedback_seconds must be a positive number")
        if not isinstance(self.hint_seconds, (float, int)) or self.hint_seconds <= 0:
            raise ValueError("hint_seconds must be a positive number")
        if not isinstance(self.snap_animation_seconds, (float, int)) or self.snap_animation_seconds < 0:
            raise ValueError("snap_animation_seconds must be a non-negative number")


@dataclass
class DisplayConfig:
    """Console and rendering options."""
    verbose: bool = False
    render_width: int = 640
    render_height: int = 480

    def __post_init__(self):
        if not isinstance(self.render_width, int) or self.render_width <= 0:
            raise ValueError("render_width must be a positive integer")
        if not isinstance(self.render_height, int) or self.render_height <= 0:
            raise ValueError("render_height must be a positive integer")


@dataclass
class Config:
    """Main configuration object."""
    session: SessionConfig = field(default_factory=SessionConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    levels_dir: Optional[str] = None

    def __post_init__(self):
        if self.levels_dir is not None and not os.path.isabs(self.levels_dir):
            self.levels_dir = os.path.abspath(self.levels_dir)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        return cls(
            session=SessionConfig(**data.get("session", {})),
            display=DisplayConfig(**data.get("display", {})),
            levels_dir=data.get("levels_dir"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert Config to dictionary."""
        return {
            "session": {k: v for k, v in self.session.__dict__.items()},
            "display": {k: v for k, v in self.display.__dict__.items()},
            "levels_dir": self.levels_dir,
        }


def _read_yaml(path: str) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error parsing YAML file {path}: {e}")

    if not data:
        raise ValueError(f"Configuration file is empty: {path}")
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def load_config(config_path: str) -> Config:
    """
    Load runtime configuration from YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
        ValueError: If the content is empty or invalid
    """
    data = _read_yaml(config_path)
    try:
        return Config.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Error creating config from data: {e}")


def load_level(level_path: str) -> LevelConfig:
    """
    Load a level from YAML file.

    Raises:
        FileNotFoundError: If the level file doesn't exist
        yaml.YAMLError: If the level file is malformed
        ValueError: If required fields are missing or invalid
    """
    data = _read_yaml(level_path)
    try:
        return LevelConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Error creating level from {level_path}: {e}")


def save_level(level: LevelConfig, output_path: str) -> None:
    with open(output_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(level.to_dict(), f, default_flow_style=None, sort_keys=False, allow_unicode=True)


def create_default_level(output_path: str = "level.yaml") -> LevelConfig:
    """
    Write the tutorial level to a YAML file and return it.
    """
    from snapfit.game.levels import get_builtin_level

    level = get_builtin_level("level_01")
    save_level(level, output_path)
    return level


def validate_level(level: LevelConfig, socket_names: Optional[List[str]] = None) -> List[str]:
    """
    Validate a level and return list of warnings/errors.

    Args:
        level: Level to validate
        socket_names: Socket names provided by the target model, when known

    Returns:
        List of validation messages
    """
    from snapfit.core.registry import MODEL_REGISTRY

    issues = []

    if not level.parts:
        issues.append("ERROR: Level has no parts")

    if not level.name:
        issues.append("WARNING: Level has no display name")

    known_models = set(MODEL_REGISTRY) | set(level.models)
    if level.target not in known_models:
        issues.append(f"WARNING: Target model '{level.target}' is not a known model")

    for part in level.parts:
        if part.model not in known_models:
            issues.append(f"WARNING: Part '{part.id}' uses unknown model '{part.model}'")
        if socket_names is not None and part.snap_to not in socket_names:
            issues.append(f"ERROR: Part '{part.id}' targets missing socket '{part.snap_to}'")
        if part.symmetry == SymmetryClass.CYLINDER and part.symmetry_axis is None:
            issues.append(f"WARNING: Part '{part.id}' has cylinder symmetry without an axis")

    targets = [p.snap_to for p in level.parts]
    for name in sorted({t for t in targets if targets.count(t) > 1}):
        issues.append(f"WARNING: Several parts target socket '{name}'")

    if level.tolerance.position_epsilon > 0.5:
        issues.append("WARNING: position tolerance above 0.5 makes most placements snap")

    if level.hints == 0:
        issues.append("WARNING: Level allows no hints")

    return issues


def warn_unmatched_targets(level: LevelConfig, socket_names: List[str]) -> None:
    """Emit a warning for each part whose target socket the target model lacks."""
    for part in level.parts:
        if part.snap_to not in socket_names:
            warnings.warn(
                f"Part '{part.id}' targets socket '{part.snap_to}' which the target "
                f"model '{level.target}' does not provide; it can never snap."
            )
