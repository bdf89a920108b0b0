"""
Core modules for snapfit.

This package contains the fundamental components:
- Value types for transforms, anchors, tolerances and snap outcomes
- Level and runtime configuration management
- Registries for built-in levels, models and symmetry discounts
"""

from snapfit.core.base import (
    Transform,
    AnchorMarker,
    Tolerance,
    SymmetryClass,
    SnapOutcome,
    PartRecord,
    PartStatus,
    GamePhase,
    SnapFeedback,
    GameStats,
    Action,
    Observation,
    BaseEnvironment,
    DEFAULT_TOLERANCE,
)

from snapfit.core.config import Config, LevelConfig, PartConfig, SessionConfig, DisplayConfig, load_config, load_level, save_level, create_default_level, validate_level

from snapfit.core.registry import register_level, register_model, register_symmetry, LEVEL_REGISTRY, MODEL_REGISTRY, SYMMETRY_REGISTRY

__all__ = [
    "Transform",
    "AnchorMarker",
    "Tolerance",
    "SymmetryClass",
    "SnapOutcome",
    "PartRecord",
    "PartStatus",
    "GamePhase",
    "SnapFeedback",
    "GameStats",
    "Action",
    "Observation",
    "BaseEnvironment",
    "DEFAULT_TOLERANCE",
    "Config",
    "LevelConfig",
    "PartConfig",
    "SessionConfig",
    "DisplayConfig",
    "load_config",
    "load_level",
    "save_level",
    "create_default_level",
    "validate_level",
    "register_level",
    "register_model",
    "register_symmetry",
    "LEVEL_REGISTRY",
    "MODEL_REGISTRY",
    "SYMMETRY_REGISTRY",
]
