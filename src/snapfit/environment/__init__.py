"""Tool-call environments for snapfit."""

from snapfit.environment.snapfit_env import SnapFitConfig, SnapFitEnvironment

__all__ = ["SnapFitConfig", "SnapFitEnvironment"]
