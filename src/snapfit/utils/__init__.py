"""Utility modules for snapfit."""

from snapfit.utils.logger import SessionLogger
from snapfit.utils.display import StatusDisplay, LiveLogger, format_clock, stars_text

__all__ = [
    "SessionLogger",
    "StatusDisplay",
    "LiveLogger",
    "format_clock",
    "stars_text",
]
