"""
snapfit: a spatial-assembly puzzle built around a snap-fit matching engine

Players move and rotate parts in 3D and try to lock each one onto a named
socket of a hidden target structure. The engine extracts anchors from scene
graphs, projects a part's attach point into world space, and accepts a snap
when position and symmetry-adjusted orientation are within tolerance.

Example Usage:
```python
from snapfit import GameSession, get_builtin_level

session = GameSession()
session.load_level(get_builtin_level("level_01"))
session.select_part("part1")
session.grab()
session.move((2.0, -0.25, 0.0))  # attach point onto socket1
outcome = session.attempt_snap()
```

Command-line Usage:
```bash
snapfit play --level level_01
snapfit validate-level my_level.yaml
```
"""

from snapfit.core.config import Config, LevelConfig, load_config, load_level, validate_level
from snapfit.game import GameSession, get_builtin_level, list_builtin_levels
from snapfit.snapping import try_snap

__version__ = "0.1.0"

__all__ = [
    "Config",
    "LevelConfig",
    "load_config",
    "load_level",
    "validate_level",
    "GameSession",
    "get_builtin_level",
    "list_builtin_levels",
    "try_snap",
]
