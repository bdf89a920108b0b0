"""
Anchor extraction, socket registry and snap matching.
"""

from snapfit.snapping.scene_graph import SceneNode
from snapfit.snapping.extraction import extract_sockets, extract_attach_points
from snapfit.snapping.anchor_registry import AnchorRegistry
from snapfit.snapping.matcher import try_snap, project_attach_point

__all__ = [
    "SceneNode",
    "extract_sockets",
    "extract_attach_points",
    "AnchorRegistry",
    "try_snap",
    "project_attach_point",
]
