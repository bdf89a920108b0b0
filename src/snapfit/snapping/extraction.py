"""
Anchor extraction from scene graphs.

Sockets are read from the target model in world space; attach points are read
from a part model in the part's own frame so they can be re-projected on
every snap attempt without touching the live graph again.
"""

from typing import Iterable, List, Optional, Tuple

from snapfit.core.base import ATTACH_POINT_PREFIX, SOCKET_PREFIX, AnchorMarker, Transform
from snapfit.geometry.transform_math import compose_world

SOCKET_PREFIXES: Tuple[str, ...] = (SOCKET_PREFIX, ATTACH_POINT_PREFIX)
ATTACH_POINT_PREFIXES: Tuple[str, ...] = (ATTACH_POINT_PREFIX,)


def strip_prefix(name: str, prefixes: Iterable[str]) -> Optional[str]:
    """Return ``name`` without its reserved prefix, or None if it has none."""
    for prefix in prefixes:
        if name.startswith(prefix):
            return name[len(prefix):]
    return None


def _root_world(node) -> Transform:
    if hasattr(node, "world_transform"):
        return node.world_transform()
    return Transform(node.position, node.orientation)


def _collect(node, frame: Transform, prefixes: Tuple[str, ...], out: List[AnchorMarker]) -> None:
    bare = strip_prefix(node.name or "", prefixes)
    if bare is not None:
        out.append(AnchorMarker(name=bare, transform=frame))
    for child in node.children:
        child_local = Transform(child.position, child.orientation)
        _collect(child, compose_world(child_local, frame), prefixes, out)


def extract_sockets(target_model) -> List[AnchorMarker]:
    """
    Collect ``_SOCKET_<name>`` and ``_AP_<name>`` markers of the target in world space.

    Args:
        target_model: root node of the target scene graph (or None while loading)

    Returns:
        Markers in depth-first traversal order; empty if there are none
    """
    if target_model is None:
        return []
    markers: List[AnchorMarker] = []
    _collect(target_model, _root_world(target_model), SOCKET_PREFIXES, markers)
    return markers


def extract_attach_points(part_model) -> List[AnchorMarker]:
    """
    Collect ``_AP_<name>`` markers of a part in the part's local frame.

    The root's own transform (the part's current pose) is not applied.
    """
    if part_model is None:
        return []
    markers: List[AnchorMarker] = []
    _collect(part_model, Transform.identity(), ATTACH_POINT_PREFIXES, markers)
    return markers
