"""
Minimal scene graph used by the rendering/asset side.

Nodes are mutable and shared with whoever renders them; the matching core
never holds on to them and only reads immutable snapshots produced by
``snapfit.snapping.extraction``.
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence

from snapfit.core.base import IDENTITY_QUATERNION, ORIGIN, Transform
from snapfit.geometry.transform_math import compose_world, quaternion_from_euler


class SceneNode:
    """A named node with a local transform and children."""

    def __init__(self, name: str = "",
                 position: Sequence[float] = ORIGIN,
                 orientation: Sequence[float] = IDENTITY_QUATERNION,
                 children: Optional[List["SceneNode"]] = None):
        self.name = name
        self.position = tuple(float(c) for c in position)
        self.orientation = tuple(float(c) for c in orientation)
        self.parent: Optional[SceneNode] = None
        self.children: List[SceneNode] = []
        for child in children or []:
            self.add(child)

    def add(self, child: "SceneNode") -> "SceneNode":
        """Attach ``child`` to this node, detaching it from any previous parent."""
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def local_transform(self) -> Transform:
        return Transform(self.position, self.orientation)

    def world_transform(self) -> Transform:
        """Compose the local transform through every ancestor."""
        world = self.local_transform()
        node = self.parent
        while node is not None:
            world = compose_world(world, node.local_transform())
            node = node.parent
        return world

    def traverse(self) -> Iterator["SceneNode"]:
        """Depth-first, pre-order walk starting at this node."""
        yield self
        for child in self.children:
            yield from child.traverse()

    def find(self, name: str) -> Optional["SceneNode"]:
        for node in self.traverse():
            if node.name == name:
                return node
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneNode":
        """
        Build a node tree from a nested mapping.

        Keys: ``name``, ``pos``/``position``, ``rot`` (Euler XYZ radians) or
        ``quat`` (x, y, z, w), and ``children``.
        """
        if "quat" in data:
            orientation = tuple(data["quat"])
        elif "rot" in data:
            orientation = quaternion_from_euler(data["rot"])
        else:
            orientation = IDENTITY_QUATERNION
        return cls(
            name=data.get("name", ""),
            position=data.get("pos", data.get("position", ORIGIN)),
            orientation=orientation,
            children=[cls.from_dict(c) for c in data.get("children", [])],
        )

    def __repr__(self) -> str:
        return f"SceneNode(name={self.name!r}, children={len(self.children)})"
