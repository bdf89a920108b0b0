"""
Built-in part and target models.

Each model is a scene graph with marker nodes only; meshes are the renderer's
business. The target carries ``_SOCKET_socketN`` markers and each part one
``_AP_socketN`` marker, y-up.
"""

from typing import Optional

from snapfit.core.config import LevelConfig
from snapfit.core.registry import MODEL_REGISTRY, register_model
from snapfit.snapping.scene_graph import SceneNode


@register_model("part1")
def create_part1() -> SceneNode:
    """0.5 cube, attach point on its top face."""
    root = SceneNode("part1")
    root.add(SceneNode("mesh_box"))
    root.add(SceneNode("_AP_socket1", position=(0.0, 0.25, 0.0)))
    return root


@register_model("part2")
def create_part2() -> SceneNode:
    """Cylinder r=0.2 h=0.6, attach point at its base."""
    root = SceneNode("part2")
    root.add(SceneNode("mesh_cylinder"))
    root.add(SceneNode("_AP_socket2", position=(0.0, -0.3, 0.0)))
    return root


@register_model("part3")
def create_part3() -> SceneNode:
    """0.4 x 0.3 x 0.4 block, attach point at its base."""
    root = SceneNode("part3")
    root.add(SceneNode("mesh_box"))
    root.add(SceneNode("_AP_socket3", position=(0.0, -0.15, 0.0)))
    return root


@register_model("target")
def create_target() -> SceneNode:
    """Stack of base, cylinder and top block."""
    root = SceneNode("target")
    root.add(SceneNode("mesh_base", position=(0.0, 0.25, 0.0)))
    root.add(SceneNode("_SOCKET_socket1", position=(0.0, 0.5, 0.0)))
    root.add(SceneNode("mesh_cylinder", position=(0.0, 0.8, 0.0)))
    # socket2 sits on socket1: the cylinder's base rests on the cube's top
    root.add(SceneNode("_SOCKET_socket2", position=(0.0, 0.5, 0.0)))
    root.add(SceneNode("mesh_top", position=(0.0, 1.25, 0.0)))
    root.add(SceneNode("_SOCKET_socket3", position=(0.0, 1.1, 0.0)))
    return root


def build_model(model_ref: str, level: Optional[LevelConfig] = None) -> Optional[SceneNode]:
    """
    Instantiate a model by reference.

    Inline models of the level take precedence over built-in ones. Unknown
    references yield None, which the session treats as "not loaded".
    """
    if level is not None and model_ref in level.models:
        return SceneNode.from_dict(level.models[model_ref])
    factory = MODEL_REGISTRY.get(model_ref)
    if factory is None:
        return None
    return factory()
