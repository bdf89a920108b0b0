"""
Unit tests for scene graphs, anchor extraction and the anchor registry.
"""

import pytest
from numpy.testing import assert_allclose

from snapfit.core.base import AnchorMarker, Transform
from snapfit.geometry.transform_math import quaternion_from_axis_angle
from snapfit.snapping.anchor_registry import AnchorRegistry
from snapfit.snapping.extraction import extract_attach_points, extract_sockets, strip_prefix
from snapfit.snapping.scene_graph import SceneNode


def _target():
    root = SceneNode("target")
    root.add(SceneNode("_SOCKET_a", position=(0, 0.5, 0)))
    arm = root.add(SceneNode("arm", position=(0, 1, 0), orientation=quaternion_from_axis_angle("z", 90)))
    arm.add(SceneNode("_SOCKET_tip", position=(1, 0, 0)))
    root.add(SceneNode("mesh"))
    root.add(SceneNode("_AP_b", position=(2, 0, 0)))
    return root


class TestStripPrefix:
    """Tests for reserved prefix handling."""

    def test_strip_when_prefixed_then_bare_name(self):
        assert strip_prefix("_SOCKET_socket1", ("_SOCKET_", "_AP_")) == "socket1"
        assert strip_prefix("_AP_socket1", ("_SOCKET_", "_AP_")) == "socket1"

    def test_strip_when_not_prefixed_then_none(self):
        assert strip_prefix("mesh_box", ("_SOCKET_", "_AP_")) is None
        assert strip_prefix("_SOCKET_x", ("_AP_",)) is None


class TestSceneNode:
    """Tests for the scene graph used as extraction input."""

    def test_world_transform_composes_ancestors(self):
        root = _target()
        tip = root.find("_SOCKET_tip")
        assert_allclose(tip.world_transform().position, (0, 2, 0), atol=1e-12)

    def test_add_when_already_parented_then_moves_child(self):
        a, b, child = SceneNode("a"), SceneNode("b"), SceneNode("c")
        a.add(child)
        b.add(child)
        assert a.children == []
        assert child.parent is b

    def test_traverse_is_depth_first_preorder(self):
        names = [n.name for n in _target().traverse()]
        assert names == ["target", "_SOCKET_a", "arm", "_SOCKET_tip", "mesh", "_AP_b"]

    def test_from_dict_builds_tree(self):
        node = SceneNode.from_dict({
            "name": "custom",
            "children": [
                {"name": "_AP_s", "pos": [0, 1, 0], "rot": [0, 1.5707963267948966, 0]},
                {"name": "_SOCKET_t", "position": [1, 0, 0], "quat": [0, 0, 0, 1]},
            ],
        })
        assert [c.name for c in node.children] == ["_AP_s", "_SOCKET_t"]
        assert_allclose(node.children[0].orientation, quaternion_from_axis_angle("y", 90), atol=1e-12)


class TestExtractSockets:
    """Tests for world-space socket extraction."""

    def test_extract_returns_prefixed_nodes_in_traversal_order(self):
        names = [m.name for m in extract_sockets(_target())]
        assert names == ["a", "tip", "b"]

    def test_extract_when_nested_then_world_space(self):
        markers = {m.name: m for m in extract_sockets(_target())}
        assert_allclose(markers["tip"].position, (0, 2, 0), atol=1e-12)
        assert_allclose(markers["tip"].orientation, quaternion_from_axis_angle("z", 90), atol=1e-12)

    def test_extract_when_root_moved_then_includes_root_pose(self):
        root = _target()
        root.position = (10.0, 0.0, 0.0)
        markers = {m.name: m for m in extract_sockets(root)}
        assert_allclose(markers["a"].position, (10, 0.5, 0))

    def test_extract_when_no_markers_then_empty(self):
        assert extract_sockets(SceneNode("plain", children=[SceneNode("mesh")])) == []

    def test_extract_when_model_missing_then_empty(self):
        assert extract_sockets(None) == []

    def test_extract_returns_snapshots(self):
        root = _target()
        markers = extract_sockets(root)
        root.children[0].position = (9.0, 9.0, 9.0)
        assert_allclose(markers[0].position, (0, 0.5, 0))


class TestExtractAttachPoints:
    """Tests for part-local attach point extraction."""

    def test_extract_ignores_part_pose(self):
        part = SceneNode("part", position=(5, 5, 5), orientation=quaternion_from_axis_angle("x", 40))
        part.add(SceneNode("_AP_top", position=(0, 0.25, 0)))
        markers = extract_attach_points(part)
        assert [m.name for m in markers] == ["top"]
        assert_allclose(markers[0].position, (0, 0.25, 0))
        assert_allclose(markers[0].orientation, (0, 0, 0, 1))

    def test_extract_when_nested_then_relative_to_part_root(self):
        part = SceneNode("part", position=(5, 5, 5))
        holder = part.add(SceneNode("holder", position=(0, 1, 0)))
        holder.add(SceneNode("_AP_pin", position=(0, 0, 1)))
        assert_allclose(extract_attach_points(part)[0].position, (0, 1, 1))

    def test_extract_ignores_socket_prefix(self):
        part = SceneNode("part", children=[SceneNode("_SOCKET_x")])
        assert extract_attach_points(part) == []

    def test_extract_when_model_missing_then_empty(self):
        assert extract_attach_points(None) == []


class TestAnchorRegistry:
    """Tests for the socket registry."""

    def test_registry_starts_unloaded_and_empty(self):
        registry = AnchorRegistry()
        assert not registry.is_loaded
        assert registry.sockets == ()
        assert len(registry) == 0

    def test_load_from_replaces_snapshot(self):
        registry = AnchorRegistry()
        registry.update([AnchorMarker("old", Transform())])
        registry.load_from(_target())
        assert registry.is_loaded
        assert registry.names() == ["a", "tip", "b"]
        assert registry.get("old") is None

    def test_get_when_known_then_marker(self):
        registry = AnchorRegistry()
        registry.load_from(_target())
        assert_allclose(registry.get("a").position, (0, 0.5, 0))
        assert registry.get("missing") is None

    def test_clear_bumps_version(self):
        registry = AnchorRegistry()
        registry.load_from(_target())
        version = registry.version
        registry.clear()
        assert not registry.is_loaded
        assert registry.version == version + 1
