"""
Quaternion and rigid-transform helpers.

Quaternions are (x, y, z, w) tuples. ``compose_world(child, parent)`` applies
the child's transform in the parent's frame, then the parent's transform.
"""

import math
from typing import Sequence

import numpy as np

from snapfit.core.base import Quaternion, Transform, Vector3

_AXES = {
    "x": np.array([1.0, 0.0, 0.0]),
    "y": np.array([0.0, 1.0, 0.0]),
    "z": np.array([0.0, 0.0, 1.0]),
}


def quaternion_multiply(a: Sequence[float], b: Sequence[float]) -> Quaternion:
    """Hamilton product ``a * b`` (rotation ``b`` first, then ``a``)."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return (
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    )


def quaternion_conjugate(q: Sequence[float]) -> Quaternion:
    x, y, z, w = q
    return (-x, -y, -z, w)


def quaternion_dot(a: Sequence[float], b: Sequence[float]) -> float:
    return float(np.dot(np.asarray(a, dtype=float), np.asarray(b, dtype=float)))


def quaternion_to_matrix(q: Sequence[float]) -> np.ndarray:
    """3x3 rotation matrix of a unit quaternion."""
    x, y, z, w = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def rotate_vector(v: Sequence[float], q: Sequence[float]) -> Vector3:
    """Rotate vector ``v`` by quaternion ``q``."""
    rotated = quaternion_to_matrix(q) @ np.asarray(v, dtype=float)
    return (float(rotated[0]), float(rotated[1]), float(rotated[2]))


def quaternion_from_axis_angle(axis, degrees: float) -> Quaternion:
    """
    Quaternion for a rotation of ``degrees`` about ``axis``.

    Args:
        axis: 'x', 'y', 'z' or a 3-vector
        degrees: rotation angle (counter-clockwise looking down the axis)
    """
    if isinstance(axis, str):
        vec = _AXES[axis.lower()]
    else:
        vec = np.asarray(axis, dtype=float)
        norm = np.linalg.norm(vec)
        if norm == 0:
            raise ValueError("rotation axis must be non-zero")
        vec = vec / norm
    half = math.radians(degrees) / 2.0
    s = math.sin(half)
    return (float(vec[0] * s), float(vec[1] * s), float(vec[2] * s), math.cos(half))


def quaternion_from_euler(euler: Sequence[float]) -> Quaternion:
    """Quaternion from intrinsic XYZ Euler angles in radians."""
    rx, ry, rz = (math.degrees(a) for a in euler)
    q = quaternion_multiply(quaternion_from_axis_angle("x", rx), quaternion_from_axis_angle("y", ry))
    return quaternion_multiply(q, quaternion_from_axis_angle("z", rz))


def euler_from_quaternion(q: Sequence[float]) -> Vector3:
    """Intrinsic XYZ Euler angles (radians) of a unit quaternion."""
    m = quaternion_to_matrix(q)
    y = math.asin(max(-1.0, min(1.0, m[0, 2])))
    if abs(m[0, 2]) < 0.9999999:
        x = math.atan2(-m[1, 2], m[2, 2])
        z = math.atan2(-m[0, 1], m[0, 0])
    else:
        # gimbal lock: fold the whole roll into x
        x = math.atan2(m[2, 1], m[1, 1])
        z = 0.0
    return (x, y, z)


def compose_world(child_local: Transform, parent_world: Transform) -> Transform:
    """
    Express ``child_local`` (given in the parent's frame) in world space.

    The child's position is rotated by the parent's orientation and offset by
    the parent's position; the orientation is ``parent * child``.
    """
    offset = rotate_vector(child_local.position, parent_world.orientation)
    position = tuple(p + o for p, o in zip(parent_world.position, offset))
    orientation = quaternion_multiply(parent_world.orientation, child_local.orientation)
    return Transform(position, orientation)


def inverse_transform(t: Transform) -> Transform:
    """Transform ``inv`` such that ``compose_world(inv, t)`` is the identity."""
    inv_q = quaternion_conjugate(t.orientation)
    p = rotate_vector(t.position, inv_q)
    return Transform((-p[0], -p[1], -p[2]), inv_q)


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def angular_distance_degrees(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Angle in degrees, within [0, 180], of the rotation taking ``a`` to ``b``.

    ``q`` and ``-q`` describe the same orientation, hence the absolute dot.
    """
    dot = min(1.0, abs(quaternion_dot(a, b)))
    return math.degrees(2.0 * math.acos(dot))


def slerp(a: Sequence[float], b: Sequence[float], alpha: float) -> Quaternion:
    """Spherical linear interpolation along the shorter arc."""
    qa = np.asarray(a, dtype=float)
    qb = np.asarray(b, dtype=float)
    dot = float(np.dot(qa, qb))
    if dot < 0.0:
        qb = -qb
        dot = -dot
    if dot > 0.9995:
        result = qa + alpha * (qb - qa)
        result = result / np.linalg.norm(result)
    else:
        theta = math.acos(dot)
        sin_theta = math.sin(theta)
        result = (math.sin((1.0 - alpha) * theta) * qa + math.sin(alpha * theta) * qb) / sin_theta
    return tuple(float(c) for c in result)


def lerp_transform(a: Transform, b: Transform, alpha: float) -> Transform:
    """Linear position / spherical orientation interpolation, ``alpha`` clamped to [0, 1]."""
    alpha = max(0.0, min(1.0, float(alpha)))
    pa = np.asarray(a.position, dtype=float)
    pb = np.asarray(b.position, dtype=float)
    position = pa + alpha * (pb - pa)
    return Transform(tuple(float(c) for c in position), slerp(a.orientation, b.orientation, alpha))
