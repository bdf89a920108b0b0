"""Transform math and symmetry discounts for snapfit."""

from snapfit.geometry.transform_math import (
    quaternion_multiply,
    quaternion_from_axis_angle,
    quaternion_from_euler,
    euler_from_quaternion,
    rotate_vector,
    compose_world,
    inverse_transform,
    distance,
    angular_distance_degrees,
    slerp,
    lerp_transform,
)
from snapfit.geometry.symmetry import discount_angle

__all__ = [
    "quaternion_multiply",
    "quaternion_from_axis_angle",
    "quaternion_from_euler",
    "euler_from_quaternion",
    "rotate_vector",
    "compose_world",
    "inverse_transform",
    "distance",
    "angular_distance_degrees",
    "slerp",
    "lerp_transform",
    "discount_angle",
]
