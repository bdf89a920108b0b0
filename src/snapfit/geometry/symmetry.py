"""
Symmetry-aware reduction of angular error.

Each symmetry class registers a discount function taking the raw angular
distance (degrees) and the level's angle tolerance.
"""

from typing import Optional

from snapfit.core.base import SymmetryClass
from snapfit.core.registry import SYMMETRY_REGISTRY, register_symmetry

CYLINDER_DISCOUNT = 0.1
BOX_PERIOD_DEGREES = 90.0


@register_symmetry(SymmetryClass.NONE)
def _no_discount(angle: float, angle_tolerance: float) -> float:
    return angle


@register_symmetry(SymmetryClass.SPHERE)
def _sphere_discount(angle: float, angle_tolerance: float) -> float:
    """Any orientation of a sphere is acceptable."""
    return 0.0


@register_symmetry(SymmetryClass.CYLINDER)
def _cylinder_discount(angle: float, angle_tolerance: float) -> float:
    """
    Large errors are treated as spin about the free axis and scaled down.

    The axis itself is not inspected: an error already inside tolerance is
    kept, anything larger is multiplied by ``CYLINDER_DISCOUNT``.
    """
    if angle < angle_tolerance:
        return angle
    return angle * CYLINDER_DISCOUNT


@register_symmetry(SymmetryClass.BOX)
def _box_discount(angle: float, angle_tolerance: float) -> float:
    """Four-fold symmetry: distance to the nearest multiple of 90 degrees."""
    r = angle % BOX_PERIOD_DEGREES
    return min(r, BOX_PERIOD_DEGREES - r)


def discount_angle(angle: float, symmetry: Optional[SymmetryClass], angle_tolerance: float) -> float:
    """
    Apply the symmetry discount of ``symmetry`` to a raw angular distance.

    Args:
        angle: raw angular distance in degrees
        symmetry: symmetry class of the part; None means no discount
        angle_tolerance: the level's angle threshold in degrees

    Returns:
        Discounted angle in degrees
    """
    if symmetry is None:
        symmetry = SymmetryClass.NONE
    elif isinstance(symmetry, str):
        symmetry = SymmetryClass(symmetry)
    return SYMMETRY_REGISTRY[symmetry](angle, angle_tolerance)
