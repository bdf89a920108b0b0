"""
Snap matching: decide whether a part's attach point fits a target socket.
"""

from typing import List, Optional, Sequence, Tuple

from snapfit.core.base import (
    SNAP_MISS, AnchorMarker, SnapOutcome, SymmetryClass, Tolerance, Transform,
)
from snapfit.geometry.symmetry import discount_angle
from snapfit.geometry.transform_math import angular_distance_degrees, compose_world, distance

# Candidate sockets must lie within this multiple of the position tolerance.
PREFILTER_RADIUS_FACTOR = 6.0
# Weight of the angular error (degrees) in the score; position error dominates.
ANGLE_SCORE_WEIGHT = 0.01


def project_attach_point(part_pose: Transform, attach_point: AnchorMarker) -> AnchorMarker:
    """Attach point expressed in world space for the given part pose."""
    return AnchorMarker(attach_point.name, compose_world(attach_point.transform, part_pose))


def gather_candidates(world_point: AnchorMarker,
                      sockets: Sequence[AnchorMarker],
                      tolerance: Tolerance,
                      target_socket_name: str) -> List[AnchorMarker]:
    """
    Sockets near ``world_point``, name-correct ones first.

    Relative order inside each group follows ``sockets``.
    """
    radius = PREFILTER_RADIUS_FACTOR * tolerance.position_epsilon
    nearby = [s for s in sockets if distance(world_point.position, s.position) < radius]
    correct = [s for s in nearby if s.name == target_socket_name]
    other = [s for s in nearby if s.name != target_socket_name]
    return correct + other


def score_candidate(world_point: AnchorMarker,
                    socket: AnchorMarker,
                    symmetry: Optional[SymmetryClass],
                    tolerance: Tolerance) -> Optional[float]:
    """
    Score of ``socket`` for ``world_point``, or None if it is out of tolerance.
    """
    pos_diff = distance(world_point.position, socket.position)
    raw_angle = angular_distance_degrees(world_point.orientation, socket.orientation)
    angle_diff = discount_angle(raw_angle, symmetry, tolerance.angle_epsilon_degrees)
    if pos_diff >= tolerance.position_epsilon or angle_diff >= tolerance.angle_epsilon_degrees:
        return None
    return pos_diff + ANGLE_SCORE_WEIGHT * angle_diff


def try_snap(part_pose: Transform,
             local_attach_points: Optional[Sequence[AnchorMarker]],
             target_socket_name: str,
             symmetry: Optional[SymmetryClass],
             tolerance: Tolerance,
             sockets: Optional[Sequence[AnchorMarker]]) -> SnapOutcome:
    """
    Find the socket the part's representative attach point snaps to.

    Only the first attach point is evaluated. Name-correct candidates are
    examined before the others and the first one inside tolerance wins
    outright; otherwise the lowest score among the accepted candidates wins.

    Args:
        part_pose: current world pose of the part
        local_attach_points: attach points in the part's frame (None/empty if not loaded)
        target_socket_name: socket the part is configured to snap to
        symmetry: symmetry class of the part
        tolerance: level tolerance
        sockets: world-space sockets of the target (None/empty if not loaded)

    Returns:
        SnapOutcome; ``success`` is False when no candidate is inside tolerance
    """
    if not local_attach_points or not sockets:
        return SNAP_MISS

    world_point = project_attach_point(part_pose, local_attach_points[0])

    best: Optional[Tuple[AnchorMarker, float]] = None
    for socket in gather_candidates(world_point, sockets, tolerance, target_socket_name):
        score = score_candidate(world_point, socket, symmetry, tolerance)
        if score is None:
            continue
        if best is None or score < best[1]:
            best = (socket, score)
            if socket.name == target_socket_name:
                break

    if best is None:
        return SNAP_MISS

    socket, score = best
    return SnapOutcome(
        success=True,
        matched_socket=socket,
        score=score,
        is_correct_target=socket.name == target_socket_name,
    )
