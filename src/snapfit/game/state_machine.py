"""
Part state machine: idle -> grabbed -> snapped, plus release and reset.

Illegal transitions are ignored without raising; every command returns
whether it changed anything.
"""

import math
from typing import Dict, List, Optional, Sequence

from snapfit.core.base import (
    AnchorMarker, PartRecord, PartStatus, SnapOutcome, Tolerance, Transform,
    DEFAULT_TOLERANCE,
)
from snapfit.core.config import LevelConfig
from snapfit.geometry.transform_math import (
    compose_world, euler_from_quaternion, inverse_transform, quaternion_from_euler,
)
from snapfit.snapping.anchor_registry import AnchorRegistry
from snapfit.snapping.matcher import try_snap

AXIS_INDEX = {"x": 0, "y": 1, "z": 2}


class PartStateMachine:
    """Owns every part's pose and flags and gates the legal transitions."""

    def __init__(self, registry: AnchorRegistry, seat_attach_point: bool = False):
        self.registry = registry
        self.seat_attach_point = seat_attach_point
        self.tolerance: Tolerance = DEFAULT_TOLERANCE
        self._parts: Dict[str, PartRecord] = {}

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def load(self, level: LevelConfig) -> None:
        """Replace all records with fresh ones seeded from the level."""
        self.tolerance = level.tolerance
        self._parts = {}
        for part_config in level.parts:
            self._parts[part_config.id] = PartRecord(
                id=part_config.id,
                config=part_config,
                pose=part_config.start_pose,
                rotation=part_config.start_rot,
            )

    def set_attach_points(self, part_id: str, attach_points: Optional[Sequence[AnchorMarker]]) -> bool:
        part = self._parts.get(part_id)
        if part is None:
            return False
        part.attach_points = list(attach_points) if attach_points is not None else None
        return True

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def get(self, part_id: str) -> Optional[PartRecord]:
        return self._parts.get(part_id)

    @property
    def ids(self) -> List[str]:
        return list(self._parts.keys())

    @property
    def records(self) -> List[PartRecord]:
        return list(self._parts.values())

    def snapped_count(self) -> int:
        return len([p for p in self._parts.values() if p.is_snapped])

    def is_assembled(self) -> bool:
        """True once every part is snapped; an empty level is never assembled."""
        if not self._parts:
            return False
        return all(p.is_snapped for p in self._parts.values())

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #
    def grab(self, part_id: str) -> bool:
        part = self._parts.get(part_id)
        if part is None or part.status != PartStatus.IDLE:
            return False
        part.is_grabbed = True
        return True

    def release(self, part_id: str) -> bool:
        part = self._parts.get(part_id)
        if part is None or part.status != PartStatus.GRABBED:
            return False
        part.is_grabbed = False
        return True

    def move(self, part_id: str, delta: Sequence[float]) -> bool:
        part = self._parts.get(part_id)
        if part is None or part.status != PartStatus.GRABBED:
            return False
        if len(delta) != 3:
            return False
        position = tuple(p + float(d) for p, d in zip(part.pose.position, delta))
        part.pose = Transform(position, part.pose.orientation)
        return True

    def rotate(self, part_id: str, axis: str, degrees: float) -> bool:
        """Add ``degrees`` to one Euler axis; no clamping or snapping to steps."""
        part = self._parts.get(part_id)
        if part is None or part.status != PartStatus.GRABBED:
            return False
        index = AXIS_INDEX.get(str(axis).lower())
        if index is None:
            return False
        rotation = list(part.rotation)
        rotation[index] += math.radians(float(degrees))
        part.rotation = tuple(rotation)
        part.pose = Transform(part.pose.position, quaternion_from_euler(part.rotation))
        return True

    def attempt_snap(self, part_id: str) -> Optional[SnapOutcome]:
        """
        Try to snap a grabbed part against the registry's current sockets.

        Returns:
            The matcher's outcome, or None when the part is not grabbed.
            Only a name-correct match commits the snap.
        """
        part = self._parts.get(part_id)
        if part is None or part.status != PartStatus.GRABBED:
            return None

        outcome = try_snap(
            part.pose,
            part.attach_points,
            part.target_socket_name,
            part.config.symmetry,
            self.tolerance,
            self.registry.sockets,
        )
        if outcome.commits:
            self._commit(part, outcome.matched_socket)
        return outcome

    def _commit(self, part: PartRecord, socket: AnchorMarker) -> None:
        if self.seat_attach_point and part.attach_points:
            anchor = part.attach_points[0].transform
            pose = compose_world(inverse_transform(anchor), socket.transform)
        else:
            pose = socket.transform
        part.pose = pose
        part.rotation = euler_from_quaternion(pose.orientation)
        part.is_grabbed = False
        part.is_snapped = True
        part.snapped_socket = socket

    def reset(self, part_id: str) -> bool:
        """Back to idle at the configured start pose, from any state."""
        part = self._parts.get(part_id)
        if part is None:
            return False
        part.pose = part.config.start_pose
        part.rotation = part.config.start_rot
        part.is_grabbed = False
        part.is_snapped = False
        part.snapped_socket = None
        return True
