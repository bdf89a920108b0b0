"""
Base data types for the snapfit matching engine.

This module defines the value objects shared by the transform math, anchor
extraction, snap matcher and part state machine: transforms, anchor markers,
tolerances, symmetry classes, part records and snap outcomes.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING
from dataclasses import dataclass, field
from enum import Enum
from abc import ABC, abstractmethod
import math

if TYPE_CHECKING:
    from snapfit.core.config import PartConfig


Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]  # (x, y, z, w)

IDENTITY_QUATERNION: Quaternion = (0.0, 0.0, 0.0, 1.0)
ORIGIN: Vector3 = (0.0, 0.0, 0.0)

SOCKET_PREFIX = "_SOCKET_"
ATTACH_POINT_PREFIX = "_AP_"


class SymmetryClass(Enum):
    """Rotational symmetry of a part, used to discount angular error."""
    NONE: str = "none"
    SPHERE: str = "sphere"
    CYLINDER: str = "cylinder"
    BOX: str = "box"


class PartStatus(Enum):
    """Lifecycle state of a part."""
    IDLE: str = "idle"
    GRABBED: str = "grabbed"
    SNAPPED: str = "snapped"


class GamePhase(Enum):
    """Phase of a game session."""
    TITLE: str = "title"
    PLAYING: str = "playing"
    PAUSED: str = "paused"
    SUCCESS: str = "success"
    FAIL: str = "fail"


def _normalize_quaternion(q) -> Quaternion:
    x, y, z, w = (float(c) for c in q)
    norm = math.sqrt(x * x + y * y + z * z + w * w)
    if norm == 0.0:
        return IDENTITY_QUATERNION
    return (x / norm, y / norm, z / norm, w / norm)


@dataclass(frozen=True)
class Transform:
    """Rigid transform: a position plus a unit quaternion orientation."""
    position: Vector3 = ORIGIN
    orientation: Quaternion = IDENTITY_QUATERNION

    def __post_init__(self):
        if len(self.position) != 3:
            raise ValueError("position must have 3 components")
        if len(self.orientation) != 4:
            raise ValueError("orientation must have 4 components (x, y, z, w)")
        object.__setattr__(self, "position", tuple(float(c) for c in self.position))
        object.__setattr__(self, "orientation", _normalize_quaternion(self.orientation))

    @classmethod
    def identity(cls) -> "Transform":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert transform to dictionary representation."""
        return {
            "position": list(self.position),
            "orientation": list(self.orientation),
        }


@dataclass(frozen=True)
class AnchorMarker:
    """A named anchor: a socket on the target or an attach point on a part."""
    name: str
    transform: Transform

    @property
    def position(self) -> Vector3:
        return self.transform.position

    @property
    def orientation(self) -> Quaternion:
        return self.transform.orientation

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, **self.transform.to_dict()}


@dataclass(frozen=True)
class Tolerance:
    """Position and angle thresholds that define "close enough" to snap."""
    position_epsilon: float = 0.05
    angle_epsilon_degrees: float = 25.0

    def __post_init__(self):
        if not isinstance(self.position_epsilon, (float, int)) or self.position_epsilon <= 0:
            raise ValueError("position_epsilon must be a positive number")
        if not isinstance(self.angle_epsilon_degrees, (float, int)) or not 0 < self.angle_epsilon_degrees <= 180:
            raise ValueError("angle_epsilon_degrees must be in (0, 180]")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Tolerance":
        """Accepts both ``{pos, deg}`` and the long field names."""
        if not data:
            return cls()
        pos = data.get("pos", data.get("position_epsilon", 0.05))
        deg = data.get("deg", data.get("angle_epsilon_degrees", 25.0))
        return cls(position_epsilon=float(pos), angle_epsilon_degrees=float(deg))

    def to_dict(self) -> Dict[str, float]:
        return {"pos": self.position_epsilon, "deg": self.angle_epsilon_degrees}


DEFAULT_TOLERANCE = Tolerance()


@dataclass(frozen=True)
class SnapOutcome:
    """Result of a snap attempt."""
    success: bool
    matched_socket: Optional[AnchorMarker] = None
    score: Optional[float] = None
    is_correct_target: Optional[bool] = None

    @property
    def commits(self) -> bool:
        """Only a tolerance-satisfying match on the configured socket commits a snap."""
        return bool(self.success and self.is_correct_target)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "matched_socket": self.matched_socket.to_dict() if self.matched_socket else None,
            "score": self.score,
            "is_correct_target": self.is_correct_target,
        }


SNAP_MISS = SnapOutcome(success=False)


@dataclass
class PartRecord:
    """Mutable per-part state owned by the part state machine."""
    id: str
    config: "PartConfig"
    pose: Transform
    rotation: Vector3 = ORIGIN  # accumulated Euler angles in radians, XYZ order
    attach_points: Optional[List[AnchorMarker]] = None  # None until the part model loads
    is_grabbed: bool = False
    is_snapped: bool = False
    snapped_socket: Optional[AnchorMarker] = None

    @property
    def status(self) -> PartStatus:
        if self.is_snapped:
            return PartStatus.SNAPPED
        if self.is_grabbed:
            return PartStatus.GRABBED
        return PartStatus.IDLE

    @property
    def target_socket_name(self) -> str:
        return self.config.snap_to

    def to_dict(self) -> Dict[str, Any]:
        """Convert part record to dictionary representation."""
        return {
            "id": self.id,
            "status": self.status.value,
            "target_socket": self.target_socket_name,
            "pose": self.pose.to_dict(),
            "rotation": list(self.rotation),
            "attach_points": [ap.to_dict() for ap in self.attach_points or []],
            "is_grabbed": self.is_grabbed,
            "is_snapped": self.is_snapped,
        }


@dataclass
class SnapFeedback:
    """Transient player feedback for the latest snap attempt."""
    part_id: str
    success: bool
    is_correct_target: bool = False
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "part_id": self.part_id,
            "success": self.success,
            "is_correct_target": self.is_correct_target,
            "message": self.message,
        }


@dataclass
class GameStats:
    """Statistics accumulated during a level."""
    stars: int = 3
    elapsed: float = 0.0
    hints_used: int = 0
    mistakes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stars": self.stars,
            "elapsed": round(self.elapsed, 3),
            "hints_used": self.hints_used,
            "mistakes": self.mistakes,
        }


@dataclass
class Action:
    """Represents a command issued to the environment."""
    action_type: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert action to dictionary representation."""
        return {
            "action_type": self.action_type,
            "parameters": self.parameters,
        }


@dataclass
class Observation:
    """Snapshot of the session handed back to the input/UI collaborator."""
    state: Dict[str, Any]
    description: str
    image: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert observation to dictionary (excluding images)."""
        return {
            "state": self.state,
            "description": self.description,
        }


class BaseEnvironment(ABC):
    """Command/query surface over a game session, driven by tool calls."""

    @abstractmethod
    def reset(self) -> Observation:
        """Reset environment to initial state."""
        pass

    @abstractmethod
    def step(self, action: Action) -> Observation:
        """Execute action and return new observation."""
        pass

    @abstractmethod
    def render(self) -> Any:
        """Render the current session state."""
        pass

    @abstractmethod
    def get_tool_schemas(self) -> List[Dict[str, Any]]:
        """Get JSON schemas for the tool functions."""
        pass

    @abstractmethod
    def execute_tool_call(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a tool call."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Clean up environment resources."""
        pass
