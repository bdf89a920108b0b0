"""
Holds the most recently extracted target sockets.
"""

from typing import List, Optional, Tuple

from snapfit.core.base import AnchorMarker
from snapfit.snapping.extraction import extract_sockets


class AnchorRegistry:
    """Latest socket snapshot of the target model, queried by name."""

    def __init__(self):
        self._sockets: Tuple[AnchorMarker, ...] = ()
        self._loaded: bool = False
        self.version: int = 0

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def sockets(self) -> Tuple[AnchorMarker, ...]:
        """Current sockets; empty until the target has finished loading."""
        return self._sockets

    def update(self, sockets: List[AnchorMarker]) -> None:
        """Replace the snapshot wholesale."""
        self._sockets = tuple(sockets)
        self._loaded = True
        self.version += 1

    def load_from(self, target_model) -> Tuple[AnchorMarker, ...]:
        self.update(extract_sockets(target_model))
        return self._sockets

    def clear(self) -> None:
        self._sockets = ()
        self._loaded = False
        self.version += 1

    def get(self, name: str) -> Optional[AnchorMarker]:
        """First socket called ``name``, if any."""
        for socket in self._sockets:
            if socket.name == name:
                return socket
        return None

    def names(self) -> List[str]:
        return [s.name for s in self._sockets]

    def __len__(self) -> int:
        return len(self._sockets)
