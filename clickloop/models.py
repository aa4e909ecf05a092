"""
Core data types shared by the monitor, recorder and player.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class RecordingState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class EventKind(str, Enum):
    POINTER_DOWN = "pointer_down"
    KEY_DOWN = "key_down"


@dataclass(frozen=True)
class RecordedPoint:
    """A screen coordinate captured from a primary pointer-down."""

    x: float
    y: float

    def display(self) -> Tuple[int, int]:
        """Integer coordinates for rendering."""
        return (int(self.x), int(self.y))

    def __str__(self) -> str:
        x, y = self.display()
        return f"({x}, {y})"


@dataclass(frozen=True)
class PointerDown:
    point: RecordedPoint
    kind = EventKind.POINTER_DOWN


@dataclass(frozen=True)
class KeyDown:
    key: str
    kind = EventKind.KEY_DOWN


InputEvent = Union[PointerDown, KeyDown]
