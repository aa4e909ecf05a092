"""
Error types raised by the recording/playback engine.
"""

from __future__ import annotations
from typing import Any, Optional


class ClickloopError(Exception):
    """Base class for all clickloop errors."""


class EmptySequence(ClickloopError):
    """Playback was requested with no recorded points."""

    def __init__(self, message: str = "No recorded points to click."):
        super().__init__(message)


class InvalidInterval(ClickloopError, ValueError):
    """Interval is non-numeric or not strictly positive."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid interval: {value!r}. Must be a number greater than 0.")


class InjectionFailure(ClickloopError):
    """The OS declined to synthesize an input event."""

    def __init__(self, point: Any, cause: Optional[BaseException] = None, aborted: bool = False):
        self.point = point
        self.cause = cause
        # the backend refused on purpose (fail-safe), not a transient error
        self.aborted = aborted
        super().__init__(f"Failed to inject click at {point}: {cause}")
