"""
Click recording session.
"""

from __future__ import annotations
import logging
import threading
from functools import partial
from typing import Callable, List, Optional, Tuple

from clickloop.models import EventKind, RecordedPoint, RecordingState
from clickloop.monitor.global_monitor import GlobalInputMonitor, Subscription

logger = logging.getLogger(__name__)


class RecordingSession:
    """
    Captures the screen location of every primary click while recording.

    Starting a new recording always discards the previous sequence.
    """

    def __init__(self, monitor: GlobalInputMonitor):
        self.monitor = monitor
        self.on_change: Optional[Callable[[Tuple[RecordedPoint, ...]], None]] = None

        self._lock = threading.RLock()
        self._points: List[RecordedPoint] = []
        self._state = RecordingState.IDLE
        self._subscription: Optional[Subscription] = None
        self._generation = 0

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == RecordingState.RECORDING

    def points(self) -> Tuple[RecordedPoint, ...]:
        """Snapshot of the recorded sequence in recording order."""
        with self._lock:
            return tuple(self._points)

    def toggle(self) -> RecordingState:
        """Start recording if idle, stop if recording. Returns the new state."""
        with self._lock:
            if self.is_recording:
                self._stop()
            else:
                self._start()
            return self._state

    def _start(self) -> None:
        with self._lock:
            self._generation += 1
            self._points.clear()
            self._state = RecordingState.RECORDING
            self._subscription = self.monitor.subscribe(
                EventKind.POINTER_DOWN, partial(self._on_pointer_down, self._generation)
            )
        logger.info("Started recording clicks. Click anywhere to record.")
        self._notify(())

    def _stop(self) -> None:
        with self._lock:
            handle, self._subscription = self._subscription, None
            self._generation += 1
            self._state = RecordingState.IDLE
            count = len(self._points)
        self.monitor.unsubscribe(handle)
        logger.info(f"Stopped recording clicks ({count} recorded).")

    def _on_pointer_down(self, generation: int, point: RecordedPoint) -> None:
        with self._lock:
            # delivered after the session that subscribed was toggled off
            if generation != self._generation:
                return
            self._points.append(point)
            snapshot = tuple(self._points)
        logger.info(f"Recorded click at: {point}")
        self._notify(snapshot)

    def _notify(self, snapshot: Tuple[RecordedPoint, ...]) -> None:
        if self.on_change:
            self.on_change(snapshot)
