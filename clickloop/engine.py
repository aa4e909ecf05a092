"""
Recording/playback engine wiring the monitor, recorder and player together.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from clickloop.config import ClickloopConfig, IntervalSetting
from clickloop.errors import ClickloopError
from clickloop.models import RecordedPoint, RecordingState
from clickloop.monitor.global_monitor import GlobalInputMonitor
from clickloop.playback.emergency_stop import EmergencyStopController
from clickloop.playback.injector import EventInjector
from clickloop.playback.scheduler import PlaybackScheduler
from clickloop.recording.session import RecordingSession

logger = logging.getLogger(__name__)


class ClickEngine:
    """
    Operator-facing facade over the clicker.

    Each public method maps to one operator command: toggle recording, set
    the interval, start playback, stop playback and exit. The emergency stop
    is armed as soon as the engine is built.

    Usage:
        with ClickEngine() as engine:
            engine.toggle_recording()
            ...                       # operator clicks around
            engine.toggle_recording()
            engine.start_playback()
    """

    def __init__(
        self,
        config: Optional[ClickloopConfig] = None,
        monitor: Optional[GlobalInputMonitor] = None,
        injector: Optional[EventInjector] = None,
    ):
        """
        Args:
            config: Clicker configuration (defaults used when omitted)
            monitor: Input monitor; a pynput-backed one is created when omitted
            injector: Click injector; built from ``config.injector`` when omitted
        """
        self.config = config or ClickloopConfig()

        self.monitor = monitor or GlobalInputMonitor()
        self.injector = injector or EventInjector(
            backend=self.config.injector.backend,
            fail_safe=self.config.injector.fail_safe,
        )
        self.interval = IntervalSetting(self.config.interval)
        self.session = RecordingSession(self.monitor)
        self.scheduler = PlaybackScheduler(self.injector)
        self.emergency_stop = EmergencyStopController(
            self.monitor, self.scheduler, stop_key=self.config.stop_key
        )
        self._closed = False

    def __enter__(self) -> ClickEngine:
        self.monitor.start()
        return self

    def __exit__(self, *exc) -> None:
        self.exit()

    # =========================================================================
    # Operator commands
    # =========================================================================

    def toggle_recording(self) -> RecordingState:
        return self.session.toggle()

    def set_interval(self, text: str) -> bool:
        """Adopt ``text`` as the interval for the next start, if valid."""
        return self.interval.update(text)

    def start_playback(self) -> None:
        """
        Start clicking the recorded points.

        Raises:
            EmptySequence: nothing has been recorded
            InvalidInterval: the current interval is not usable
        """
        try:
            self.scheduler.start(self.session.points(), self.interval.value)
        except ClickloopError as e:
            logger.info(f"Playback not started: {e}")
            raise

    def stop_playback(self) -> None:
        self.scheduler.stop()

    def exit(self) -> None:
        """Stop playback and release the input monitor. Safe to call twice."""
        self.stop_playback()
        if self._closed:
            return
        self._closed = True
        if self.session.is_recording:
            self.session.toggle()
        self.monitor.stop()
        logger.info("Exiting program.")

    # =========================================================================
    # Read-only views
    # =========================================================================

    def points(self) -> Tuple[RecordedPoint, ...]:
        return self.session.points()

    def display_points(self) -> List[Tuple[int, int]]:
        """Recorded points as integer display coordinates."""
        return [p.display() for p in self.session.points()]

    def display_lines(self) -> List[str]:
        """Text rendering of the recorded points."""
        points = self.display_points()
        if not points:
            return ["No clicks recorded yet."]
        lines = [f"Recorded {len(points)} locations:"]
        lines.extend(f"{i}: ({x}, {y})" for i, (x, y) in enumerate(points, start=1))
        return lines

    def status(self) -> dict:
        """Current engine status."""
        return {
            "recording": self.session.is_recording,
            "playing": self.scheduler.is_running,
            "points": len(self.session.points()),
            "interval": self.interval.value,
            "clicks": self.injector.click_count,
            "failures": self.injector.failure_count,
        }
