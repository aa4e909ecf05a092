"""
Always-on emergency stop for playback.
"""

from __future__ import annotations
import logging

from clickloop.config import DEFAULT_STOP_KEY
from clickloop.models import EventKind
from clickloop.monitor.global_monitor import GlobalInputMonitor
from clickloop.playback.scheduler import PlaybackScheduler

logger = logging.getLogger(__name__)


class EmergencyStopController:
    """
    Stops playback whenever the stop key is pressed, whatever has focus.

    Subscribes once for the lifetime of the process and is never removed.
    """

    def __init__(
        self,
        monitor: GlobalInputMonitor,
        scheduler: PlaybackScheduler,
        stop_key: str = DEFAULT_STOP_KEY,
    ):
        self.scheduler = scheduler
        self.stop_key = stop_key.lower()
        self.triggered_count = 0
        self._subscription = monitor.subscribe(EventKind.KEY_DOWN, self._on_key)

    def _on_key(self, key: str) -> None:
        if key.lower() != self.stop_key:
            return
        self.triggered_count += 1
        was_running = self.scheduler.is_running
        self.scheduler.stop()
        if was_running:
            logger.warning(f"Emergency stop triggered by {self.stop_key} key.")
