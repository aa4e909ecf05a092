"""
Periodic playback of a recorded click sequence.
"""

from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Optional, Sequence, Tuple

from clickloop.config import parse_interval
from clickloop.errors import EmptySequence
from clickloop.models import PlaybackState, RecordedPoint
from clickloop.playback.injector import EventInjector

logger = logging.getLogger(__name__)


class _PeriodicTimer(threading.Thread):
    """Fixed-rate timer thread; each instance belongs to one playback run."""

    def __init__(self, interval: float, callback: Callable[[], None], name: str):
        super().__init__(name=name, daemon=True)
        self.interval = interval
        self.callback = callback
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    def run(self) -> None:
        deadline = time.monotonic() + self.interval
        while not self._cancelled.wait(max(0.0, deadline - time.monotonic())):
            self.callback()
            deadline += self.interval
            now = time.monotonic()
            if deadline < now:
                # skip ticks missed while a click was running late
                deadline = now + self.interval


class PlaybackScheduler:
    """
    Clicks through a recorded sequence on a fixed interval until stopped.

    Only one timer is ever live. ``start`` replaces a running timer and
    ``stop`` cancels it; once either returns, no tick from the previous timer
    can fire. A tick that is already clicking finishes first.

    Usage:
        scheduler = PlaybackScheduler(EventInjector())
        scheduler.start(session.points(), interval=0.2)
        ...
        scheduler.stop()
    """

    def __init__(self, injector: EventInjector):
        self.injector = injector
        self.injector.on_abort = self._on_abort
        self.on_tick: Optional[Callable[[int, RecordedPoint], None]] = None

        self._lock = threading.RLock()
        self._state = PlaybackState.STOPPED
        self._points: Tuple[RecordedPoint, ...] = ()
        self._cursor: Optional[int] = None
        self._interval: Optional[float] = None
        self._timer: Optional[_PeriodicTimer] = None
        self._generation = 0
        self.tick_count = 0

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == PlaybackState.RUNNING

    @property
    def cursor(self) -> Optional[int]:
        """Index of the next point to click, or None when stopped."""
        return self._cursor

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    @property
    def points(self) -> Tuple[RecordedPoint, ...]:
        """The sequence being played (empty when stopped)."""
        return self._points

    def start(self, points: Sequence[RecordedPoint], interval: float) -> None:
        """
        Begin clicking ``points`` in order every ``interval`` seconds.

        Args:
            points: Sequence to play; copied, later changes are not picked up
            interval: Seconds between clicks

        Raises:
            EmptySequence: if ``points`` is empty
            InvalidInterval: if ``interval`` is not a positive number
        """
        snapshot = tuple(points)
        if not snapshot:
            raise EmptySequence()
        interval = parse_interval(interval)

        with self._lock:
            self._cancel_timer()
            self._generation += 1
            generation = self._generation
            self._points = snapshot
            self._cursor = 0
            self._interval = interval
            self._state = PlaybackState.RUNNING
            self._timer = _PeriodicTimer(
                interval,
                lambda: self._tick(generation),
                name=f"clickloop-playback-{generation}",
            )
            self._timer.start()

        logger.info(
            f"Started autoclicking {len(snapshot)} recorded locations "
            f"with interval {interval} seconds."
        )

    def stop(self) -> None:
        """Cancel playback. Does nothing if already stopped."""
        with self._lock:
            if self._state == PlaybackState.STOPPED:
                return
            self._cancel_timer()
            self._generation += 1
            self._state = PlaybackState.STOPPED
            self._points = ()
            self._cursor = None
        logger.info("Autoclicker stopped.")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_abort(self, failure) -> None:
        logger.warning(f"Stopping playback: {failure}")
        self.stop()

    def _tick(self, generation: int) -> None:
        with self._lock:
            # a replaced or cancelled timer may wake once more; ignore it
            if generation != self._generation or self._state != PlaybackState.RUNNING:
                return
            index = self._cursor
            point = self._points[index]
            self.injector.click(point)
            # the click may have aborted playback
            if self._state != PlaybackState.RUNNING:
                return
            self._cursor = (index + 1) % len(self._points)
            self.tick_count += 1
            if self.on_tick:
                self.on_tick(index, point)
