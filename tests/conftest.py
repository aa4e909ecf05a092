"""
Shared fixtures: an in-process input monitor and a recording click driver.
"""

import threading
import time

import pytest

from clickloop.monitor.global_monitor import GlobalInputMonitor
from clickloop.playback.injector import EventInjector
from clickloop.playback.scheduler import PlaybackScheduler


class FakeDriver:
    """Stands in for pyautogui and records every call."""

    def __init__(self, fail_at=()):
        self.calls = []
        self.fail_at = set(fail_at)
        self.clicked = []
        self._lock = threading.Lock()

    def moveTo(self, x, y):
        if (x, y) in self.fail_at:
            raise OSError("not permitted")
        with self._lock:
            self.calls.append(("move", x, y))

    def mouseDown(self, x, y, button="left"):
        with self._lock:
            self.calls.append(("down", x, y, button))

    def mouseUp(self, x, y, button="left"):
        with self._lock:
            self.calls.append(("up", x, y, button))
            self.clicked.append((x, y))

    def position(self):
        return (12.7, 34.2)

    def targets(self):
        with self._lock:
            return list(self.clicked)


class FailSafeDriver(FakeDriver):
    """Mimics pyautogui raising its fail-safe when the cursor hits a screen corner."""

    class FailSafeException(Exception):
        pass

    def __init__(self, corner_at=((0, 0),)):
        super().__init__()
        self.corner_at = set(corner_at)

    def moveTo(self, x, y):
        if (x, y) in self.corner_at:
            raise self.FailSafeException("fail-safe triggered from mouse moving to a corner")
        super().moveTo(x, y)


def wait_until(predicate, timeout=3.0, step=0.005):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(step)
    return predicate()


@pytest.fixture
def monitor():
    monitor = GlobalInputMonitor(use_os_hooks=False)
    monitor.start()
    yield monitor
    monitor.stop()


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def injector(driver):
    return EventInjector(driver=driver)


@pytest.fixture
def scheduler(injector):
    scheduler = PlaybackScheduler(injector)
    yield scheduler
    scheduler.stop()
