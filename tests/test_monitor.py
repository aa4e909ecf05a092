"""
Tests for the global input monitor.
"""

import sys
import threading
from types import SimpleNamespace

import pytest

from clickloop.models import EventKind, KeyDown, PointerDown, RecordedPoint
from clickloop.monitor import global_monitor
from clickloop.monitor.global_monitor import GlobalInputMonitor, key_name


class FakeListener:
    """Stands in for a pynput listener."""

    def __init__(self, fail_start=False, **callbacks):
        self.callbacks = callbacks
        self.fail_start = fail_start
        self.started = False
        self.stopped = False

    def start(self):
        if self.fail_start:
            raise OSError("input monitoring not permitted")
        self.started = True

    def stop(self):
        self.stopped = True


def _fake_pynput(keyboard_fails=False):
    created = []

    def make(fail_start):
        def factory(**callbacks):
            listener = FakeListener(fail_start=fail_start, **callbacks)
            created.append(listener)
            return listener
        return factory

    mouse = SimpleNamespace(Button=SimpleNamespace(left="left"), Listener=make(False))
    keyboard = SimpleNamespace(Listener=make(keyboard_fails))
    return SimpleNamespace(mouse=mouse, keyboard=keyboard), created


class TestSubscriptions:
    """Tests for subscribe/unsubscribe."""

    def test_pointer_listener_receives_point(self, monitor):
        """Test that pointer listeners get the clicked coordinate."""
        received = []
        monitor.subscribe(EventKind.POINTER_DOWN, received.append)

        monitor.publish(PointerDown(RecordedPoint(10, 20)))
        assert monitor.flush(timeout=2)

        assert received == [RecordedPoint(10, 20)]

    def test_key_listener_receives_key_id(self, monitor):
        """Test that key listeners get the key identifier."""
        received = []
        monitor.subscribe(EventKind.KEY_DOWN, received.append)

        monitor.publish(KeyDown("esc"))
        assert monitor.flush(timeout=2)

        assert received == ["esc"]

    def test_listeners_only_see_their_kind(self, monitor):
        """Test that events are routed by kind."""
        pointers, keys = [], []
        monitor.subscribe(EventKind.POINTER_DOWN, pointers.append)
        monitor.subscribe(EventKind.KEY_DOWN, keys.append)

        monitor.publish(KeyDown("a"))
        monitor.publish(PointerDown(RecordedPoint(1, 1)))
        monitor.flush(timeout=2)

        assert pointers == [RecordedPoint(1, 1)]
        assert keys == ["a"]

    def test_multiple_listeners_per_kind(self, monitor):
        """Test that every listener for a kind gets each event."""
        first, second = [], []
        monitor.subscribe(EventKind.KEY_DOWN, first.append)
        monitor.subscribe(EventKind.KEY_DOWN, second.append)

        monitor.publish(KeyDown("x"))
        monitor.flush(timeout=2)

        assert first == ["x"]
        assert second == ["x"]
        assert monitor.listener_count(EventKind.KEY_DOWN) == 2

    def test_unsubscribe_stops_delivery(self, monitor):
        """Test that a removed listener receives nothing."""
        received = []
        handle = monitor.subscribe(EventKind.KEY_DOWN, received.append)
        monitor.unsubscribe(handle)

        monitor.publish(KeyDown("x"))
        monitor.flush(timeout=2)

        assert received == []

    def test_unsubscribe_is_idempotent(self, monitor):
        """Test that repeated and None handles are ignored."""
        handle = monitor.subscribe(EventKind.KEY_DOWN, lambda key: None)
        monitor.unsubscribe(handle)
        monitor.unsubscribe(handle)
        monitor.unsubscribe(None)
        assert monitor.listener_count(EventKind.KEY_DOWN) == 0

    def test_failing_listener_does_not_block_others(self, monitor):
        """Test that one listener raising does not stop delivery to the rest."""
        received = []

        def broken(key):
            raise RuntimeError("boom")

        monitor.subscribe(EventKind.KEY_DOWN, broken)
        monitor.subscribe(EventKind.KEY_DOWN, received.append)

        monitor.publish(KeyDown("q"))
        monitor.flush(timeout=2)

        assert received == ["q"]


class TestDelivery:
    """Tests for asynchronous delivery."""

    def test_listeners_run_on_dispatcher_thread(self, monitor):
        """Test that listeners never run on the publishing thread."""
        threads = []
        monitor.subscribe(EventKind.KEY_DOWN, lambda key: threads.append(threading.current_thread()))

        monitor.publish(KeyDown("a"))
        monitor.flush(timeout=2)

        assert threads and threads[0] is not threading.current_thread()

    def test_events_delivered_in_order(self, monitor):
        """Test that events arrive in publish order."""
        received = []
        monitor.subscribe(EventKind.POINTER_DOWN, received.append)

        for i in range(20):
            monitor.publish(PointerDown(RecordedPoint(i, i)))
        monitor.flush(timeout=2)

        assert [p.x for p in received] == list(range(20))

    def test_flush_without_dispatcher_returns_false(self):
        """Test that flush reports failure when the monitor is not running."""
        monitor = GlobalInputMonitor(use_os_hooks=False)
        assert monitor.flush(timeout=0.1) is False


class TestLifecycle:
    """Tests for starting and stopping the monitor."""

    def test_start_is_idempotent_and_stop_ends_thread(self):
        """Test repeated start/stop calls."""
        monitor = GlobalInputMonitor(use_os_hooks=False)
        monitor.start()
        monitor.start()
        assert monitor.is_running
        monitor.stop()
        assert not monitor.is_running
        monitor.stop()

    def test_restart_ignores_stop_marker_left_in_old_queue(self):
        """Test that a stop marker left behind by a timed-out stop does not kill a restart."""
        monitor = GlobalInputMonitor(use_os_hooks=False)
        monitor.start()
        monitor.stop()
        monitor._queue.put(global_monitor._STOP)

        monitor.start()
        received = []
        monitor.subscribe(EventKind.KEY_DOWN, received.append)
        monitor.publish(KeyDown("a"))

        assert monitor.flush(timeout=2)
        assert received == ["a"]
        monitor.stop()

    def test_os_listeners_started_and_stopped(self, monkeypatch):
        """Test that pynput mouse and keyboard listeners are attached and detached."""
        fake, created = _fake_pynput()
        monkeypatch.setitem(sys.modules, "pynput", fake)

        monitor = GlobalInputMonitor()
        monitor.start()
        monitor.stop()

        assert len(created) == 2
        assert all(listener.started and listener.stopped for listener in created)

    def test_partial_listener_start_is_cleaned_up(self, monkeypatch):
        """Test that the mouse listener is stopped even if the keyboard listener fails to start."""
        fake, created = _fake_pynput(keyboard_fails=True)
        monkeypatch.setitem(sys.modules, "pynput", fake)

        monitor = GlobalInputMonitor()
        monitor.start()
        monitor.stop()

        mouse_listener = created[0]
        assert mouse_listener.started
        assert mouse_listener.stopped

    def test_os_click_callback_publishes_primary_clicks_only(self, monkeypatch):
        """Test that only primary-button presses are turned into pointer events."""
        fake, created = _fake_pynput()
        monkeypatch.setitem(sys.modules, "pynput", fake)
        monitor = GlobalInputMonitor()
        received = []
        monitor.subscribe(EventKind.POINTER_DOWN, received.append)
        monitor.start()

        on_click = created[0].callbacks["on_click"]
        on_click(5, 6, "left", True)
        on_click(5, 6, "left", False)
        on_click(7, 8, "right", True)
        monitor.flush(timeout=2)
        monitor.stop()

        assert received == [RecordedPoint(5.0, 6.0)]


class TestKeyName:
    """Tests for key_name normalization."""

    def test_named_key(self):
        """Test that special keys map to their name."""
        assert key_name(SimpleNamespace(name="esc")) == "esc"

    def test_character_key_is_lowercased(self):
        """Test that character keys are lowercased."""
        assert key_name(SimpleNamespace(char="A", vk=0)) == "a"

    def test_virtual_key_fallback(self):
        """Test that keys without a char or name use the virtual key code."""
        assert key_name(SimpleNamespace(char=None, vk=53)) == "vk53"
