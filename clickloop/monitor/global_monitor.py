"""
System-wide input monitoring.

Observes primary pointer-down and key-down events through pynput listeners
without suppressing them, and fans each one out to subscribed listeners on a
dedicated dispatcher thread.
"""

from __future__ import annotations
import itertools
import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from clickloop.models import EventKind, InputEvent, KeyDown, PointerDown, RecordedPoint

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]

_STOP = object()


@dataclass(frozen=True)
class Subscription:
    """Handle returned by ``GlobalInputMonitor.subscribe``."""

    kind: EventKind
    id: int
    listener: Listener = field(compare=False, repr=False)


def key_name(key: Any) -> str:
    """
    Normalize a pynput key to a plain identifier.

    ``Key.esc`` -> "esc", ``KeyCode(char='a')`` -> "a", ``KeyCode(vk=53)`` -> "vk53".
    """
    char = getattr(key, "char", None)
    if char:
        return char.lower()
    name = getattr(key, "name", None)
    if name:
        return name
    vk = getattr(key, "vk", None)
    if vk is not None:
        return f"vk{vk}"
    return str(key)


class GlobalInputMonitor:
    """
    Publish/subscribe hub for global input events.

    Listeners for ``EventKind.POINTER_DOWN`` receive a ``RecordedPoint``;
    listeners for ``EventKind.KEY_DOWN`` receive a key identifier string.

    Usage:
        monitor = GlobalInputMonitor()
        monitor.start()

        handle = monitor.subscribe(EventKind.KEY_DOWN, lambda key: print(key))
        ...
        monitor.unsubscribe(handle)
        monitor.stop()
    """

    def __init__(self, use_os_hooks: bool = True):
        """
        Args:
            use_os_hooks: Attach pynput listeners on start. When False only
                events passed to ``publish`` are delivered.
        """
        self.use_os_hooks = use_os_hooks

        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscriptions: Dict[EventKind, Dict[int, Subscription]] = {
            kind: {} for kind in EventKind
        }

        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._dispatcher: Optional[threading.Thread] = None
        self._os_listeners: List[Any] = []

    # =========================================================================
    # Subscription management
    # =========================================================================

    def subscribe(self, kind: EventKind, listener: Listener) -> Subscription:
        """Register ``listener`` for events of ``kind``."""
        kind = EventKind(kind)
        with self._lock:
            sub = Subscription(kind=kind, id=next(self._ids), listener=listener)
            self._subscriptions[kind][sub.id] = sub
        logger.debug(f"Subscribed listener {sub.id} to {kind.value}")
        return sub

    def unsubscribe(self, handle: Optional[Subscription]) -> None:
        """Remove a subscription. Unknown, repeated or None handles are ignored."""
        if handle is None:
            return
        with self._lock:
            removed = self._subscriptions[handle.kind].pop(handle.id, None)
        if removed is not None:
            logger.debug(f"Unsubscribed listener {handle.id} from {handle.kind.value}")

    def listener_count(self, kind: EventKind) -> int:
        with self._lock:
            return len(self._subscriptions[EventKind(kind)])

    # =========================================================================
    # Event delivery
    # =========================================================================

    def publish(self, event: InputEvent) -> None:
        """Queue an event for delivery. Safe to call from any thread."""
        self._queue.put(event)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every queued event has been delivered.

        Returns False if the dispatcher is not running or the timeout expires.
        """
        if not self.is_running:
            return False
        done = threading.Event()
        self._queue.put(done)
        return done.wait(timeout)

    def _dispatch_loop(self, events: "queue.Queue[Any]") -> None:
        while True:
            item = events.get()
            if item is _STOP:
                break
            if isinstance(item, threading.Event):
                item.set()
                continue
            self._deliver(item)

    def _deliver(self, event: InputEvent) -> None:
        if isinstance(event, PointerDown):
            payload: Any = event.point
        elif isinstance(event, KeyDown):
            payload = event.key
        else:
            logger.warning(f"Dropping unknown event: {event!r}")
            return

        with self._lock:
            listeners = list(self._subscriptions[event.kind].values())

        for sub in listeners:
            try:
                sub.listener(payload)
            except Exception:
                logger.exception(f"Listener {sub.id} failed on {event.kind.value}")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._dispatcher is not None and self._dispatcher.is_alive()

    def start(self) -> None:
        """Start the dispatcher thread and, if enabled, the OS listeners."""
        if self.is_running:
            return
        # a dispatcher that timed out on stop may still own the old queue
        self._queue = queue.Queue()
        self._dispatcher = threading.Thread(
            target=self._dispatch_loop,
            args=(self._queue,),
            name="clickloop-monitor",
            daemon=True,
        )
        self._dispatcher.start()
        if self.use_os_hooks:
            self._start_os_listeners()
        logger.info("Input monitor started")

    def stop(self) -> None:
        """Detach OS listeners and stop the dispatcher after draining the queue."""
        for listener in self._os_listeners:
            try:
                listener.stop()
            except Exception as e:
                logger.warning(f"Error stopping input listener: {e}")
        self._os_listeners = []

        dispatcher = self._dispatcher
        if dispatcher is None:
            return
        self._queue.put(_STOP)
        if dispatcher is not threading.current_thread():
            dispatcher.join(timeout=2.0)
        self._dispatcher = None
        logger.info("Input monitor stopped")

    def _start_os_listeners(self) -> None:
        try:
            from pynput import keyboard, mouse
        except Exception as e:
            logger.warning(f"Global input monitoring unavailable: {e}")
            return

        primary = mouse.Button.left

        def on_click(x, y, button, pressed):
            if pressed and button == primary:
                self.publish(PointerDown(RecordedPoint(float(x), float(y))))

        def on_press(key):
            self.publish(KeyDown(key_name(key)))

        try:
            for listener in (mouse.Listener(on_click=on_click), keyboard.Listener(on_press=on_press)):
                listener.start()
                self._os_listeners.append(listener)
        except Exception as e:
            logger.warning(
                f"Could not attach global input listeners ({e}). "
                "On macOS, grant Input Monitoring / Accessibility permission."
            )
