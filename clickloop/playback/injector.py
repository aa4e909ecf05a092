"""
OS-level click injection.

Uses pyautogui to post real pointer events:
- Move the cursor to the target
- Press the primary button
- Release the primary button

pynput's mouse controller is used when pyautogui is unavailable.
"""

from __future__ import annotations
import logging
import threading
from typing import Any, Callable, Optional, Tuple

from clickloop.errors import InjectionFailure
from clickloop.models import RecordedPoint

logger = logging.getLogger(__name__)


def _abort_errors(driver: Optional[Any]) -> Tuple[type, ...]:
    """Exceptions the driver raises as a deliberate abort (pyautogui's corner fail-safe)."""
    error = getattr(driver, "FailSafeException", None)
    if isinstance(error, type) and issubclass(error, BaseException):
        return (error,)
    return ()


class _PynputBackend:
    """Adapts pynput's mouse controller to the subset of the pyautogui API we use."""

    def __init__(self):
        from pynput.mouse import Button, Controller

        self._button = Button.left
        self._mouse = Controller()

    def moveTo(self, x: float, y: float) -> None:
        self._mouse.position = (x, y)

    def mouseDown(self, x: float, y: float, button: str = "left") -> None:
        self._mouse.position = (x, y)
        self._mouse.press(self._button)

    def mouseUp(self, x: float, y: float, button: str = "left") -> None:
        self._mouse.position = (x, y)
        self._mouse.release(self._button)

    def position(self) -> Tuple[int, int]:
        x, y = self._mouse.position
        return (int(x), int(y))


class EventInjector:
    """
    Synthesizes primary-button clicks at screen coordinates.

    A click is never reported to the caller as an error. Failures are logged,
    counted and handed to ``on_failure`` so a timer-driven loop keeps going.
    The one exception is pyautogui's corner fail-safe: it is treated as an
    operator abort and also reported to ``on_abort``.

    Usage:
        injector = EventInjector()
        injector.click(RecordedPoint(500, 300))
    """

    def __init__(
        self,
        backend: str = "auto",
        fail_safe: bool = True,
        driver: Optional[Any] = None,
    ):
        """
        Initialize the injector.

        Args:
            backend: "auto", "pyautogui" or "pynput"
            fail_safe: If True, a cursor parked in a screen corner aborts (pyautogui safety feature)
            driver: Object exposing moveTo/mouseDown/mouseUp; bypasses backend selection
        """
        self.fail_safe = fail_safe
        self.backend_name = "custom" if driver is not None else backend
        self.click_count = 0
        self.failure_count = 0
        self.on_failure: Optional[Callable[[InjectionFailure], None]] = None
        self.on_abort: Optional[Callable[[InjectionFailure], None]] = None

        self._lock = threading.Lock()
        self._driver = driver if driver is not None else self._init_backend(backend)
        self._abort_errors = _abort_errors(self._driver)

    def _init_backend(self, backend: str) -> Optional[Any]:
        """Pick the input library used to post events."""
        if backend in ("auto", "pyautogui"):
            try:
                import pyautogui
                pyautogui.FAILSAFE = self.fail_safe
                pyautogui.PAUSE = 0  # clicks are paced by the scheduler
                self.backend_name = "pyautogui"
                logger.info("Using pyautogui for click injection")
                return pyautogui
            except Exception as e:
                if backend == "pyautogui":
                    logger.error(f"pyautogui unavailable: {e}")
                    return None
                logger.warning(f"pyautogui not available ({e}), trying pynput")

        try:
            driver = _PynputBackend()
            self.backend_name = "pynput"
            logger.info("Using pynput for click injection")
            return driver
        except Exception as e:
            logger.error(f"No input injection library available: {e}")
            return None

    @property
    def available(self) -> bool:
        return self._driver is not None

    def click(self, point: RecordedPoint) -> None:
        """
        Move to ``point`` and click the primary button there.

        Emits, in order: pointer move, button press, button release.
        """
        with self._lock:
            try:
                self._emit(point)
            except InjectionFailure as failure:
                self.failure_count += 1
                if failure.aborted:
                    logger.warning(f"Fail-safe triggered at {point}; aborting playback.")
                else:
                    logger.warning(str(failure))
                if self.on_failure:
                    self.on_failure(failure)
                if failure.aborted and self.on_abort:
                    self.on_abort(failure)
                return
            self.click_count += 1
        logger.debug(f"Clicked at {point}")

    def _emit(self, point: RecordedPoint) -> None:
        if self._driver is None:
            raise InjectionFailure(point, RuntimeError("no injection backend"))
        x, y = point.x, point.y
        try:
            self._driver.moveTo(x, y)
            self._driver.mouseDown(x, y, button="left")
            self._driver.mouseUp(x, y, button="left")
        except self._abort_errors as e:
            raise InjectionFailure(point, e, aborted=True) from e
        except Exception as e:
            raise InjectionFailure(point, e) from e

    def position(self) -> Optional[Tuple[int, int]]:
        """Current cursor position, or None when no backend is available."""
        if self._driver is None:
            return None
        pos = self._driver.position()
        return (int(pos[0]), int(pos[1]))
