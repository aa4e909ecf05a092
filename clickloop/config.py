"""
Configuration management for clickloop.
"""

from __future__ import annotations
import logging
import math
import threading
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field
import yaml

from clickloop.errors import InvalidInterval

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.2
DEFAULT_STOP_KEY = "esc"


class InjectorConfig(BaseModel):
    """Configuration for synthetic click injection."""

    backend: Literal["auto", "pyautogui", "pynput"] = Field(
        default="auto", description="Input library used to post synthetic events"
    )
    fail_safe: bool = Field(
        default=True, description="Abort injection when the cursor is in a screen corner (pyautogui)"
    )


class ClickloopConfig(BaseModel):
    """Main configuration for the clicker."""

    interval: float = Field(
        default=DEFAULT_INTERVAL,
        gt=0,
        allow_inf_nan=False,
        description="Seconds between playback clicks",
    )
    stop_key: str = Field(default=DEFAULT_STOP_KEY, description="Key that halts playback from anywhere")
    injector: InjectorConfig = Field(default_factory=InjectorConfig)

    verbose: bool = Field(default=False, description="Enable verbose logging")

    @classmethod
    def from_file(cls, path: Path) -> ClickloopConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_file(self, path: Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)


def parse_interval(text: Any) -> float:
    """
    Parse an operator-supplied interval.

    Args:
        text: String (or number) typed by the operator

    Returns:
        The interval in seconds

    Raises:
        InvalidInterval: if the value is not a finite number greater than 0
    """
    if isinstance(text, bool):
        raise InvalidInterval(text)
    try:
        value = float(text.strip() if isinstance(text, str) else text)
    except (TypeError, ValueError):
        raise InvalidInterval(text) from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidInterval(text)
    return value


class IntervalSetting:
    """
    The interval adopted for the next playback start.

    Invalid input is rejected without raising; the last valid value is kept.
    """

    def __init__(self, default: float = DEFAULT_INTERVAL):
        self._lock = threading.Lock()
        self._value = parse_interval(default)

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def update(self, text: Any) -> bool:
        """Adopt ``text`` as the new interval if it parses; return whether it did."""
        try:
            new_value = parse_interval(text)
        except InvalidInterval:
            logger.info(f"Invalid interval input: {text!r}. Keeping {self.value}.")
            return False
        with self._lock:
            self._value = new_value
        logger.debug(f"Interval set to {new_value}s")
        return True
