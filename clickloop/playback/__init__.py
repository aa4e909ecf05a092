"""
Click playback: OS event injection, the periodic scheduler and the
emergency stop.
"""

from clickloop.playback.injector import EventInjector
from clickloop.playback.scheduler import PlaybackScheduler
from clickloop.playback.emergency_stop import EmergencyStopController

__all__ = ["EventInjector", "PlaybackScheduler", "EmergencyStopController"]
