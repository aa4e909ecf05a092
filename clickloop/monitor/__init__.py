"""
Global input monitoring.
"""

from clickloop.monitor.global_monitor import GlobalInputMonitor, Subscription, key_name

__all__ = ["GlobalInputMonitor", "Subscription", "key_name"]
