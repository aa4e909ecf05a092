"""
clickloop - record screen click locations and replay them on a fixed interval.
"""

__version__ = "0.1.0"
