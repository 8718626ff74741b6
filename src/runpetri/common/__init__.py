"""Shared helpers used across runpetri."""

from .timebase import Timebase, WallClock, UTCClock, DictatedClock

__all__ = [
    "Timebase",
    "WallClock",
    "UTCClock",
    "DictatedClock",
]
