"""Shared utilities."""

from .ttl import CacheEntry, Clock, ManualClock, SystemClock, TTLValue

__all__ = ["CacheEntry", "Clock", "ManualClock", "SystemClock", "TTLValue"]
