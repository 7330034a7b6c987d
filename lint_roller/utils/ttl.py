"""Clock abstraction and a single-value TTL cache.

Caches take a clock so tests can advance time without sleeping.
"""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")


class Clock(Protocol):
    """Monotonic time source in seconds."""

    def now(self) -> float: ...


class SystemClock:
    """Clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


@dataclass
class CacheEntry(Generic[T]):
    """Cached value with its build timestamp."""

    value: T
    created_at: float


class TTLValue(Generic[T]):
    """Lazily built value that is rebuilt at most once per TTL window.

    Attributes:
        ttl_seconds: Lifetime of a built value.
        builds: Number of times the builder ran.
    """

    def __init__(
        self,
        builder: Callable[[], Awaitable[T]],
        ttl_seconds: float,
        clock: Clock | None = None,
    ):
        self._builder = builder
        self.ttl_seconds = ttl_seconds
        self._clock = clock or SystemClock()
        self._entry: CacheEntry[T] | None = None
        self.builds = 0

    def is_stale(self) -> bool:
        """True when there is no value or its TTL has expired."""
        if self._entry is None:
            return True
        return self._clock.now() - self._entry.created_at >= self.ttl_seconds

    async def get(self) -> T:
        """Return the cached value, rebuilding it when stale."""
        if self.is_stale():
            value = await self._builder()
            self._entry = CacheEntry(value=value, created_at=self._clock.now())
            self.builds += 1
        assert self._entry is not None
        return self._entry.value

    def invalidate(self) -> None:
        """Force the next get() to rebuild."""
        self._entry = None
