"""Sequential bulk execution with progress reporting and per-item failure isolation.

Items run strictly one after another in input order. A failing item is
recorded and the run moves on; the loop yields to the event loop between
items so a host UI stays responsive.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from .lint_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.BULK)

T = TypeVar("T")
R = TypeVar("R")


class CancellationToken:
    """Cooperative cancellation for a bulk run.

    Cancelling lets the current item finish and stops before the next one.
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ItemOutcome(Generic[T, R]):
    """Result of one item: the handler's return value, or the error it raised."""

    index: int
    item: T
    result: R | None = None
    error: str | None = None

    @property
    def raised(self) -> bool:
        return self.error is not None


@dataclass
class BulkProgress(Generic[T, R]):
    """Progress after an item completed."""

    current: int
    total: int
    outcome: ItemOutcome[T, R]


class BulkProgressCallback(Protocol):
    """Protocol for per-item progress callbacks."""

    def __call__(self, progress: BulkProgress) -> None:
        """Called after each item.

        Args:
            progress: Items done so far, the total, and the last outcome
        """
        ...


@dataclass
class BulkRun(Generic[T, R]):
    outcomes: list[ItemOutcome[T, R]] = field(default_factory=list)
    cancelled: bool = False


class BulkOrchestrator:
    """Run an async handler over items one at a time."""

    async def run(
        self,
        items: Sequence[T],
        handler: Callable[[T], Awaitable[R]],
        on_progress: BulkProgressCallback | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BulkRun[T, R]:
        """Process every item in order.

        Args:
            items: Work items.
            handler: Coroutine function applied to each item.
            on_progress: Called after each item.
            cancel_token: Optional; without one the run always completes.

        Returns:
            One outcome per processed item, in input order.
        """
        run: BulkRun[T, R] = BulkRun()
        total = len(items)
        start = time.perf_counter()

        for index, item in enumerate(items):
            if cancel_token is not None and cancel_token.cancelled:
                logger.info(f"Bulk run cancelled after {index}/{total} items")
                run.cancelled = True
                break

            outcome: ItemOutcome[T, R] = ItemOutcome(index=index, item=item)
            try:
                outcome.result = await handler(item)
            except Exception as e:
                logger.warning(f"Bulk item {index + 1}/{total} failed: {e}")
                outcome.error = str(e) or type(e).__name__
            run.outcomes.append(outcome)

            if on_progress is not None:
                on_progress(BulkProgress(current=index + 1, total=total, outcome=outcome))
            await asyncio.sleep(0)

        logger.debug(
            f"Bulk run processed {len(run.outcomes)}/{total} items",
            extra={
                "operation": "bulk_run",
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return run
