"""Fixed-size batch scheduling with a pause between bursts."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Sequence, TypeVar

from .checker_config import CheckConfig
from .classifier import CheckResult
from .corrections import ResolvedUrl

logger = logging.getLogger(__name__)

T = TypeVar("T")

CheckFn = Callable[[ResolvedUrl], Awaitable[CheckResult]]
ProgressHook = Callable[[int, int, List[CheckResult]], None]


def partition(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into consecutive slices of at most ``size`` elements."""

    if size <= 0:
        raise ValueError(f"batch size must be positive, got {size}")
    return [list(items[start:start + size]) for start in range(0, len(items), size)]


class BatchScheduler:
    """Runs one batch of checks concurrently, then waits before the next.

    At most ``batch_size`` checks are outstanding at any moment, and the next
    batch is dispatched no sooner than ``batch_delay`` seconds after every
    check in the previous batch has settled.
    """

    def __init__(
        self,
        batch_size: int,
        batch_delay: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        progress_hook: Optional[ProgressHook] = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch size must be positive, got {batch_size}")
        self.batch_size = batch_size
        self.batch_delay = max(0.0, batch_delay)
        self._sleep = sleep
        self._progress_hook = progress_hook

    @classmethod
    def from_config(
        cls,
        config: CheckConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        progress_hook: Optional[ProgressHook] = None,
    ) -> "BatchScheduler":
        return cls(config.batch_size, config.batch_delay, sleep=sleep, progress_hook=progress_hook)

    def total_batches(self, count: int) -> int:
        return math.ceil(count / self.batch_size)

    async def iter_batches(
        self,
        items: Sequence[ResolvedUrl],
        check: CheckFn,
    ) -> AsyncIterator[List[CheckResult]]:
        """Yield each batch's results, in input order, once the batch has settled."""

        batches = partition(items, self.batch_size)
        total = len(batches)
        for number, batch in enumerate(batches, start=1):
            logger.info("processing batch %d of %d (%d urls)", number, total, len(batch))
            settled = await asyncio.gather(*(check(item) for item in batch), return_exceptions=True)
            for outcome in settled:
                if isinstance(outcome, BaseException):
                    raise outcome
            results: List[CheckResult] = list(settled)  # type: ignore[arg-type]
            self._notify(number, total, results)
            yield results
            if number < total and self.batch_delay > 0:
                await self._sleep(self.batch_delay)

    async def run(self, items: Sequence[ResolvedUrl], check: CheckFn) -> List[CheckResult]:
        collected: List[CheckResult] = []
        async for results in self.iter_batches(items, check):
            collected.extend(results)
        return collected

    def _notify(self, number: int, total: int, results: List[CheckResult]) -> None:
        if self._progress_hook is None:
            return
        try:
            self._progress_hook(number, total, results)
        except Exception:
            logger.warning("progress hook failed for batch %d", number, exc_info=True)


__all__ = ["BatchScheduler", "CheckFn", "ProgressHook", "partition"]
