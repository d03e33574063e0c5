"""Engine entry point: corrections -> batches -> verification -> report."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Iterable, List, Optional, Protocol

import aiohttp

from .aggregator import LinkReport, ResultAggregator
from .checker_config import CheckConfig
from .classifier import CheckResult, classify_verification
from .corrections import ResolvedUrl
from .link_verify import LinkVerifier, Verification
from .scheduler import BatchScheduler, ProgressHook

logger = logging.getLogger(__name__)


class NoUrlsError(ValueError):
    """Raised when a run is started without any URL to check."""


class Verifier(Protocol):
    async def verify(self, url: str) -> Verification: ...


async def _drive(
    items: List[ResolvedUrl],
    verifier: Verifier,
    scheduler: BatchScheduler,
    aggregator: ResultAggregator,
) -> None:
    async def check(item: ResolvedUrl) -> CheckResult:
        verification = await verifier.verify(item.checked)
        return classify_verification(item, verification)

    async for results in scheduler.iter_batches(items, check):
        aggregator.add_batch(results)


async def check_links(
    urls: Iterable[str],
    config: Optional[CheckConfig] = None,
    *,
    verifier: Optional[Verifier] = None,
    progress_hook: Optional[ProgressHook] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> LinkReport:
    """Check every URL once and return the finalized report.

    ``urls`` must already be deduplicated; each entry yields exactly one
    result. Without an explicit ``verifier`` a single ``aiohttp`` session is
    opened for the run and shared by all checks.
    """

    url_list = list(urls)
    if not url_list:
        raise NoUrlsError("No URLs to check; the input produced an empty URL set.")
    config = config or CheckConfig()
    items = config.corrections.resolve_all(url_list)
    corrected = sum(1 for item in items if item.corrected)
    scheduler = BatchScheduler.from_config(config, sleep=sleep, progress_hook=progress_hook)
    aggregator = ResultAggregator()
    logger.info(
        "checking %d urls (%d corrected) in %d batches of %d with %.1fs delay",
        len(items),
        corrected,
        scheduler.total_batches(len(items)),
        config.batch_size,
        config.batch_delay,
    )
    started = time.perf_counter()
    if verifier is not None:
        await _drive(items, verifier, scheduler, aggregator)
    else:
        connector = aiohttp.TCPConnector(limit=config.batch_size)
        headers = {
            "User-Agent": config.user_agent,
            "Accept-Language": config.accept_language,
        }
        async with aiohttp.ClientSession(connector=connector, headers=headers) as session:
            await _drive(items, LinkVerifier(config, session=session, sleep=sleep), scheduler, aggregator)
    report = aggregator.finalize()
    counts = report.counts
    logger.info(
        "analysis complete in %.1fs: ok=%d redirected=%d error=%d",
        time.perf_counter() - started,
        counts["ok"],
        counts["redirected"],
        counts["error"],
    )
    return report


def run_check(
    urls: Iterable[str],
    config: Optional[CheckConfig] = None,
    *,
    verifier: Optional[Verifier] = None,
    progress_hook: Optional[ProgressHook] = None,
) -> LinkReport:
    """Synchronous wrapper around :func:`check_links`."""

    return asyncio.run(check_links(urls, config, verifier=verifier, progress_hook=progress_hook))


__all__ = ["NoUrlsError", "Verifier", "check_links", "run_check"]
