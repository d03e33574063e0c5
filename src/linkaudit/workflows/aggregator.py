"""Fold classified results into OK / redirected / error buckets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from ..core.keys import (
    K_COUNTS,
    K_ERROR,
    K_FINAL,
    K_OK,
    K_ORIGINAL,
    K_REASON,
    K_REDIRECTED,
    K_RESULTS,
    K_URL,
)
from .classifier import CheckResult, ResultKind


@dataclass(frozen=True)
class RedirectEntry:
    original: str
    final: str


@dataclass(frozen=True)
class ErrorEntry:
    url: str
    reason: str


@dataclass(frozen=True)
class LinkReport:
    """Read-only summary of a finished run."""

    ok: Tuple[str, ...] = ()
    redirected: Tuple[RedirectEntry, ...] = ()
    error: Tuple[ErrorEntry, ...] = ()
    results: Tuple[CheckResult, ...] = field(default=(), repr=False)

    @property
    def counts(self) -> Dict[str, int]:
        return {
            K_OK: len(self.ok),
            K_REDIRECTED: len(self.redirected),
            K_ERROR: len(self.error),
        }

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def has_errors(self) -> bool:
        return bool(self.error)

    def corrected(self) -> List[CheckResult]:
        """OK results that were probed under a corrected URL."""

        return [
            result
            for result in self.results
            if result.kind is ResultKind.OK and result.checked_url != result.original_url
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            K_OK: list(self.ok),
            K_REDIRECTED: [{K_ORIGINAL: entry.original, K_FINAL: entry.final} for entry in self.redirected],
            K_ERROR: [{K_URL: entry.url, K_REASON: entry.reason} for entry in self.error],
            K_COUNTS: self.counts,
            K_RESULTS: [result.to_dict() for result in self.results],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LinkReport":
        """Rebuild a report from its JSON form (results are authoritative)."""

        aggregator = ResultAggregator()
        aggregator.add_batch(CheckResult.from_dict(item) for item in payload.get(K_RESULTS) or [])
        return aggregator.finalize()


class ResultAggregator:
    """Deterministic fold over the stream of results, batch by batch."""

    def __init__(self) -> None:
        self._ok: List[str] = []
        self._redirected: List[RedirectEntry] = []
        self._error: List[ErrorEntry] = []
        self._results: List[CheckResult] = []

    def add(self, result: CheckResult) -> None:
        self._results.append(result)
        if result.kind is ResultKind.OK:
            self._ok.append(result.original_url)
        elif result.kind is ResultKind.REDIRECT:
            self._redirected.append(RedirectEntry(result.original_url, result.final_url or ""))
        else:
            self._error.append(ErrorEntry(result.original_url, result.reason or "unknown"))

    def add_batch(self, results: Iterable[CheckResult]) -> None:
        for result in results:
            self.add(result)

    def __len__(self) -> int:
        return len(self._results)

    def finalize(self) -> LinkReport:
        return LinkReport(
            ok=tuple(self._ok),
            redirected=tuple(self._redirected),
            error=tuple(self._error),
            results=tuple(self._results),
        )


__all__ = ["RedirectEntry", "ErrorEntry", "LinkReport", "ResultAggregator"]
