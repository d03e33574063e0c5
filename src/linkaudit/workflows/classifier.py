"""Translate a verifier outcome into the final, immutable per-URL record."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..core.keys import K_ATTEMPTS, K_CHECKED_URL, K_FINAL_URL, K_KIND, K_ORIGINAL_URL, K_REASON
from .corrections import ResolvedUrl
from .link_verify import Outcome, Success, Verification


class ResultKind(str, Enum):
    OK = "OK"
    REDIRECT = "REDIRECT"
    ERROR = "ERROR"


@dataclass(frozen=True)
class CheckResult:
    """Terminal record for one originally requested URL."""

    original_url: str
    checked_url: str
    kind: ResultKind
    attempts: int
    final_url: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            K_ORIGINAL_URL: self.original_url,
            K_CHECKED_URL: self.checked_url,
            K_KIND: self.kind.value,
            K_ATTEMPTS: self.attempts,
        }
        if self.final_url is not None:
            payload[K_FINAL_URL] = self.final_url
        if self.reason is not None:
            payload[K_REASON] = self.reason
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CheckResult":
        return cls(
            original_url=str(payload[K_ORIGINAL_URL]),
            checked_url=str(payload.get(K_CHECKED_URL) or payload[K_ORIGINAL_URL]),
            kind=ResultKind(payload[K_KIND]),
            attempts=int(payload.get(K_ATTEMPTS, 1)),
            final_url=payload.get(K_FINAL_URL),
            reason=payload.get(K_REASON),
        )


def classify_outcome(resolved: ResolvedUrl, outcome: Outcome, attempts: int) -> CheckResult:
    if isinstance(outcome, Success):
        if outcome.final_url == resolved.checked:
            return CheckResult(resolved.original, resolved.checked, ResultKind.OK, attempts)
        return CheckResult(
            resolved.original,
            resolved.checked,
            ResultKind.REDIRECT,
            attempts,
            final_url=outcome.final_url,
        )
    return CheckResult(
        resolved.original,
        resolved.checked,
        ResultKind.ERROR,
        attempts,
        reason=outcome.reason or "unknown",
    )


def classify_verification(resolved: ResolvedUrl, verification: Verification) -> CheckResult:
    return classify_outcome(resolved, verification.outcome, verification.attempts)


__all__ = ["ResultKind", "CheckResult", "classify_outcome", "classify_verification"]
