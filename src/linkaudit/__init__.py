"""Bulk link verification: batched async checks, redirects and dead links."""

from .workflows import (
    CheckConfig,
    CheckResult,
    CorrectionMap,
    LinkReport,
    NoUrlsError,
    ResultKind,
    check_links,
    run_check,
)

__version__ = "0.1.0"

__all__ = [
    "CheckConfig",
    "CheckResult",
    "CorrectionMap",
    "LinkReport",
    "NoUrlsError",
    "ResultKind",
    "check_links",
    "run_check",
]
