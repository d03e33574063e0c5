"""High-level exports for the link-check workflows."""

from .aggregator import ErrorEntry, LinkReport, RedirectEntry, ResultAggregator
from .checker import NoUrlsError, check_links, run_check
from .checker_config import CheckConfig, load_config_from_env
from .classifier import CheckResult, ResultKind, classify_outcome
from .corrections import CorrectionMap, ResolvedUrl, load_corrections
from .link_verify import LinkVerifier, Success, TerminalFailure, TransientFailure, classify_failure
from .scheduler import BatchScheduler

__all__ = [
    "BatchScheduler",
    "CheckConfig",
    "CheckResult",
    "CorrectionMap",
    "ErrorEntry",
    "LinkReport",
    "LinkVerifier",
    "NoUrlsError",
    "RedirectEntry",
    "ResolvedUrl",
    "ResultAggregator",
    "ResultKind",
    "Success",
    "TerminalFailure",
    "TransientFailure",
    "check_links",
    "classify_failure",
    "classify_outcome",
    "load_config_from_env",
    "load_corrections",
    "run_check",
]
