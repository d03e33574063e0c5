"""Checker defaults and the configuration object passed into the engine.

Baseline values come from the long-running batch checker this tool grew out
of: 15s per attempt, two retries, batches of ten with a one second pause.
Callers build a ``CheckConfig`` explicitly or via ``load_config_from_env``;
nothing here is mutated at runtime.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .corrections import EMPTY_CORRECTIONS, CorrectionMap, load_corrections

DEFAULT_BATCH_SIZE = 10
DEFAULT_BATCH_DELAY_MS = 1000
DEFAULT_TIMEOUT_MS = 15000
DEFAULT_MAX_RETRIES = 2
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_RETRY_BACKOFF_MS = 1000
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.9"

ENV_PREFIX = "LINKAUDIT_"


def _env_int(name: str, default: int = 0) -> int:
    try:
        raw = os.getenv(name, "")
        return int(raw) if raw.strip() else default
    except (TypeError, ValueError):
        return default


def _env_bool(name: str, default: str = "0") -> bool:
    raw = os.getenv(name, default)
    return str(raw).strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class CheckConfig:
    """Configuration parameters for one link-check run."""

    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay_ms: int = DEFAULT_BATCH_DELAY_MS
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    retry_backoff_ms: int = DEFAULT_RETRY_BACKOFF_MS
    corrections: CorrectionMap = field(default_factory=lambda: EMPTY_CORRECTIONS)
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    # Probe with GET instead of HEAD (some servers mishandle HEAD).
    use_get: bool = False

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")
        for name in ("batch_delay_ms", "max_retries", "max_redirects", "retry_backoff_ms"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be zero or greater, got {value}")

    @property
    def batch_delay(self) -> float:
        return self.batch_delay_ms / 1000.0

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def retry_backoff(self) -> float:
        return self.retry_backoff_ms / 1000.0

    @property
    def max_attempts(self) -> int:
        return 1 + self.max_retries

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_size": self.batch_size,
            "batch_delay_ms": self.batch_delay_ms,
            "timeout_ms": self.timeout_ms,
            "max_retries": self.max_retries,
            "max_redirects": self.max_redirects,
            "retry_backoff_ms": self.retry_backoff_ms,
            "corrections": len(self.corrections),
            "use_get": self.use_get,
        }


def resolve_corrections_path() -> Optional[Path]:
    raw = os.getenv(f"{ENV_PREFIX}CORRECTIONS_PATH", "").strip()
    return Path(raw) if raw else None


def load_config_from_env() -> CheckConfig:
    """Build a ``CheckConfig`` from ``LINKAUDIT_*`` environment variables.

    Unset or unparsable numeric values fall back to the defaults; range
    violations still raise ``ValueError`` from ``CheckConfig``.
    """

    corrections = EMPTY_CORRECTIONS
    corrections_path = resolve_corrections_path()
    if corrections_path is not None:
        corrections = load_corrections(corrections_path)
    user_agent = os.getenv(f"{ENV_PREFIX}USER_AGENT", "").strip() or DEFAULT_USER_AGENT
    return CheckConfig(
        batch_size=_env_int(f"{ENV_PREFIX}BATCH_SIZE", DEFAULT_BATCH_SIZE),
        batch_delay_ms=_env_int(f"{ENV_PREFIX}BATCH_DELAY_MS", DEFAULT_BATCH_DELAY_MS),
        timeout_ms=_env_int(f"{ENV_PREFIX}TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
        max_retries=_env_int(f"{ENV_PREFIX}MAX_RETRIES", DEFAULT_MAX_RETRIES),
        max_redirects=_env_int(f"{ENV_PREFIX}MAX_REDIRECTS", DEFAULT_MAX_REDIRECTS),
        retry_backoff_ms=_env_int(f"{ENV_PREFIX}RETRY_BACKOFF_MS", DEFAULT_RETRY_BACKOFF_MS),
        corrections=corrections,
        user_agent=user_agent,
        use_get=_env_bool(f"{ENV_PREFIX}USE_GET", "0"),
    )


__all__ = [
    "CheckConfig",
    "load_config_from_env",
    "resolve_corrections_path",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_BATCH_DELAY_MS",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_RETRY_BACKOFF_MS",
    "DEFAULT_USER_AGENT",
]
