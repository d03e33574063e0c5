from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .workflows.aggregator import LinkReport
from .workflows.checker import run_check
from .workflows.checker_config import CheckConfig
from .workflows.classifier import CheckResult, ResultKind
from .workflows.report_utils import (
    JSON_REPORT_NAME,
    TEXT_REPORT_NAME,
    build_run_summary,
    generate_run_id,
    write_json_report,
    write_text_report,
)
from .workflows.review_page import REVIEW_PAGE_NAME, write_review_page
from .workflows.rewrite_utils import DEAD_LINKS_NAME, default_fixed_path, rewrite_document, write_dead_links

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT = 2
EXIT_LINK_ERRORS = 3


@dataclass
class RunArtifacts:
    run_dir: Path
    text_report: Optional[Path] = None
    json_report: Optional[Path] = None
    review_page: Optional[Path] = None
    fixed_document: Optional[Path] = None
    dead_links: Optional[Path] = None
    replacements: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        def _str(value: Optional[Path]) -> Optional[str]:
            return str(value) if value is not None else None

        return {
            "run_dir": str(self.run_dir),
            "text_report": _str(self.text_report),
            "json_report": _str(self.json_report),
            "review_page": _str(self.review_page),
            "fixed_document": _str(self.fixed_document),
            "dead_links": _str(self.dead_links),
            "replacements": dict(self.replacements),
        }


def resolve_run_dir(out_dir: Optional[Path]) -> Tuple[Path, str]:
    run_id = generate_run_id()
    if out_dir:
        return out_dir, run_id
    return Path("run") / "reports" / run_id, run_id


def _log_batch(number: int, total: int, results: List[CheckResult]) -> None:
    errors = sum(1 for result in results if result.kind is ResultKind.ERROR)
    logger.info("batch %d/%d settled: %d checked, %d errors", number, total, len(results), errors)


def apply_fixes(report: LinkReport, document: Path, run_dir: Path, artifacts: RunArtifacts) -> None:
    fixed_path = run_dir / default_fixed_path(document).name
    outcome = rewrite_document(document, report, fixed_path)
    artifacts.fixed_document = fixed_path
    artifacts.replacements = dict(outcome.replacements)
    logger.info("rewrote %d occurrences across %d urls -> %s", outcome.total, len(outcome.replacements), fixed_path)
    if report.error:
        artifacts.dead_links = write_dead_links(report, run_dir / DEAD_LINKS_NAME)


def run_audit(
    urls: Sequence[str],
    config: CheckConfig,
    *,
    out_dir: Optional[Path] = None,
    source: Optional[str] = None,
    review_page: bool = False,
    fix_document: Optional[Path] = None,
    soft_fail: bool = False,
) -> Tuple[Dict[str, Any], int]:
    """Check ``urls``, write the report artifacts and return (summary, exit code).

    Raises ``NoUrlsError`` for an empty URL list.
    """

    started_at = datetime.now(timezone.utc)
    run_dir, run_id = resolve_run_dir(out_dir)
    report = run_check(urls, config, progress_hook=_log_batch)
    finished_at = datetime.now(timezone.utc)

    try:
        run_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OSError(f"Unable to create run dir {run_dir}: {exc}") from exc
    artifacts = RunArtifacts(run_dir=run_dir)
    artifacts.text_report = write_text_report(report, run_dir / TEXT_REPORT_NAME, source)
    if review_page and report.error:
        artifacts.review_page = write_review_page(report.error, run_dir / REVIEW_PAGE_NAME)
    if fix_document is not None:
        apply_fixes(report, fix_document, run_dir, artifacts)

    summary = build_run_summary(
        report,
        config=config,
        run_id=run_id,
        started_at=started_at,
        finished_at=finished_at,
        source=source,
    )
    artifacts.json_report = run_dir / JSON_REPORT_NAME
    summary["artifacts"] = artifacts.to_dict()
    write_json_report(summary, artifacts.json_report)

    exit_code = EXIT_OK
    if report.has_errors and not soft_fail:
        exit_code = EXIT_LINK_ERRORS
    return summary, exit_code


__all__ = [
    "EXIT_OK",
    "EXIT_INPUT",
    "EXIT_LINK_ERRORS",
    "RunArtifacts",
    "resolve_run_dir",
    "apply_fixes",
    "run_audit",
]
