"""Text and JSON renderings of a finished link report."""

from __future__ import annotations

import json
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .aggregator import LinkReport
from .checker_config import CheckConfig

TEXT_REPORT_NAME = "link_report.txt"
JSON_REPORT_NAME = "link_report.json"


def generate_run_id(now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
    suffix = secrets.token_hex(3)
    return f"{stamp}_{suffix}"


def _iso(moment: datetime) -> str:
    return moment.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def render_text_report(report: LinkReport, source: Optional[str] = None) -> str:
    """Render the copy-paste friendly report.

    The redirect section is written as ``'original': 'final',`` lines so it
    can be pasted into a corrections file (or loaded as one directly).
    """

    lines: List[str] = []
    if source:
        header = f"LINK ANALYSIS REPORT for {source}"
        lines.append(header)
        lines.append("=" * len(header))
        lines.append("")
    lines.append(f"--- REDIRECTED LINKS TO COPY ({len(report.redirected)}) ---")
    for entry in report.redirected:
        lines.append(f"  '{entry.original}': '{entry.final}',")
    lines.append("")
    lines.append("")
    lines.append(f"--- FINAL ERROR LINKS TO INVESTIGATE ({len(report.error)}) ---")
    for entry in report.error:
        lines.append(f"// ERROR: {entry.url} (Reason: {entry.reason})")
    lines.append("")
    lines.append("")
    lines.append(f"--- OK LINKS ({len(report.ok)}) ---")
    lines.extend(report.ok)
    return "\n".join(lines).rstrip() + "\n"


def build_run_summary(
    report: LinkReport,
    *,
    config: CheckConfig,
    run_id: str,
    started_at: datetime,
    finished_at: datetime,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "run_id": run_id,
        "source": source,
        "started_at": _iso(started_at),
        "finished_at": _iso(finished_at),
        "duration_ms": int((finished_at - started_at).total_seconds() * 1000),
        "config": config.to_dict(),
        "total": report.total,
    }
    summary.update(report.to_dict())
    return summary


def write_text_report(report: LinkReport, path: Path, source: Optional[str] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_text_report(report, source), encoding="utf-8")
    return path


def write_json_report(summary: Dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return path


def load_json_report(path: Path) -> LinkReport:
    if not path.exists():
        raise FileNotFoundError(f"Report not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Report is not valid JSON: {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Report must contain a JSON object: {path}")
    try:
        return LinkReport.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Report has malformed results: {path}: {exc!r}") from exc


__all__ = [
    "TEXT_REPORT_NAME",
    "JSON_REPORT_NAME",
    "generate_run_id",
    "render_text_report",
    "build_run_summary",
    "write_text_report",
    "write_json_report",
    "load_json_report",
]
