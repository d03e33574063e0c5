from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .checker_config import ENV_PREFIX, load_config_from_env, resolve_corrections_path
from .corrections import load_corrections


def _check_writable(path: Path) -> bool:
    try:
        if path.exists():
            return os.access(path, os.W_OK)
        parent = path.parent
        while not parent.exists() and parent != parent.parent:
            parent = parent.parent
        return os.access(parent, os.W_OK)
    except OSError:
        return False


def build_doctor_report(*, out_dir: Optional[Path] = None) -> Dict[str, Any]:
    report: Dict[str, Any] = {
        "generated_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
        "ok": True,
        "checks": [],
        "config": None,
    }

    def add_check(
        name: str,
        status: bool,
        *,
        detail: Optional[str] = None,
        remedy: Optional[str] = None,
        level: str = "warn",
    ) -> None:
        entry = {
            "name": name,
            "status": "ok" if status else "missing",
            "level": level,
            "detail": detail,
        }
        if remedy:
            entry["remedy"] = remedy
        report["checks"].append(entry)
        if not status and level == "warn":
            report["ok"] = False

    try:
        config = load_config_from_env()
    except (OSError, ValueError) as exc:
        add_check(
            "config",
            False,
            detail=str(exc),
            remedy=f"Fix the {ENV_PREFIX}* environment variables.",
        )
    else:
        report["config"] = config.to_dict()
        add_check("config", True, detail="environment configuration is valid", level="info")

    corrections_path = resolve_corrections_path()
    if corrections_path is None:
        add_check(
            f"{ENV_PREFIX}CORRECTIONS_PATH",
            False,
            detail="no corrections configured; URLs are checked as-is",
            level="info",
        )
    else:
        try:
            corrections = load_corrections(corrections_path)
        except (OSError, ValueError) as exc:
            add_check(
                f"{ENV_PREFIX}CORRECTIONS_PATH",
                False,
                detail=str(exc),
                remedy="Point the variable at a JSON object file or a previous link_report.txt.",
            )
        else:
            add_check(
                f"{ENV_PREFIX}CORRECTIONS_PATH",
                True,
                detail=f"{corrections_path} ({len(corrections)} entries)",
                level="info",
            )

    target = out_dir or Path("run") / "reports"
    add_check(
        "output_dir",
        _check_writable(target),
        detail=str(target),
        remedy="Create the output directory or pass --out with a writable location.",
    )
    return report


def format_doctor_report(report: Dict[str, Any]) -> str:
    lines: List[str] = []
    lines.append("linkaudit doctor")
    lines.append(f"Generated: {report.get('generated_at')}")
    lines.append("")
    for check in report.get("checks", []):
        name = check.get("name", "check")
        status = check.get("status", "unknown")
        level = check.get("level", "info")
        lines.append(f"- [{level}] {name}: {status}")
        detail = check.get("detail")
        if detail:
            lines.append(f"  detail: {detail}")
        remedy = check.get("remedy")
        if remedy:
            lines.append(f"  remedy: {remedy}")
    config = report.get("config") or {}
    if config:
        lines.append("")
        lines.append("Effective configuration:")
        for key, value in config.items():
            lines.append(f"  {key}: {value}")
    return "\n".join(lines).rstrip() + "\n"


__all__ = ["build_doctor_report", "format_doctor_report"]
