from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .runner import EXIT_INPUT, EXIT_OK, run_audit
from .workflows.checker import NoUrlsError
from .workflows.checker_config import CheckConfig, load_config_from_env
from .workflows.corrections import load_corrections
from .workflows.doctor import build_doctor_report, format_doctor_report
from .workflows.extract_utils import load_urls
from .workflows.report_utils import load_json_report
from .workflows.review_page import REVIEW_PAGE_NAME, write_review_page
from .workflows.rewrite_utils import default_fixed_path, rewrite_document, write_dead_links

app = typer.Typer(no_args_is_help=True, help="Verify link reachability in bulk and report redirects and dead links.")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="[linkaudit] %(levelname)s %(message)s",
    )


def _build_config(
    corrections: Optional[Path],
    batch_size: Optional[int],
    delay_ms: Optional[int],
    timeout_ms: Optional[int],
    retries: Optional[int],
    max_redirects: Optional[int],
    use_get: bool,
) -> CheckConfig:
    config = load_config_from_env()
    overrides: Dict[str, Any] = {}
    if corrections is not None:
        overrides["corrections"] = load_corrections(corrections)
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    if delay_ms is not None:
        overrides["batch_delay_ms"] = delay_ms
    if timeout_ms is not None:
        overrides["timeout_ms"] = timeout_ms
    if retries is not None:
        overrides["max_retries"] = retries
    if max_redirects is not None:
        overrides["max_redirects"] = max_redirects
    if use_get:
        overrides["use_get"] = True
    return replace(config, **overrides) if overrides else config


def _echo_summary(summary: Dict[str, Any]) -> None:
    counts = summary.get("counts") or {}
    typer.echo("--- ANALYSIS COMPLETE ---")
    typer.echo(f"OK: {counts.get('ok', 0)}")
    typer.echo(f"Redirected: {counts.get('redirected', 0)}")
    typer.echo(f"Errors: {counts.get('error', 0)}")
    artifacts = summary.get("artifacts") or {}
    for label, key in (
        ("Report", "text_report"),
        ("JSON", "json_report"),
        ("Review page", "review_page"),
        ("Fixed document", "fixed_document"),
        ("Dead links", "dead_links"),
    ):
        value = artifacts.get(key)
        if value:
            typer.echo(f"{label}: {value}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log batch progress and retries."),
) -> None:
    _configure_logging(verbose)


@app.command("check")
def check_cmd(
    source: str = typer.Argument(..., help="Text or HTML file to harvest URLs from, or '-' for stdin."),
    out: Optional[Path] = typer.Option(None, "--out", help="Write artifacts into this directory."),
    corrections: Optional[Path] = typer.Option(None, "--corrections", help="JSON corrections or a previous text report."),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", help="URLs checked concurrently per batch."),
    delay_ms: Optional[int] = typer.Option(None, "--delay-ms", help="Pause between batches in milliseconds."),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", help="Timeout per attempt in milliseconds."),
    retries: Optional[int] = typer.Option(None, "--retries", help="Retries after a transient failure."),
    max_redirects: Optional[int] = typer.Option(None, "--max-redirects", help="Redirect hops to follow."),
    use_get: bool = typer.Option(False, "--get", help="Probe with GET instead of HEAD."),
    json_out: bool = typer.Option(False, "--json", help="Print the JSON summary to stdout only."),
    review_page: bool = typer.Option(False, "--review-page", help="Write an HTML page for the error links."),
    fix: bool = typer.Option(False, "--fix", help="Write a copy of the source with redirected links replaced."),
    soft_fail: bool = typer.Option(False, "--soft-fail", help="Exit 0 even if some links are broken."),
) -> None:
    """Harvest URLs from SOURCE and check each one."""
    if fix and source == "-":
        typer.echo("error: --fix needs a file path, not stdin", err=True)
        raise typer.Exit(code=EXIT_INPUT)
    try:
        config = _build_config(corrections, batch_size, delay_ms, timeout_ms, retries, max_redirects, use_get)
        urls = load_urls(source)
    except (OSError, ValueError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=EXIT_INPUT)
    if not json_out:
        typer.echo(f"Found {len(urls)} unique URLs.")
    try:
        summary, exit_code = run_audit(
            urls,
            config,
            out_dir=out,
            source=None if source == "-" else source,
            review_page=review_page,
            fix_document=Path(source) if fix else None,
            soft_fail=soft_fail,
        )
    except (NoUrlsError, OSError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=EXIT_INPUT)
    if json_out:
        sys.stdout.write(json.dumps(summary, ensure_ascii=False) + "\n")
    else:
        _echo_summary(summary)
    raise typer.Exit(code=exit_code)


@app.command("review")
def review_cmd(
    report_path: Path = typer.Argument(..., help="link_report.json from a previous run."),
    out: Optional[Path] = typer.Option(None, "--out", help="Where to write the review page."),
) -> None:
    """Build an HTML review page from the error entries of a JSON report."""
    try:
        report = load_json_report(report_path)
    except (OSError, ValueError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=EXIT_INPUT)
    if not report.error:
        typer.echo("No errors found in the report. Nothing to do!")
        raise typer.Exit(code=EXIT_OK)
    target = out or report_path.with_name(REVIEW_PAGE_NAME)
    write_review_page(report.error, target)
    typer.echo(f"Review page for {len(report.error)} errors written to {target}")


@app.command("fix")
def fix_cmd(
    document: Path = typer.Argument(..., help="Document whose links should be rewritten."),
    report_path: Path = typer.Argument(..., help="link_report.json from a previous run."),
    out: Optional[Path] = typer.Option(None, "--out", help="Rewritten document path (default: <name>_fixed<ext>)."),
    dead_links: Optional[Path] = typer.Option(None, "--dead-links", help="Write unresolved error URLs here."),
) -> None:
    """Replace redirected and corrected links in DOCUMENT using a JSON report."""
    try:
        report = load_json_report(report_path)
        target = out or default_fixed_path(document)
        outcome = rewrite_document(document, report, target)
    except (OSError, ValueError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=EXIT_INPUT)
    typer.echo(f"Replaced {outcome.total} occurrences of {len(outcome.replacements)} URLs -> {target}")
    if dead_links is not None:
        write_dead_links(report, dead_links)
        typer.echo(f"{len(report.error)} dead links saved in {dead_links}")


@app.command("doctor")
def doctor_cmd(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory to check for write access."),
) -> None:
    """Print configuration and environment diagnostics."""
    report = build_doctor_report(out_dir=out)
    typer.echo(format_doctor_report(report))
    raise typer.Exit(code=0 if report.get("ok", True) else 2)
