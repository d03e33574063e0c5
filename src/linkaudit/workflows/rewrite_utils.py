"""Apply a finished report back onto the document the URLs came from."""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import Dict, List, Tuple

from .aggregator import LinkReport
from .extract_utils import looks_like_html

DEAD_LINKS_NAME = "dead_links.txt"


@dataclass
class RewriteOutcome:
    text: str
    replacements: Dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.replacements.values())


def replacement_pairs(report: LinkReport) -> List[Tuple[str, str]]:
    """Original -> replacement pairs: redirect targets plus corrected OK links.

    Longer originals come first so a URL that prefixes another one does not
    clobber the longer match.
    """

    pairs: Dict[str, str] = {}
    for entry in report.redirected:
        pairs[entry.original] = entry.final
    for result in report.corrected():
        pairs.setdefault(result.original_url, result.checked_url)
    return sorted(pairs.items(), key=lambda item: len(item[0]), reverse=True)


def _needles(report: LinkReport, html: bool) -> List[Tuple[str, str, str]]:
    """(text to find, text to put, report URL) triples, longest needle first.

    HTML attribute values carry entity-encoded URLs (``&amp;`` for ``&``), so
    for HTML documents the escaped form of each URL is searched as well.
    """

    needles: List[Tuple[str, str, str]] = []
    for original, replacement in replacement_pairs(report):
        if original == replacement:
            continue
        needles.append((original, replacement, original))
        escaped = escape(original, quote=False)
        if html and escaped != original:
            needles.append((escaped, escape(replacement, quote=False), original))
    return sorted(needles, key=lambda item: len(item[0]), reverse=True)


def rewrite_text(text: str, report: LinkReport, *, html: bool = False) -> RewriteOutcome:
    """Replace every literal occurrence of each original URL.

    Replacements are placed through sentinels first, so a replacement that
    itself contains another original URL is never rewritten twice.
    """

    outcome = RewriteOutcome(text=text)
    staged = text
    sentinels: Dict[str, str] = {}
    for index, (needle, replacement, original) in enumerate(_needles(report, html)):
        count = staged.count(needle)
        if not count:
            continue
        token = f"\x00{index}\x00"
        sentinels[token] = replacement
        staged = staged.replace(needle, token)
        outcome.replacements[original] = outcome.replacements.get(original, 0) + count
    for token, replacement in sentinels.items():
        staged = staged.replace(token, replacement)
    outcome.text = staged
    return outcome


def write_dead_links(report: LinkReport, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(entry.url for entry in report.error) + ("\n" if report.error else ""), encoding="utf-8")
    return path


def rewrite_document(source: Path, report: LinkReport, output: Path) -> RewriteOutcome:
    if not source.exists():
        raise FileNotFoundError(f"Document not found: {source}")
    text = source.read_text(encoding="utf-8")
    outcome = rewrite_text(text, report, html=looks_like_html(text, source))
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(outcome.text, encoding="utf-8")
    return outcome


def default_fixed_path(source: Path) -> Path:
    return source.with_name(f"{source.stem}_fixed{source.suffix}")


__all__ = [
    "DEAD_LINKS_NAME",
    "RewriteOutcome",
    "replacement_pairs",
    "rewrite_text",
    "write_dead_links",
    "rewrite_document",
    "default_fixed_path",
]
