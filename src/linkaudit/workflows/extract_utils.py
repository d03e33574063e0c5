"""URL harvesting from plain text and HTML documents."""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Set, TextIO

from bs4 import BeautifulSoup

URL_PATTERN = re.compile(r"https?://[^\s<>\"']+")
_HTML_SUFFIXES = {".html", ".htm", ".xhtml"}
_HTML_SNIFF = re.compile(r"<\s*(?:!doctype\s+html|html|body|a\s)", re.IGNORECASE)


def dedupe_urls(urls: Iterable[str]) -> List[str]:
    """Drop exact duplicates (case-sensitive), keeping first-seen order."""

    seen: Set[str] = set()
    unique: List[str] = []
    for url in urls:
        if url in seen:
            continue
        seen.add(url)
        unique.append(url)
    return unique


def extract_urls_from_text(text: str) -> List[str]:
    return URL_PATTERN.findall(text or "")


def extract_urls_from_html(html: str) -> List[str]:
    """Return absolute http(s) ``href`` targets of every anchor, in document order."""

    soup = BeautifulSoup(html or "", "html.parser")
    urls: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        if href.startswith(("http://", "https://")):
            urls.append(href)
    return urls


def looks_like_html(text: str, path: Optional[Path] = None) -> bool:
    if path is not None and path.suffix.lower() in _HTML_SUFFIXES:
        return True
    return bool(_HTML_SNIFF.search(text[:4096]))


def extract_urls(text: str, *, html: Optional[bool] = None, path: Optional[Path] = None) -> List[str]:
    """Extract and dedupe URLs; ``html=None`` decides from the path or content."""

    as_html = looks_like_html(text, path) if html is None else html
    found = extract_urls_from_html(text) if as_html else extract_urls_from_text(text)
    return dedupe_urls(found)


def read_source(path_or_dash: str, *, stdin: Optional[TextIO] = None) -> str:
    if path_or_dash == "-":
        stream = stdin or sys.stdin
        return stream.read()
    path = Path(path_or_dash)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return path.read_text(encoding="utf-8")


def load_urls(path_or_dash: str, *, html: Optional[bool] = None, stdin: Optional[TextIO] = None) -> List[str]:
    text = read_source(path_or_dash, stdin=stdin)
    path = None if path_or_dash == "-" else Path(path_or_dash)
    return extract_urls(text, html=html, path=path)


__all__ = [
    "URL_PATTERN",
    "dedupe_urls",
    "extract_urls_from_text",
    "extract_urls_from_html",
    "looks_like_html",
    "extract_urls",
    "read_source",
    "load_urls",
]
