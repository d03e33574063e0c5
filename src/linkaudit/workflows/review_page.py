"""Static HTML page for reviewing broken links by hand."""

from __future__ import annotations

import re
from html import escape
from pathlib import Path
from typing import List, Sequence
from urllib.parse import quote_plus, urlparse

from .aggregator import ErrorEntry

REVIEW_PAGE_NAME = "review_errors.html"
SEARCH_ENDPOINT = "https://www.google.com/search?q="

_HOST_NOISE = re.compile(r"www\.|\.com|\.ac|\.in|\.edu|\.org")

_STYLE = """
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; line-height: 1.6; margin: 0; padding: 20px; background-color: #f8f9fa; }
.container { max-width: 900px; margin: auto; background: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
h1 { text-align: center; color: #333; }
table { width: 100%; border-collapse: collapse; margin-top: 20px; }
th, td { padding: 12px; border: 1px solid #ddd; text-align: left; }
th { background-color: #f2f2f2; }
tr:nth-child(even) { background-color: #f9f9f9; }
.broken-link { word-break: break-all; color: #d9534f; }
.reason { width: 160px; font-family: monospace; }
.actions a { display: inline-block; margin-right: 10px; padding: 5px 10px; color: white; text-decoration: none; border-radius: 4px; font-size: 14px; }
.test-link { background-color: #f0ad4e; }
.search-link { background-color: #5bc0de; }
""".strip()


def guess_site_name(url: str) -> str:
    """Turn a host like ``www.acme-college.ac.in`` into a search phrase."""

    host = urlparse(url).hostname
    if not host:
        return url
    name = _HOST_NOISE.sub("", host).replace("-", " ").strip(" .")
    return name or host


def search_url(url: str) -> str:
    return SEARCH_ENDPOINT + quote_plus(guess_site_name(url))


def _render_row(entry: ErrorEntry) -> str:
    url = escape(entry.url, quote=True)
    name = escape(guess_site_name(entry.url), quote=True)
    return (
        "<tr>"
        f'<td class="broken-link">{url}</td>'
        f'<td class="reason">{escape(entry.reason)}</td>'
        '<td class="actions">'
        f'<a href="{url}" class="test-link" target="_blank" rel="noopener" title="Test the original link">Test Link</a>'
        f'<a href="{escape(search_url(entry.url), quote=True)}" class="search-link" target="_blank" rel="noopener" '
        f"title=\"Search for '{name}'\">Search Google</a>"
        "</td>"
        "</tr>"
    )


def render_review_page(errors: Sequence[ErrorEntry]) -> str:
    count = len(errors)
    lines: List[str] = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="UTF-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f"<title>Link Error Review ({count} Errors)</title>",
        f"<style>\n{_STYLE}\n</style>",
        "</head>",
        "<body>",
        '<div class="container">',
        "<h1>Link Error Review</h1>",
        f'<p><strong>{count}</strong> links need investigation. Use the "Search Google" button to find the new address.</p>',
        "<table>",
        "<thead><tr><th>Broken URL</th><th class=\"reason\">Reason</th><th>Actions</th></tr></thead>",
        "<tbody>",
    ]
    lines.extend(_render_row(entry) for entry in errors)
    lines.extend(["</tbody>", "</table>", "</div>", "</body>", "</html>"])
    return "\n".join(lines) + "\n"


def write_review_page(errors: Sequence[ErrorEntry], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_review_page(errors), encoding="utf-8")
    return path


__all__ = [
    "REVIEW_PAGE_NAME",
    "guess_site_name",
    "search_url",
    "render_review_page",
    "write_review_page",
]
