"""Curated URL corrections applied before a link is probed."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

# Redirect lines of a text report look like:   'http://a.example': 'https://a.example',
_REPORT_LINE = re.compile(r"^\s*'(?P<original>[^']+)'\s*:\s*'(?P<final>[^']+)',?\s*$")


@dataclass(frozen=True)
class ResolvedUrl:
    """The URL a document contains and the URL actually probed for it."""

    original: str
    checked: str

    @property
    def corrected(self) -> bool:
        return self.original != self.checked


class CorrectionMap(Mapping[str, str]):
    """Read-only lookup from a requested URL to its known-good replacement."""

    def __init__(self, entries: Optional[Mapping[str, str]] = None) -> None:
        self._entries: Mapping[str, str] = MappingProxyType(dict(entries or {}))

    def __getitem__(self, url: str) -> str:
        return self._entries[url]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CorrectionMap({len(self._entries)} entries)"

    def resolve(self, url: str) -> ResolvedUrl:
        return ResolvedUrl(original=url, checked=self._entries.get(url, url))

    def resolve_all(self, urls: Iterable[str]) -> List[ResolvedUrl]:
        return [self.resolve(url) for url in urls]


EMPTY_CORRECTIONS = CorrectionMap()


def parse_report_corrections(lines: Iterable[str]) -> Dict[str, str]:
    """Collect ``'original': 'final',`` pairs from a previously emitted text report."""

    entries: Dict[str, str] = {}
    for line in lines:
        match = _REPORT_LINE.match(line)
        if match:
            entries[match.group("original")] = match.group("final")
    return entries


def load_corrections(path: Path) -> CorrectionMap:
    """Load a correction mapping from a JSON object file or a text report.

    JSON files must hold a single object of string to string. Any other file
    is scanned for the redirect lines written by the text report emitter, so a
    report from one run can seed the corrections of the next.
    """

    if not path.exists():
        raise FileNotFoundError(f"Corrections file not found: {path}")
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() != ".json":
        return CorrectionMap(parse_report_corrections(raw.splitlines()))
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Corrections file is not valid JSON: {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"Corrections file must contain a JSON object: {path}")
    entries: Dict[str, str] = {}
    for key, value in payload.items():
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Correction for {key!r} must be a non-empty string")
        entries[str(key)] = value.strip()
    return CorrectionMap(entries)


__all__ = [
    "ResolvedUrl",
    "CorrectionMap",
    "EMPTY_CORRECTIONS",
    "parse_report_corrections",
    "load_corrections",
]
