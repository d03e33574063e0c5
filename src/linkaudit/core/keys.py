"""Shared schema keys to avoid magic strings across report payloads."""

from __future__ import annotations

# CheckResult keys
K_URL = "url"
K_ORIGINAL_URL = "original_url"
K_CHECKED_URL = "checked_url"
K_FINAL_URL = "final_url"
K_KIND = "kind"
K_REASON = "reason"
K_ATTEMPTS = "attempts"

# LinkReport keys
K_OK = "ok"
K_REDIRECTED = "redirected"
K_ERROR = "error"
K_COUNTS = "counts"
K_RESULTS = "results"
K_ORIGINAL = "original"
K_FINAL = "final"
