"""
Centralised constants used across the application.

Keeping magic strings in one place makes it easy to rename keys,
avoids silent typos, and keeps ``grep`` useful when debugging.
"""

from __future__ import annotations

# ── Upstream request headers ────────────────────────────────────────────────

HEADER_CLIENT_ID: str = "EMO-Client-ID"
"""Static client identifier expected by the upstream service."""

HEADER_SECRET_KEY: str = "EMO-Secret-Key"
"""Static secret key expected by the upstream service."""

HEADER_USER_TOKEN: str = "X-User-Token"
"""Per-caller bearer token forwarded on every upstream call."""

NO_CACHE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}
"""Sent with every result fetch so intermediaries never serve stale data."""

HEADER_REQUEST_ID: str = "X-Request-ID"
"""Correlation header echoed on every response."""


# ── Upstream response shape ─────────────────────────────────────────────────

UPSTREAM_ID_FIELD: str = "id"
"""Key holding the upstream job identifier (under ``data`` or top level)."""

UPSTREAM_DATA_FIELD: str = "data"
UPSTREAM_CONTENT_FIELD: str = "content"
UPSTREAM_CODE_FIELD: str = "code"

# Upstream content key → public Analysis Result field.
RESULT_FIELD_MAP: dict[str, str] = {
    "ansDog": "classification",
    "ansFilter": "filter",
    "fileNameOrigin": "original_file_name",
    "startTime": "start_offset",
    "endTime": "end_offset",
}


# ── Public status strings ───────────────────────────────────────────────────

STATUS_ACCEPTED: str = "accepted"
"""Response status returned immediately after a successful submission."""


# ── CORS preflight ──────────────────────────────────────────────────────────

PREFLIGHT_ALLOW_METHODS: str = "POST, GET, OPTIONS"
PREFLIGHT_ALLOW_HEADERS: str = "Content-Type, X-User-Token"
