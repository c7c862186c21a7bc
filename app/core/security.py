"""
Cross-origin helpers for the audio-analysis endpoints.

Browser callers upload and poll directly, so the API answers CORS
preflight requests itself and stamps ``Access-Control-Allow-Origin``
on regular responses.  An origin is echoed only when
``CORS_ORIGINS`` allows it (``"*"`` allows any).
"""

from __future__ import annotations

from app.core.config import Settings
from app.core.constants import PREFLIGHT_ALLOW_HEADERS, PREFLIGHT_ALLOW_METHODS


def allowed_origin(origin: str | None, settings: Settings) -> str | None:
    """Return the value for ``Access-Control-Allow-Origin``, if any.

    Args:
        origin: The request's ``Origin`` header.
        settings: Application settings holding ``CORS_ORIGINS``.

    Returns:
        *origin* when it is allowed, ``"*"`` for wildcard
        configurations without an ``Origin`` header, else ``None``.
    """
    wildcard = "*" in settings.CORS_ORIGINS
    if not origin:
        return "*" if wildcard else None
    if wildcard or origin in settings.CORS_ORIGINS:
        return origin
    return None


def preflight_headers(origin: str | None, settings: Settings) -> dict[str, str]:
    """Build the headers of a CORS preflight acknowledgement."""
    headers = {
        "Access-Control-Allow-Methods": PREFLIGHT_ALLOW_METHODS,
        "Access-Control-Allow-Headers": PREFLIGHT_ALLOW_HEADERS,
        "Vary": "Origin",
    }
    value = allowed_origin(origin, settings)
    if value is not None:
        headers["Access-Control-Allow-Origin"] = value
    return headers
