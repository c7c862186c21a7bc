"""
Layered decoding of upstream response bodies.

The upstream service answers with JSON most of the time, but
occasionally with HTML error pages or plain text.
Decoding is therefore done in layers:

1. **bytes → text** — always succeeds; undecodable bytes are
   replaced and unknown charsets fall back to UTF-8.
2. **text → JSON** — may fail; the failure is captured in the
   returned ``DecodedBody`` rather than raised.

Callers branch on ``DecodedBody.is_json`` instead of catching
exceptions, so every downstream path is total.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_EXCERPT_CHARS: int = 1000

_TRUNCATION_MARKER: str = "... [truncated]"


@dataclass(frozen=True)
class DecodedBody:
    """Outcome of decoding a response body.

    Attributes:
        text: The body decoded as text.  Always present.
        data: The parsed JSON value, or ``None`` when parsing failed.
        parse_error: Description of the JSON failure, or ``None``
            when decoding succeeded.
    """

    text: str
    data: Any = None
    parse_error: str | None = None

    @property
    def is_json(self) -> bool:
        """Whether the body decoded cleanly."""
        return self.parse_error is None


def decode_text(raw: bytes, encoding: str | None = None) -> str:
    """Decode *raw* to text, never failing.

    Args:
        raw: Response body bytes.
        encoding: Charset advertised by the response, if any.

    Returns:
        The decoded text; invalid sequences are replaced.
    """
    try:
        return raw.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        logger.debug("Unknown charset %r, falling back to utf-8", encoding)
        return raw.decode("utf-8", errors="replace")


def decode_body(raw: bytes, encoding: str | None = None) -> DecodedBody:
    """Decode *raw* into a ``DecodedBody``.

    Args:
        raw: Response body bytes.
        encoding: Charset advertised by the response, if any.

    Returns:
        A ``DecodedBody`` whose ``parse_error`` is set when the text
        is not valid JSON, including when it is empty.
    """
    text = decode_text(raw, encoding)
    if not text.strip():
        return DecodedBody(text=text, parse_error="empty body")
    try:
        data = json.loads(text)
    except ValueError as exc:
        return DecodedBody(text=text, parse_error=str(exc))
    return DecodedBody(text=text, data=data)


def excerpt(text: str, limit: int = DEFAULT_EXCERPT_CHARS) -> str:
    """Truncate *text* to at most *limit* characters plus a marker.

    Args:
        text: Raw upstream text.
        limit: Maximum number of characters kept.

    Returns:
        *text* unchanged when short enough, otherwise its first
        *limit* characters followed by a truncation marker.
    """
    if len(text) <= limit:
        return text
    return text[:limit] + _TRUNCATION_MARKER


def mask_token(token: str) -> str:
    """Return a log-safe rendition of a caller credential."""
    if len(token) <= 4:
        return "****"
    return f"{token[:4]}****"
