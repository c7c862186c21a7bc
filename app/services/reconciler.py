"""
Upstream response → job status reconciliation.

The upstream service has no single "pending / done / failed"
signal: "nothing yet" may arrive as an HTTP 404, as a 2xx carrying
a pending code, or as an empty content list.  This module maps a
single upstream exchange onto a ``JobStatus`` using an ordered
tuple of named rules.  The first rule whose predicate matches
wins; the order *is* the contract:

1. ``transport_failure``   — no response / timeout   → PROCESSING
2. ``not_found``           — HTTP 404                → PROCESSING
3. ``upstream_http_error`` — any other non-2xx       → ERROR
4. ``unparseable_body``    — 2xx, body is not JSON   → ERROR
5. ``result_content``      — 2xx, non-empty content  → COMPLETED
6. ``pending_code``        — 2xx, pending ``code``   → PROCESSING
7. ``error_code``          — 2xx, any other ``code`` → ERROR
8. ``no_content``          — anything else           → NO_CONTENT

Reconciliation is a pure function of the exchange and the
``ReconcileContext``; it performs no I/O and keeps no state.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from app.core.constants import (
    UPSTREAM_CODE_FIELD,
    UPSTREAM_CONTENT_FIELD,
    UPSTREAM_DATA_FIELD,
)
from app.schemas.enums import JobStatus
from app.schemas.results import AnalysisResult
from app.services.emotion_client import UpstreamResponse
from app.services.normalizer import DEFAULT_EXCERPT_CHARS, excerpt


@dataclass(frozen=True)
class TransportFailure:
    """Stands in for a response that never arrived."""

    reason: str


Exchange = UpstreamResponse | TransportFailure


@dataclass(frozen=True)
class ReconcileContext:
    """Configuration consulted by the rules."""

    pending_codes: frozenset[str] = frozenset()
    known_error_codes: frozenset[str] = frozenset()
    excerpt_chars: int = DEFAULT_EXCERPT_CHARS


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of reconciling one upstream exchange.

    Attributes:
        status: The derived job status.
        rule: Name of the rule that produced it.
        message: Human-readable explanation for the caller.
        result: Projected analysis result (``COMPLETED`` only).
        http_status: Status the route should answer with
            (``ERROR`` only).
        details: JSON-safe failure details, or a body excerpt for
            ``NO_CONTENT``.
        parse_failure: ``True`` when the body failed to decode.
    """

    status: JobStatus
    rule: str
    message: str | None = None
    result: AnalysisResult | None = None
    http_status: int | None = None
    details: dict[str, Any] | None = None
    parse_failure: bool = False


@dataclass(frozen=True)
class ReconcileRule:
    """A named predicate → outcome pair."""

    name: str
    matches: Callable[[Exchange, ReconcileContext], bool]
    resolve: Callable[[Exchange, ReconcileContext], Reconciliation]


# ── Shape helpers ───────────────────────────────────────────────────────────


def content_list(exchange: Exchange) -> list[Any] | None:
    """Return the non-empty ``data.content`` list, or ``None``."""
    if not isinstance(exchange, UpstreamResponse):
        return None
    body = exchange.body.data
    if not isinstance(body, dict):
        return None
    data = body.get(UPSTREAM_DATA_FIELD)
    if not isinstance(data, dict):
        return None
    content = data.get(UPSTREAM_CONTENT_FIELD)
    if isinstance(content, list) and content:
        return content
    return None


def response_code(exchange: Exchange) -> str | None:
    """Return the explicit top-level ``code`` as a string, or ``None``."""
    if not isinstance(exchange, UpstreamResponse):
        return None
    body = exchange.body.data
    if not isinstance(body, dict):
        return None
    code = body.get(UPSTREAM_CODE_FIELD)
    if code is None or isinstance(code, (dict, list)):
        return None
    code = str(code).strip()
    return code or None


def _is_2xx(exchange: Exchange) -> bool:
    return isinstance(exchange, UpstreamResponse) and exchange.is_success


# ── Outcomes ────────────────────────────────────────────────────────────────


def _transport_failure(exchange: Exchange, ctx: ReconcileContext) -> Reconciliation:
    return Reconciliation(
        status=JobStatus.PROCESSING,
        rule="transport_failure",
        message="Analysis service did not answer in time. Please try again later.",
    )


def _not_found(exchange: Exchange, ctx: ReconcileContext) -> Reconciliation:
    return Reconciliation(
        status=JobStatus.PROCESSING,
        rule="not_found",
        message="Analysis result is not ready yet. Please try again later.",
    )


def _upstream_http_error(exchange: Exchange, ctx: ReconcileContext) -> Reconciliation:
    return Reconciliation(
        status=JobStatus.ERROR,
        rule="upstream_http_error",
        message="Failed to fetch analysis result",
        http_status=exchange.status_code,
        details={
            "httpStatus": exchange.status_code,
            "body": excerpt(exchange.body.text, ctx.excerpt_chars),
        },
    )


def _unparseable_body(exchange: Exchange, ctx: ReconcileContext) -> Reconciliation:
    return Reconciliation(
        status=JobStatus.ERROR,
        rule="unparseable_body",
        message="Analysis service returned a response that is not JSON",
        http_status=502,
        details={
            "httpStatus": exchange.status_code,
            "parseFailure": exchange.body.parse_error,
            "body": excerpt(exchange.body.text, ctx.excerpt_chars),
        },
        parse_failure=True,
    )


def _result_content(exchange: Exchange, ctx: ReconcileContext) -> Reconciliation:
    entries = content_list(exchange) or [None]
    # Upstream lists newest first
    return Reconciliation(
        status=JobStatus.COMPLETED,
        rule="result_content",
        result=AnalysisResult.from_upstream(entries[0]),
    )


def _pending_code(exchange: Exchange, ctx: ReconcileContext) -> Reconciliation:
    code = response_code(exchange)
    return Reconciliation(
        status=JobStatus.PROCESSING,
        rule="pending_code",
        message=f"Analysis is still in progress ({code}). Please try again later.",
    )


def _error_code(exchange: Exchange, ctx: ReconcileContext) -> Reconciliation:
    code = response_code(exchange)
    details: dict[str, Any] = {
        "code": code,
        "unrecognised": code not in ctx.known_error_codes,
    }
    body = exchange.body.data
    upstream_message = body.get("message") if isinstance(body, dict) else None
    if upstream_message:
        details["upstreamMessage"] = excerpt(str(upstream_message), ctx.excerpt_chars)
    return Reconciliation(
        status=JobStatus.ERROR,
        rule="error_code",
        message=f"Analysis service reported error code {code}",
        http_status=502,
        details=details,
    )


def _no_content(exchange: Exchange, ctx: ReconcileContext) -> Reconciliation:
    return Reconciliation(
        status=JobStatus.NO_CONTENT,
        rule="no_content",
        message="Analysis result not found or in an unexpected format.",
        details={"body": excerpt(exchange.body.text, ctx.excerpt_chars)},
    )


# ── Rule table ──────────────────────────────────────────────────────────────

RULES: tuple[ReconcileRule, ...] = (
    ReconcileRule(
        "transport_failure",
        lambda ex, ctx: isinstance(ex, TransportFailure),
        _transport_failure,
    ),
    ReconcileRule(
        "not_found",
        lambda ex, ctx: isinstance(ex, UpstreamResponse) and ex.status_code == 404,
        _not_found,
    ),
    ReconcileRule(
        "upstream_http_error",
        lambda ex, ctx: isinstance(ex, UpstreamResponse) and not ex.is_success,
        _upstream_http_error,
    ),
    ReconcileRule(
        "unparseable_body",
        lambda ex, ctx: _is_2xx(ex) and not ex.body.is_json,
        _unparseable_body,
    ),
    ReconcileRule(
        "result_content",
        lambda ex, ctx: _is_2xx(ex) and content_list(ex) is not None,
        _result_content,
    ),
    ReconcileRule(
        "pending_code",
        lambda ex, ctx: _is_2xx(ex) and response_code(ex) in ctx.pending_codes,
        _pending_code,
    ),
    ReconcileRule(
        "error_code",
        lambda ex, ctx: _is_2xx(ex) and response_code(ex) is not None,
        _error_code,
    ),
    ReconcileRule(
        "no_content",
        lambda ex, ctx: True,
        _no_content,
    ),
)


def reconcile(
    exchange: Exchange,
    ctx: ReconcileContext,
    rules: tuple[ReconcileRule, ...] = RULES,
) -> Reconciliation:
    """Map *exchange* to a ``Reconciliation`` using the first matching rule.

    Args:
        exchange: The upstream response, or a ``TransportFailure``.
        ctx: Pending / known-error codes and excerpt length.
        rules: Ordered rule table; defaults to ``RULES``.

    Returns:
        The outcome produced by the first matching rule.

    Raises:
        LookupError: If no rule matches (only possible with a custom
            table lacking a catch-all).
    """
    for rule in rules:
        if rule.matches(exchange, ctx):
            return rule.resolve(exchange, ctx)
    raise LookupError("No reconciliation rule matched the upstream response")
