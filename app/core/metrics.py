"""
Prometheus metrics for submissions and poll outcomes.

The proxy is stateless, so in-process ``prometheus_client``
counters are sufficient: each replica exposes its own counts and
Prometheus aggregates across replicas.  Counters live on a
dedicated ``CollectorRegistry`` to avoid default-registry
conflicts (e.g. duplicate registration on test re-imports).

Usage:
    Call the ``record_*`` helpers from the services.  The
    ``/metrics`` endpoint serves ``generate_metrics()``.
"""

from __future__ import annotations

import logging

from prometheus_client import CollectorRegistry, Counter, generate_latest

logger = logging.getLogger(__name__)

# ── Shared registry ─────────────────────────────────────────

REGISTRY = CollectorRegistry()

SUBMISSIONS = Counter(
    "emotion_proxy_submissions",
    "Audio submissions forwarded upstream, by outcome.",
    ["outcome"],
    registry=REGISTRY,
)

POLLS = Counter(
    "emotion_proxy_polls",
    "Result polls, by reconciled status and the rule that fired.",
    ["status", "rule"],
    registry=REGISTRY,
)

UNRECOGNISED_CODES = Counter(
    "emotion_proxy_unrecognised_codes",
    "Upstream response codes that are neither pending nor known errors.",
    ["code"],
    registry=REGISTRY,
)


# ── Record helpers ──────────────────────────────────────────


def record_submission(outcome: str) -> None:
    """Increment the submission counter.

    Args:
        outcome: ``"upstream_id"``, ``"synthesized_id"``,
            ``"rejected"`` or ``"transport_error"``.
    """
    SUBMISSIONS.labels(outcome=outcome).inc()


def record_poll(status: str, rule: str) -> None:
    """Increment the poll counter for a reconciled status."""
    POLLS.labels(status=status, rule=rule).inc()


def record_unrecognised_code(code: str) -> None:
    """Count an upstream code nobody has classified yet."""
    UNRECOGNISED_CODES.labels(code=code).inc()


def generate_metrics() -> bytes:
    """Render Prometheus exposition format for proxy metrics.

    Returns:
        UTF-8 bytes ready to be served on ``/metrics``.
    """
    return generate_latest(REGISTRY)
