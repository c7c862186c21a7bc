"""
Result polling service.

Fetches the caller's latest result from the upstream service and
reconciles it into a ``JobStatus`` via ``app.services.reconciler``.
Each poll is independent: nothing is remembered between calls, so
identical upstream responses always yield identical statuses.

The fetch is bounded by ``RESULT_FETCH_TIMEOUT``.  On expiry the
request is cancelled and the poll reports ``PROCESSING``: the
upstream may still finish the job, and retrying is the caller's
job.  Transport failures are treated the same way.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from app.core.config import Settings
from app.core.errors import ParseFailure, PollError, ValidationError
from app.core.metrics import record_poll, record_unrecognised_code
from app.schemas import JobStatus
from app.services.emotion_client import EmotionAPIClient
from app.services.normalizer import mask_token
from app.services.reconciler import (
    Exchange,
    ReconcileContext,
    Reconciliation,
    TransportFailure,
    reconcile,
)

logger = logging.getLogger(__name__)


class Poller:
    """Queries the upstream result endpoint and reconciles the answer.

    Args:
        settings: Injected application settings.
        client: Upstream API client.
    """

    def __init__(self, settings: Settings, client: EmotionAPIClient) -> None:
        self._settings = settings
        self._client = client
        self._context = ReconcileContext(
            pending_codes=settings.pending_codes,
            known_error_codes=settings.known_error_codes,
            excerpt_chars=settings.ERROR_EXCERPT_CHARS,
        )

    async def _fetch(self, credential: str) -> Exchange:
        try:
            return await asyncio.wait_for(
                self._client.fetch_result(credential=credential),
                timeout=self._settings.RESULT_FETCH_TIMEOUT,
            )
        except (TimeoutError, httpx.TimeoutException):
            return TransportFailure(
                reason=(
                    f"timed out after {self._settings.RESULT_FETCH_TIMEOUT:g}s"
                ),
            )
        except httpx.TransportError as exc:
            return TransportFailure(reason=str(exc) or type(exc).__name__)

    async def poll(self, job_id: str | None, credential: str | None) -> Reconciliation:
        """Poll the upstream for *job_id* and reconcile the response.

        Args:
            job_id: Identifier issued by the submission call.
            credential: Caller bearer token.

        Returns:
            A non-error ``Reconciliation`` (``PROCESSING``,
            ``COMPLETED`` or ``NO_CONTENT``).

        Raises:
            ValidationError: If *job_id* or *credential* is missing.
            ParseFailure: If a 2xx body could not be decoded.
            PollError: If the upstream reported any other failure.
        """
        if not job_id:
            raise ValidationError("jobId query parameter is required")
        if not credential:
            raise ValidationError("userToken query parameter is required")

        logger.info(
            "Result request for jobId=%s token=%s",
            job_id,
            mask_token(credential),
        )

        exchange = await self._fetch(credential)
        if isinstance(exchange, TransportFailure):
            logger.warning(
                "Result fetch for jobId=%s inconclusive: %s",
                job_id,
                exchange.reason,
            )

        outcome = reconcile(exchange, self._context)
        record_poll(outcome.status, outcome.rule)
        logger.info(
            "jobId=%s reconciled to %s via %s (terminal=%s)",
            job_id,
            outcome.status,
            outcome.rule,
            outcome.status.is_terminal,
        )

        if outcome.status is not JobStatus.ERROR:
            return outcome

        details = outcome.details or {}
        if details.get("unrecognised"):
            record_unrecognised_code(details["code"])
            logger.warning(
                "Unrecognised upstream code %r for jobId=%s; "
                "add it to EMOTION_PENDING_CODES or "
                "EMOTION_KNOWN_ERROR_CODES",
                details["code"],
                job_id,
            )
        error_cls = ParseFailure if outcome.parse_failure else PollError
        raise error_cls(
            outcome.message or "Failed to fetch analysis result",
            job_id=job_id,
            http_status=outcome.http_status,
            details=outcome.details,
        )
