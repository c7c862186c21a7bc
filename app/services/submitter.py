"""
Audio submission service.

Forwards a caller's file to the upstream analysis endpoint and
derives the job identifier the caller will poll with.  The
upstream identifier is preferred (``data.id``, then top-level
``id``); when the upstream omits it, or answers with a body that
is not JSON, the identifier is synthesized as
``{credential}_{file_name}_{epoch_millis}``.  Losing the upstream
id is a degraded but successful outcome: the submission itself
has already been accepted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import Settings
from app.core.constants import UPSTREAM_DATA_FIELD, UPSTREAM_ID_FIELD
from app.core.errors import UploadError, ValidationError
from app.core.metrics import record_submission
from app.schemas import JobStatus, SubmissionRequest
from app.services.emotion_client import EmotionAPIClient
from app.services.normalizer import DecodedBody, excerpt, mask_token

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a successful submission."""

    job_id: str
    file_name: str
    content_type: str
    size: int
    upstream_id: bool
    status: JobStatus = JobStatus.SUBMITTED


def upstream_job_id(body: DecodedBody) -> str | None:
    """Extract the upstream job id from a decoded submission response.

    Checks ``data.id`` first, then the top-level ``id``.

    Args:
        body: The decoded upstream response body.

    Returns:
        The identifier as a string, or ``None`` when absent or empty.
    """
    if not isinstance(body.data, dict):
        return None
    candidates: list[Any] = []
    nested = body.data.get(UPSTREAM_DATA_FIELD)
    if isinstance(nested, dict):
        candidates.append(nested.get(UPSTREAM_ID_FIELD))
    candidates.append(body.data.get(UPSTREAM_ID_FIELD))
    for candidate in candidates:
        if candidate is None or isinstance(candidate, (dict, list, bool)):
            continue
        value = str(candidate).strip()
        if value:
            return value
    return None


def synthesize_job_id(credential: str, file_name: str, millis: int) -> str:
    """Build a job id from the credential, file name and timestamp."""
    return f"{credential}_{file_name}_{millis}"


class Submitter:
    """Forwards audio files upstream and issues job identifiers.

    Args:
        settings: Injected application settings.
        client: Upstream API client.
        clock: Returns the current time in epoch milliseconds.
    """

    def __init__(
        self,
        settings: Settings,
        client: EmotionAPIClient,
        *,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._settings = settings
        self._client = client
        self._clock = clock

    async def submit(self, request: SubmissionRequest) -> SubmissionResult:
        """Submit *request* upstream and derive its job id.

        Args:
            request: File payload, metadata and caller credential.

        Returns:
            A ``SubmissionResult`` carrying a non-empty job id.

        Raises:
            ValidationError: If the payload or credential is missing.
            UploadError: If the upstream rejects the file or cannot
                be reached.
        """
        if not request.payload:
            raise ValidationError("No audio_file provided")
        if not request.credential:
            raise ValidationError("No user_token provided")

        logger.info(
            "Upload request: file=%s type=%s size=%d token=%s",
            request.file_name,
            request.content_type,
            request.size,
            mask_token(request.credential),
        )

        try:
            response = await self._client.submit(
                payload=request.payload,
                file_name=request.file_name,
                content_type=request.content_type,
                credential=request.credential,
            )
        except httpx.TransportError as exc:
            record_submission("transport_error")
            logger.error("Upload to analysis service failed: %s", exc)
            raise UploadError(
                "Internal server error during analysis request.",
                http_status=500,
                details=str(exc),
            ) from exc

        if not response.is_success:
            body_excerpt = excerpt(
                response.body.text,
                self._settings.ERROR_EXCERPT_CHARS,
            )
            record_submission("rejected")
            logger.error(
                "Upload rejected by analysis service: %s %s",
                response.status_code,
                body_excerpt,
            )
            raise UploadError(
                "Failed to request audio analysis",
                http_status=response.status_code,
                details=body_excerpt,
            )

        if not response.body.is_json:
            logger.warning(
                "Upload response was not JSON (%s), raw text: %s",
                response.body.parse_error,
                excerpt(response.body.text, self._settings.ERROR_EXCERPT_CHARS),
            )

        job_id = upstream_job_id(response.body)
        from_upstream = job_id is not None
        if job_id is None:
            job_id = synthesize_job_id(
                request.credential,
                request.file_name,
                self._clock(),
            )
            logger.info(
                "Upstream returned no job id for %s; synthesized one",
                request.file_name,
            )

        record_submission("upstream_id" if from_upstream else "synthesized_id")
        return SubmissionResult(
            job_id=job_id,
            file_name=request.file_name,
            content_type=request.content_type,
            size=request.size,
            upstream_id=from_upstream,
        )
