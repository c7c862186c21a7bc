"""Audio-analysis routes: submit, poll, and CORS preflight."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from app.api.deps import get_poller, get_submitter
from app.core.config import Settings, get_settings
from app.core.errors import PollError, UploadError, ValidationError
from app.core.security import preflight_headers
from app.schemas import (
    ErrorResponse,
    FileMetadata,
    JobStatus,
    PollResponse,
    SubmissionRequest,
    SubmitResponse,
)
from app.services.poller import Poller
from app.services.submitter import Submitter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


def _dump(model: ErrorResponse | PollResponse) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _error_response(
    status_code: int,
    error: str,
    details: object = None,
) -> JSONResponse:
    """Render an ``ErrorResponse`` with the given status."""
    return JSONResponse(
        status_code=status_code,
        content=_dump(ErrorResponse(error=error, details=details)),
    )


def _poll_error_response(
    status_code: int,
    job_id: str,
    message: str,
    details: object = None,
) -> JSONResponse:
    """Render an ``ERROR`` poll response with the given status."""
    body = PollResponse(
        success=False,
        status=JobStatus.ERROR,
        job_id=job_id,
        message=message,
        details=details,
    )
    return JSONResponse(status_code=status_code, content=_dump(body))


@router.post(
    "/audio-analysis",
    response_model=SubmitResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def submit_analysis(
    audio_file: UploadFile | None = File(default=None),
    user_token: str | None = Form(default=None),
    submitter: Submitter = Depends(get_submitter),
) -> SubmitResponse | JSONResponse:
    """Forward an audio file to the analysis service.

    Returns a ``jobId`` that can be polled via
    ``GET /audio-analysis?jobId=...&userToken=...``.  Upstream
    rejections are answered with the upstream's own status code.
    """
    request = SubmissionRequest(credential=user_token)
    if audio_file is not None:
        payload = await audio_file.read()
        request = SubmissionRequest(
            payload=payload,
            file_name=audio_file.filename or "",
            content_type=audio_file.content_type or "application/octet-stream",
            size=len(payload),
            credential=user_token,
        )

    try:
        result = await submitter.submit(request)
    except (ValidationError, UploadError) as exc:
        return _error_response(exc.http_status, exc.message, exc.details)
    except Exception as exc:
        logger.exception("Unexpected error during analysis request")
        return _error_response(
            500,
            "Internal server error during analysis request.",
            str(exc),
        )

    return SubmitResponse(
        job_id=result.job_id,
        file=FileMetadata(
            file_name=result.file_name,
            file_type=result.content_type,
            file_size=result.size,
        ),
    )


@router.get(
    "/audio-analysis",
    response_model=PollResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
async def poll_analysis(
    job_id: str | None = Query(default=None, alias="jobId"),
    user_token: str | None = Query(default=None, alias="userToken"),
    poller: Poller = Depends(get_poller),
) -> PollResponse | JSONResponse:
    """Poll the analysis service for a job's result.

    Keep polling while ``status`` is ``PROCESSING``; stop on
    ``COMPLETED``, ``NO_CONTENT`` or ``ERROR``.
    """
    try:
        outcome = await poller.poll(job_id, user_token)
    except ValidationError as exc:
        return _error_response(exc.http_status, exc.message)
    except PollError as exc:
        return _poll_error_response(
            exc.http_status,
            exc.job_id,
            exc.message,
            exc.details,
        )
    except Exception as exc:
        logger.exception("Unexpected error while fetching result for %s", job_id)
        return _poll_error_response(
            500,
            job_id or "",
            "Internal server error while fetching result.",
            str(exc),
        )

    return PollResponse(
        status=outcome.status,
        job_id=job_id,
        message=outcome.message,
        result=outcome.result,
        details=outcome.details,
    )


@router.options("/audio-analysis", status_code=204)
def preflight_analysis(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Response:
    """Answer CORS preflight requests with a fixed acknowledgement."""
    return Response(
        status_code=204,
        headers=preflight_headers(request.headers.get("origin"), settings),
    )
