"""Response models for the audio-analysis endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.constants import STATUS_ACCEPTED
from app.schemas.enums import JobStatus
from app.schemas.results import AnalysisResult


class _CamelModel(BaseModel):
    """Serialises field names as camelCase for browser callers."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FileMetadata(_CamelModel):
    """Echo of the submitted file's declared metadata."""

    file_name: str = Field(
        default="",
        description="Original file name",
    )
    file_type: str = Field(
        default="",
        description="Declared media type",
    )
    file_size: int = Field(
        default=0,
        description="Declared size in bytes",
    )


class SubmitResponse(_CamelModel):
    """Returned immediately when a file is accepted upstream."""

    success: bool = True
    status: str = Field(
        default=STATUS_ACCEPTED,
        description="Submission status",
    )
    job_id: str = Field(
        ...,
        min_length=1,
        description="Identifier to poll for the analysis result",
    )
    message: str = Field(
        default=("Audio analysis requested. Poll for results using the jobId."),
        description="Human-readable status message",
    )
    file: FileMetadata = Field(
        default_factory=FileMetadata,
        description="Echo of the submitted file metadata",
    )


class PollResponse(_CamelModel):
    """Returned when polling for a job's status."""

    success: bool = True
    status: JobStatus = Field(
        ...,
        description="Reconciled job status",
    )
    job_id: str = Field(
        ...,
        description="Identifier supplied by the caller",
    )
    message: str | None = Field(
        default=None,
        description="Human-readable status message",
    )
    result: AnalysisResult | None = Field(
        default=None,
        description="Analysis result (COMPLETED only)",
    )
    details: Any | None = Field(
        default=None,
        description="Failure details, or the raw body excerpt for NO_CONTENT",
    )


class ErrorResponse(_CamelModel):
    """Returned for validation, submission and internal failures."""

    success: bool = False
    error: str = Field(
        ...,
        description="Human-readable error summary",
    )
    details: Any | None = Field(
        default=None,
        description="Upstream excerpt or exception message",
    )
