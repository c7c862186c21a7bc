"""Request model for audio submission."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SubmissionRequest(BaseModel):
    """An audio file to forward to the upstream analyser.

    Constructed per call and discarded after forwarding.  Field
    presence is enforced by the submitter, not by the schema, so
    that a missing value surfaces as a 400 rather than a 422.
    """

    payload: bytes | None = Field(
        default=None,
        description="Raw file content",
    )
    file_name: str = Field(
        default="",
        description="Original file name",
    )
    content_type: str = Field(
        default="application/octet-stream",
        description="Declared media type",
    )
    size: int = Field(
        default=0,
        ge=0,
        description="Declared size in bytes",
    )
    credential: str | None = Field(
        default=None,
        description="Caller bearer token",
    )

