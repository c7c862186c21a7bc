"""
Pydantic models for API requests and responses.

All data contracts live here so that route handlers and services
can import lightweight schema objects without circular
dependencies.

For convenience every public model is re-exported from this
``__init__`` so that ``from app.schemas import PollResponse``
keeps working.
"""

from app.schemas.enums import JobStatus
from app.schemas.health import HealthResponse
from app.schemas.requests import SubmissionRequest
from app.schemas.responses import (
    ErrorResponse,
    FileMetadata,
    PollResponse,
    SubmitResponse,
)
from app.schemas.results import AnalysisResult

__all__ = [
    "AnalysisResult",
    "ErrorResponse",
    "FileMetadata",
    "HealthResponse",
    "JobStatus",
    "PollResponse",
    "SubmissionRequest",
    "SubmitResponse",
]
