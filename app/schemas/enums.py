"""Job status enumeration used across the application."""

from __future__ import annotations

from enum import StrEnum


class JobStatus(StrEnum):
    """Possible states of an upstream analysis job."""

    SUBMITTED = "SUBMITTED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    NO_CONTENT = "NO_CONTENT"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        """Whether a polling caller should stop after this status."""
        return self in _TERMINAL


_TERMINAL = frozenset({JobStatus.COMPLETED, JobStatus.NO_CONTENT, JobStatus.ERROR})
