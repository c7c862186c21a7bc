"""
Exception taxonomy for the proxy.

Every failure raised by the submitter or poller is a
``ProxyError`` subclass carrying the HTTP status the route layer
should answer with and a JSON-safe ``details`` payload.  Route
handlers convert them into structured responses; nothing escapes
to the caller as an unhandled exception.
"""

from __future__ import annotations

from typing import Any


class ProxyError(Exception):
    """Base class for all proxy failures."""

    http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status
        self.details = details


class ValidationError(ProxyError):
    """Raised when a required input is missing.

    Always raised before any network call is attempted.
    """

    http_status = 400


class UploadError(ProxyError):
    """Raised when the upstream rejects a submission or cannot be reached."""


class PollError(ProxyError):
    """Raised when a result fetch reconciles to ``ERROR``."""

    http_status = 502

    def __init__(
        self,
        message: str,
        *,
        job_id: str,
        http_status: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message, http_status=http_status, details=details)
        self.job_id = job_id


class ParseFailure(PollError):
    """Raised when a 2xx result response body is not valid JSON.

    Distinct from "not ready": it signals a contract mismatch with
    the upstream, not a timing issue.
    """
