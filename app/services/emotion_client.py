"""
HTTP client for the upstream emotion-analysis service.

This is the only module that knows the upstream's URLs, header
names and multipart field name.  Both calls return an
``UpstreamResponse`` whose body has already been passed through
the layered decoder in ``app.services.normalizer``; transport
errors (``httpx.TransportError``) propagate to the caller, which
decides how to classify them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from app.core.config import Settings
from app.core.constants import (
    HEADER_CLIENT_ID,
    HEADER_SECRET_KEY,
    HEADER_USER_TOKEN,
    NO_CACHE_HEADERS,
)
from app.services.normalizer import DecodedBody, decode_body

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpstreamResponse:
    """A completed upstream exchange.

    Attributes:
        status_code: HTTP status returned by the upstream.
        body: The decoded response body.
    """

    status_code: int
    body: DecodedBody

    @property
    def is_success(self) -> bool:
        """Whether the status is in the 2xx range."""
        return 200 <= self.status_code < 300


class EmotionAPIClient:
    """Thin async wrapper around the two upstream endpoints.

    A fresh ``httpx.AsyncClient`` is opened per call, so instances
    hold no connection state and are safe to share.

    Args:
        settings: Injected application settings.
        transport: Optional ``httpx`` transport, used by tests to
            substitute ``httpx.MockTransport``.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def service_headers(self, credential: str) -> dict[str, str]:
        """Return the credential headers sent on every upstream call."""
        return {
            HEADER_CLIENT_ID: self._settings.EMOTION_CLIENT_ID,
            HEADER_SECRET_KEY: self._settings.EMOTION_SECRET_KEY,
            HEADER_USER_TOKEN: credential,
        }

    def result_headers(self, credential: str) -> dict[str, str]:
        """Return headers for a result fetch (credentials + no-cache)."""
        headers = self.service_headers(credential)
        if self._settings.EMOTION_REFERER:
            headers["Referer"] = self._settings.EMOTION_REFERER
        headers.update(NO_CACHE_HEADERS)
        return headers

    async def submit(
        self,
        *,
        payload: bytes,
        file_name: str,
        content_type: str,
        credential: str,
    ) -> UpstreamResponse:
        """POST *payload* to the submission endpoint as multipart.

        No explicit timeout is set; the ``httpx`` default applies.

        Raises:
            httpx.TransportError: When the upstream cannot be reached.
        """
        files = {
            self._settings.EMOTION_UPLOAD_FIELD: (
                file_name,
                payload,
                content_type,
            ),
        }
        async with httpx.AsyncClient(
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            resp = await client.post(
                self._settings.EMOTION_SUBMIT_URL,
                files=files,
                headers=self.service_headers(credential),
            )
        logger.info(
            "Upload response from upstream: %s %s",
            resp.status_code,
            resp.reason_phrase,
        )
        return UpstreamResponse(
            status_code=resp.status_code,
            body=decode_body(resp.content, resp.charset_encoding),
        )

    async def fetch_result(self, *, credential: str) -> UpstreamResponse:
        """GET the caller's latest result from the result endpoint.

        The overall deadline is enforced by the caller; the client
        timeout mirrors it so that sockets are not left dangling.

        Raises:
            httpx.TransportError: When the upstream cannot be reached
                or the client-level timeout expires.
        """
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._settings.RESULT_FETCH_TIMEOUT,
            follow_redirects=True,
        ) as client:
            resp = await client.get(
                self._settings.EMOTION_RESULT_URL,
                headers=self.result_headers(credential),
            )
        logger.info(
            "Result response from upstream: %s %s",
            resp.status_code,
            resp.reason_phrase,
        )
        return UpstreamResponse(
            status_code=resp.status_code,
            body=decode_body(resp.content, resp.charset_encoding),
        )
