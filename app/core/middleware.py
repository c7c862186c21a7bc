"""
Request correlation middleware.

Every response carries an ``X-Request-ID`` header: the value
supplied by the client when present, otherwise a fresh UUID.  The
id is stored in ``app.logging_config.request_id_var`` for the
lifetime of the request so that log records can include it.
"""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.constants import HEADER_REQUEST_ID
from app.logging_config import request_id_var

_MAX_REQUEST_ID_LENGTH: int = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign and echo a per-request correlation id."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        incoming = request.headers.get(HEADER_REQUEST_ID, "").strip()
        request_id = incoming[:_MAX_REQUEST_ID_LENGTH] or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[HEADER_REQUEST_ID] = request_id
        return response
