"""Shared pytest fixtures for the Emotion Analysis Proxy test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_emotion_client
from app.core.config import Settings, get_settings
from app.main import app
from app.services.emotion_client import EmotionAPIClient

SUBMIT_URL = "https://emotion.test/v2/analysis"
RESULT_URL = "https://emotion.test/v2/result"


# ── Upstream double ─────────────────────────────────────────────────────────


class FakeUpstream:
    """Records outgoing requests and answers with a configurable response.

    Backed by ``httpx.MockTransport`` so the real client code paths
    (multipart encoding, headers, decoding) are exercised.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responder: Callable[[httpx.Request], Any] = lambda _req: httpx.Response(
            404
        )

    def respond(self, status_code: int = 200, **kwargs: Any) -> None:
        """Answer every request with ``httpx.Response(status_code, **kwargs)``."""
        self._responder = lambda _req: httpx.Response(status_code, **kwargs)

    def respond_with(self, handler: Callable[[httpx.Request], Any]) -> None:
        """Answer with a custom (sync or async) handler."""
        self._responder = handler

    def _handle(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        return self._responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


# ── Settings ────────────────────────────────────────────────────────────────


@pytest.fixture
def settings() -> Settings:
    """Return Settings with test upstream endpoints and keys."""
    return Settings(
        _env_file=None,
        EMOTION_SUBMIT_URL=SUBMIT_URL,
        EMOTION_RESULT_URL=RESULT_URL,
        EMOTION_CLIENT_ID="client-id",
        EMOTION_SECRET_KEY="secret-key",
        EMOTION_REFERER="http://proxy.test",
        EMOTION_PENDING_CODES="S0005",
        EMOTION_KNOWN_ERROR_CODES="E0001",
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    """Return a fresh upstream double (404 until configured)."""
    return FakeUpstream()


@pytest.fixture
def emotion_client(settings: Settings, upstream: FakeUpstream) -> EmotionAPIClient:
    """Return an upstream client routed through ``upstream``."""
    return EmotionAPIClient(settings, transport=upstream.transport)


# ── HTTP client ─────────────────────────────────────────────────────────────


@pytest.fixture
async def client(settings: Settings, emotion_client: EmotionAPIClient) -> AsyncClient:  # type: ignore[misc]
    """
    Yield an async HTTP client bound to the FastAPI app.

    Settings and the upstream client are overridden so no real
    network call is ever made.

    Usage::

        async def test_something(client: AsyncClient):
            response = await client.get("/api/v1/health")
    """
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_emotion_client] = lambda: emotion_client
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(
            transport=transport,
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
