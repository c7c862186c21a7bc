"""Tests for the Emotion Analysis Proxy HTTP endpoints."""

from __future__ import annotations

import asyncio
import re

import httpx
import pytest

from app.api.deps import get_poller
from app.main import app

ANALYSIS = "/api/v1/audio-analysis"
WAV = ("test.wav", b"\x00" * 10_000, "audio/wav")


# ── Health / observability ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health_check(client):
    """Test basic health endpoint returns OK."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_check_returns_request_id(client):
    """Response includes X-Request-ID header from middleware."""
    response = await client.get("/api/v1/health")

    assert "x-request-id" in response.headers


@pytest.mark.asyncio
async def test_health_check_echoes_custom_request_id(client):
    """Client-supplied X-Request-ID is echoed back."""
    response = await client.get(
        "/api/v1/health",
        headers={"X-Request-ID": "custom-rid-42"},
    )

    assert response.headers["x-request-id"] == "custom-rid-42"


@pytest.mark.asyncio
async def test_metrics_endpoint(client, upstream):
    """Poll counters are exposed in Prometheus format."""
    upstream.respond(404)
    await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    response = await client.get("/api/v1/metrics")

    assert response.status_code == 200
    assert "emotion_proxy_polls_total" in response.text


# ── Submit ──────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_submit_uses_upstream_id(client, upstream):
    """Upstream ``data.id`` becomes the job id."""
    upstream.respond(200, json={"data": {"id": "abc-1"}})

    response = await client.post(
        ANALYSIS,
        files={"audio_file": WAV},
        data={"user_token": "tok123"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["jobId"] == "abc-1"
    assert data["status"] == "accepted"
    assert data["success"] is True
    assert data["file"] == {
        "fileName": "test.wav",
        "fileType": "audio/wav",
        "fileSize": 10_000,
    }


@pytest.mark.asyncio
async def test_submit_synthesizes_id_on_unparseable_body(client, upstream):
    """A non-JSON success body still yields a job id."""
    upstream.respond(200, text="accepted!")

    response = await client.post(
        ANALYSIS,
        files={"audio_file": WAV},
        data={"user_token": "tok123"},
    )

    assert response.status_code == 200
    assert re.fullmatch(r"tok123_test\.wav_\d+", response.json()["jobId"])


@pytest.mark.asyncio
async def test_submit_requires_file(client, upstream):
    """Missing audio_file is a 400 with no upstream call."""
    response = await client.post(ANALYSIS, data={"user_token": "tok123"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No audio_file provided"}
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_submit_requires_token(client, upstream):
    """Missing user_token is a 400 with no upstream call."""
    response = await client.post(ANALYSIS, files={"audio_file": WAV})

    assert response.status_code == 400
    assert response.json()["error"] == "No user_token provided"
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_submit_rejects_empty_file(client, upstream):
    """A zero-byte upload is treated as missing."""
    response = await client.post(
        ANALYSIS,
        files={"audio_file": ("empty.wav", b"", "audio/wav")},
        data={"user_token": "tok123"},
    )

    assert response.status_code == 400
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_submit_mirrors_upstream_status(client, upstream):
    """Upstream rejections keep their status code."""
    upstream.respond(413, text="payload too large")

    response = await client.post(
        ANALYSIS,
        files={"audio_file": WAV},
        data={"user_token": "tok123"},
    )

    assert response.status_code == 413
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Failed to request audio analysis"
    assert data["details"] == "payload too large"


@pytest.mark.asyncio
async def test_submit_transport_failure_is_500(client, upstream):
    """An unreachable upstream is reported as 500."""

    def _refused(request):
        raise httpx.ConnectError("refused", request=request)

    upstream.respond_with(_refused)

    response = await client.post(
        ANALYSIS,
        files={"audio_file": WAV},
        data={"user_token": "tok123"},
    )

    assert response.status_code == 500
    assert response.json()["success"] is False


# ── Poll ────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_poll_requires_job_id(client, upstream):
    """Missing jobId is a 400 with no upstream call."""
    response = await client.get(ANALYSIS, params={"userToken": "tok123"})

    assert response.status_code == 400
    assert response.json()["error"] == "jobId query parameter is required"
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_poll_requires_user_token(client, upstream):
    """Missing userToken is a 400 with no upstream call."""
    response = await client.get(ANALYSIS, params={"jobId": "abc-1"})

    assert response.status_code == 400
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_poll_404_is_processing(client, upstream):
    """Upstream 404 means "not ready yet"."""
    upstream.respond(404, text="Not Found")

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "PROCESSING"
    assert data["jobId"] == "abc-1"


@pytest.mark.asyncio
async def test_poll_completed(client, upstream):
    """A content list is projected into the result shape."""
    upstream.respond(
        200,
        json={"data": {"content": [{"ansDog": "happy", "fileNameOrigin": "test.wav"}]}},
    )

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "COMPLETED"
    assert data["jobId"] == "abc-1"
    assert data["result"] == {
        "classification": "happy",
        "filter": "",
        "originalFileName": "test.wav",
        "startOffset": "",
        "endOffset": "",
    }


@pytest.mark.asyncio
async def test_poll_pending_code(client, upstream):
    """The pending code keeps the caller polling."""
    upstream.respond(200, json={"code": "S0005", "message": "no data"})

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 200
    assert response.json()["status"] == "PROCESSING"


@pytest.mark.asyncio
async def test_poll_no_content(client, upstream):
    """A successful but empty shape is NO_CONTENT."""
    upstream.respond(200, json={"data": {"content": []}})

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "NO_CONTENT"
    assert "result" not in data
    assert "content" in data["details"]["body"]


@pytest.mark.asyncio
async def test_poll_upstream_error_mirrors_status(client, upstream):
    """Non-404 upstream failures are ERROR with the upstream status."""
    upstream.respond(503, text="maintenance")

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "ERROR"
    assert data["jobId"] == "abc-1"
    assert data["success"] is False
    assert data["details"] == {"httpStatus": 503, "body": "maintenance"}


@pytest.mark.asyncio
async def test_poll_parse_failure_is_502(client, upstream):
    """A 2xx body that is not JSON is a contract mismatch."""
    upstream.respond(200, text="<html>oops</html>")

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 502
    data = response.json()
    assert data["status"] == "ERROR"
    assert data["details"]["body"] == "<html>oops</html>"


@pytest.mark.asyncio
async def test_poll_empty_body_is_parse_failure(client, upstream):
    """An empty 2xx body is not JSON either."""
    upstream.respond(200, content=b"")

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 502
    data = response.json()
    assert data["status"] == "ERROR"
    assert data["details"]["parseFailure"] == "empty body"


@pytest.mark.asyncio
async def test_poll_follows_redirects(client, upstream):
    """A redirected result endpoint is followed to its target."""

    def _redirect(request):
        if request.url.path.endswith("/result"):
            return httpx.Response(302, headers={"Location": "https://emotion.test/v2/result2"})
        return httpx.Response(200, json={"data": {"content": [{"ansDog": "happy"}]}})

    upstream.respond_with(_redirect)

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "COMPLETED"
    assert data["result"]["classification"] == "happy"
    assert [str(r.url) for r in upstream.requests] == [
        "https://emotion.test/v2/result",
        "https://emotion.test/v2/result2",
    ]


@pytest.mark.asyncio
async def test_poll_error_code(client, upstream):
    """Explicit non-pending codes are ERROR."""
    upstream.respond(200, json={"code": "X0001"})

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 502
    assert response.json()["details"]["code"] == "X0001"
    assert response.json()["details"]["unrecognised"] is True


@pytest.mark.asyncio
async def test_poll_timeout_is_processing(client, upstream, settings):
    """An expired deadline is inconclusive, not an error."""

    async def _slow(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json={})

    upstream.respond_with(_slow)
    settings.RESULT_FETCH_TIMEOUT = 0.05

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 200
    assert response.json()["status"] == "PROCESSING"


@pytest.mark.asyncio
async def test_poll_unexpected_failure_is_500(client):
    """Unexpected exceptions never escape the route."""

    class _Broken:
        async def poll(self, job_id, credential):
            raise RuntimeError("kaboom")

    app.dependency_overrides[get_poller] = lambda: _Broken()

    response = await client.get(ANALYSIS, params={"jobId": "abc-1", "userToken": "tok123"})

    assert response.status_code == 500
    data = response.json()
    assert data["status"] == "ERROR"
    assert data["jobId"] == "abc-1"
    assert data["details"] == "kaboom"


# ── CORS ────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_preflight_echoes_origin(client):
    """OPTIONS answers 204 with the allowed verbs and headers."""
    response = await client.options(
        ANALYSIS,
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "https://app.example.com"
    assert response.headers["access-control-allow-methods"] == "POST, GET, OPTIONS"
    assert "X-User-Token" in response.headers["access-control-allow-headers"]


@pytest.mark.asyncio
async def test_cross_origin_poll_is_stamped(client, upstream):
    """Regular responses carry Access-Control-Allow-Origin."""
    upstream.respond(404)

    response = await client.get(
        ANALYSIS,
        params={"jobId": "abc-1", "userToken": "tok123"},
        headers={"Origin": "https://app.example.com"},
    )

    assert response.headers["access-control-allow-origin"] == "https://app.example.com"
