"""Health-check and metrics routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response

from app.core.config import get_version
from app.core.metrics import generate_metrics
from app.schemas import HealthResponse

router = APIRouter(tags=["health"])

_version = get_version()


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness probe — returns OK if the web process is running."""
    return HealthResponse(status="ok", version=_version)


@router.get("/metrics", tags=["observability"])
def prometheus_metrics() -> Response:
    """Expose proxy counters in Prometheus exposition format."""
    return Response(
        content=generate_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
