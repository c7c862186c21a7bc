"""
FastAPI entry point.

The application exposes:
* ``POST    /api/v1/audio-analysis`` — submit an audio file
* ``GET     /api/v1/audio-analysis`` — poll a job's status / result
* ``OPTIONS /api/v1/audio-analysis`` — CORS preflight
* ``GET     /api/v1/health``         — liveness probe
* ``GET     /api/v1/metrics``        — Prometheus metrics
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.api.routes import analysis, health
from app.core.config import get_settings, get_version
from app.core.middleware import RequestIDMiddleware
from app.core.security import allowed_origin
from app.logging_config import setup_logging

# ── Logging ─────────────────────────────────────────────────────────────────

settings = get_settings()
setup_logging(level=settings.LOG_LEVEL, json_format=not settings.DEBUG)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup / shutdown hooks."""
    logger.info(
        "Starting %s (upstream submit=%s result=%s)",
        settings.APP_NAME,
        settings.EMOTION_SUBMIT_URL,
        settings.EMOTION_RESULT_URL,
    )
    if not settings.EMOTION_CLIENT_ID or not settings.EMOTION_SECRET_KEY:
        logger.warning("EMOTION_CLIENT_ID / EMOTION_SECRET_KEY are not configured")
    yield
    logger.info("Shutting down %s", settings.APP_NAME)


# ── App factory ─────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Stateless proxy that submits audio to an external emotion-analysis "
        "service and reconciles its results into a stable job status."
    ),
    version=get_version(),
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    root_path=settings.ROOT_PATH,
    lifespan=lifespan,
)

app.add_middleware(RequestIDMiddleware)


# Not CORSMiddleware: it answers preflights itself with 200, while
# OPTIONS /audio-analysis must reply 204 from its own route.
@app.middleware("http")
async def stamp_allowed_origin(request: Request, call_next):
    """Add ``Access-Control-Allow-Origin`` to non-preflight responses."""
    response = await call_next(request)
    if request.method != "OPTIONS":
        origin = allowed_origin(request.headers.get("origin"), settings)
        if origin is not None:
            response.headers["Access-Control-Allow-Origin"] = origin
    return response


app.include_router(analysis.router, prefix=settings.API_V1_STR)
app.include_router(health.router, prefix=settings.API_V1_STR)
