"""
Application configuration and settings.

Centralises all external configuration (env-vars / .env) and
version discovery.  The upstream emotion-analysis endpoints and
static service keys live here; nothing else in the application
reads the environment directly.
"""

from __future__ import annotations

import importlib.metadata
import json
import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# ── Package version (single source of truth from pyproject.toml) ────────


def get_version() -> str:
    """Return the installed package version.

    Falls back to ``"0.0.0-dev"`` when the package metadata
    is not available (e.g. during editable / source installs).

    Returns:
        Semantic version string.
    """
    try:
        return importlib.metadata.version("emotion-analysis-proxy")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


# ── Settings ────────────────────────────────────────────────────────────────


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # General
    APP_NAME: str = "Emotion Analysis Proxy"
    API_V1_STR: str = "/api/v1"
    ROOT_PATH: str = ""
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # ── Upstream emotion-analysis service ───────────────────────────
    EMOTION_SUBMIT_URL: str = "https://emotion-api.example.com/v2/analysis"
    EMOTION_RESULT_URL: str = "https://emotion-api.example.com/v2/result"
    EMOTION_CLIENT_ID: str = ""
    EMOTION_SECRET_KEY: str = ""
    EMOTION_REFERER: str = ""
    EMOTION_UPLOAD_FIELD: str = "bark_file"

    # Comma-separated response codes the upstream uses for "no result yet"
    EMOTION_PENDING_CODES: str = "S0005"
    # Comma-separated codes known to mean a genuine failure; others are flagged
    EMOTION_KNOWN_ERROR_CODES: str = ""

    # ── Timeouts / limits ───────────────────────────────────────────
    RESULT_FETCH_TIMEOUT: float = 30.0  # seconds
    ERROR_EXCERPT_CHARS: int = 1000

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: str | list[str]) -> list[str]:
        """Accept a JSON-encoded string or a list."""
        if isinstance(v, str):
            return json.loads(v)
        return v

    @property
    def pending_codes(self) -> frozenset[str]:
        """Parse EMOTION_PENDING_CODES comma-separated string into a set."""
        return _split_codes(self.EMOTION_PENDING_CODES)

    @property
    def known_error_codes(self) -> frozenset[str]:
        """Parse EMOTION_KNOWN_ERROR_CODES comma-separated string into a set."""
        return _split_codes(self.EMOTION_KNOWN_ERROR_CODES)


def _split_codes(raw: str) -> frozenset[str]:
    return frozenset(c.strip() for c in raw.split(",") if c.strip())


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Using ``lru_cache`` ensures the .env file is read exactly
    once.  Override in tests via ``app.dependency_overrides``.
    """
    return Settings()
