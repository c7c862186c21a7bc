"""
FastAPI dependency-injection helpers.

Settings are loaded once per process (``get_settings`` is
cached) and injected into the upstream client, submitter and
poller.  Override any of these in tests via
``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.services.emotion_client import EmotionAPIClient
from app.services.poller import Poller
from app.services.submitter import Submitter


def get_emotion_client(
    settings: Settings = Depends(get_settings),
) -> EmotionAPIClient:
    """Return an upstream client bound to the current settings."""
    return EmotionAPIClient(settings)


def get_submitter(
    settings: Settings = Depends(get_settings),
    client: EmotionAPIClient = Depends(get_emotion_client),
) -> Submitter:
    """Return a ``Submitter`` wired to the injected client."""
    return Submitter(settings, client)


def get_poller(
    settings: Settings = Depends(get_settings),
    client: EmotionAPIClient = Depends(get_emotion_client),
) -> Poller:
    """Return a ``Poller`` wired to the injected client."""
    return Poller(settings, client)
