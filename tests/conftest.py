from __future__ import annotations

import pytest

from relistify import config
from relistify.core import spotify_client


@pytest.fixture(autouse=True)
def credentials(monkeypatch):
    """Known credentials and no pacing delays for every test."""
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_ID", "spotify-id")
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_SECRET", "spotify-secret")
    monkeypatch.setattr(config, "SPOTIFY_REDIRECT_URI", "http://localhost:8000/api/spotify/callback")
    monkeypatch.setattr(config, "GOOGLE_CLIENT_ID", "google-id")
    monkeypatch.setattr(config, "GOOGLE_CLIENT_SECRET", "google-secret")
    monkeypatch.setattr(config, "YOUTUBE_REDIRECT_URI", "http://localhost:8000/api/youtube/callback")
    monkeypatch.setattr(config, "RELISTIFY_WEB_ORIGIN", "")
    monkeypatch.setattr(config, "COOKIE_SECURE", False)
    monkeypatch.setattr(config, "SEARCH_DELAY_SEC", 0.0)
    monkeypatch.setattr(config, "BATCH_DELAY_SEC", 0.0)
    spotify_client.reset_app_session()
    yield
    spotify_client.reset_app_session()
