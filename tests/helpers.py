"""Builders and a fake destination client shared by the tests."""
from __future__ import annotations

from typing import List, Optional

from relistify.core.errors import AuthError
from relistify.core.platform import PlatformClient
from relistify.models.playlist import Platform, PlaylistData, Track
from relistify.models.session import AuthSession


def make_tracks(count: int) -> tuple:
    return tuple(Track(title=f"Song {i}", artist=f"Artist {i}") for i in range(count))


def make_playlist(tracks=(), platform: Platform = Platform.YOUTUBE, description: str = "") -> PlaylistData:
    return PlaylistData(
        title="Road Trip",
        description=description,
        tracks=tuple(tracks),
        source_platform=platform,
        original_url="https://music.youtube.com/playlist?list=PL123",
    )


class FakeDestination(PlatformClient):
    """In-memory destination recording every call the converter makes."""

    platform = Platform.SPOTIFY
    batch_size = 100
    max_description_length = 300
    description_separator = " - "

    def __init__(self, hits=None, relaxed_hits=None, search_errors=(), failing_batches=(), create_error=None):
        super().__init__(AuthSession(access_token="token"))
        self.hits = hits if hits is not None else {}
        self.relaxed_hits = relaxed_hits or {}
        self.search_errors = set(search_errors)
        self.failing_batches = set(failing_batches)
        self.create_error = create_error
        self.searches: List[tuple] = []
        self.created: List[tuple] = []
        self.batches: List[List[str]] = []

    def get_auth_url(self) -> str:
        return "https://example.test/auth"

    def exchange_code(self, code: str) -> AuthSession:
        if code == "used":
            raise AuthError("Authorization code is invalid or has expired.", reason="invalid_grant")
        return AuthSession.from_expires_in(f"access-{code}", 3600, refresh_token=f"refresh-{code}")

    def refresh(self, refresh_token: str) -> AuthSession:
        if refresh_token == "revoked":
            raise AuthError("Refresh token revoked", reason="invalid_grant")
        return AuthSession(access_token="refreshed", refresh_token=refresh_token)

    def fetch_playlist(self, playlist_id: str) -> PlaylistData:
        raise NotImplementedError

    def current_user_id(self) -> str:
        return "user-1"

    def create_playlist(self, user_id: str, name: str, description: str) -> str:
        if self.create_error is not None:
            raise self.create_error
        self.created.append((user_id, name, description))
        return f"pl-{len(self.created)}"

    def search_track(self, track: Track, relaxed: bool = False) -> Optional[str]:
        self.searches.append((track.title, relaxed))
        if (track.title, relaxed) in self.search_errors:
            raise RuntimeError("search exploded")
        table = self.relaxed_hits if relaxed else self.hits
        return table.get(track.title)

    def add_items(self, playlist_id: str, item_ids: List[str]) -> None:
        index = len(self.batches)
        self.batches.append(list(item_ids))
        if index in self.failing_batches:
            raise RuntimeError("batch rejected")

    def playlist_url(self, playlist_id: str) -> str:
        return f"https://open.spotify.com/playlist/{playlist_id}"
