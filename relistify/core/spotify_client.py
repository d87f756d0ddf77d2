"""Spotify Web API client via Spotipy.

Reads use an app-level client-credentials token (or the user's token when
logged in, so private playlists work); writes need the user's token.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

import requests
from spotipy import Spotify
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOAuth, SpotifyOauthError

from relistify import config
from relistify.core.errors import AuthError, UpstreamError
from relistify.core.platform import PlatformClient
from relistify.models.playlist import Platform, PlaylistData, Track
from relistify.models.session import AuthSession

logger = logging.getLogger(__name__)

# App-level token shared by all readers; replaced once expired
_app_session: Optional[AuthSession] = None


def reset_app_session() -> None:
    global _app_session
    _app_session = None


def _session_from_token_info(token_info: dict, refresh_token: Optional[str] = None) -> AuthSession:
    expires_at = token_info.get("expires_at")
    if expires_at:
        return AuthSession(
            access_token=token_info["access_token"],
            refresh_token=token_info.get("refresh_token") or refresh_token,
            expires_at=datetime.fromtimestamp(int(expires_at), tz=timezone.utc),
        )
    return AuthSession.from_expires_in(
        token_info["access_token"],
        token_info.get("expires_in"),
        token_info.get("refresh_token") or refresh_token,
    )


def _auth_error_from_oauth(e: SpotifyOauthError) -> AuthError:
    if getattr(e, "error", None) == "invalid_grant":
        return AuthError(
            "Authorization code is invalid or has expired. Please try authenticating again.",
            reason="invalid_grant",
        )
    return AuthError(
        f"Spotify authentication failed: {getattr(e, 'error_description', None) or e}",
        reason=getattr(e, "error", None),
    )


def _map_track(track: Optional[dict]) -> Optional[Track]:
    """Spotify track object -> Track. None for removed items and podcast episodes."""
    if not track or track.get("type", "track") != "track":
        return None
    artists = track.get("artists") or []
    duration_ms = track.get("duration_ms")
    return Track(
        title=track.get("name") or "",
        artist=", ".join(a.get("name", "") for a in artists if a.get("name")),
        album=(track.get("album") or {}).get("name"),
        duration_seconds=int(duration_ms) // 1000 if duration_ms is not None else None,
        source_track_id=track.get("id"),
        source_url=(track.get("external_urls") or {}).get("spotify"),
    )


def _quoted(value: str) -> str:
    return value.replace('"', "").strip()


class SpotifyPlatformClient(PlatformClient):
    platform = Platform.SPOTIFY
    batch_size = 100
    max_description_length = 300
    # Spotify descriptions are single line
    description_separator = " - "

    def __init__(
        self,
        session: Optional[AuthSession] = None,
        *,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> None:
        super().__init__(session)
        self.client_id = config.SPOTIFY_CLIENT_ID if client_id is None else client_id
        self.client_secret = config.SPOTIFY_CLIENT_SECRET if client_secret is None else client_secret
        self.redirect_uri = config.SPOTIFY_REDIRECT_URI if redirect_uri is None else redirect_uri
        config.require(
            "Spotify",
            SPOTIFY_CLIENT_ID=self.client_id,
            SPOTIFY_CLIENT_SECRET=self.client_secret,
        )

    # OAuth

    def _oauth(self) -> SpotifyOAuth:
        config.require("Spotify", SPOTIFY_REDIRECT_URI=self.redirect_uri)
        return SpotifyOAuth(
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.redirect_uri,
            scope=config.SPOTIFY_SCOPES,
            state="spotify",
            cache_handler=MemoryCacheHandler(),
            open_browser=False,
        )

    def get_auth_url(self) -> str:
        return self._oauth().get_authorize_url()

    def exchange_code(self, code: str) -> AuthSession:
        auth = self._oauth()
        try:
            auth.get_access_token(code=code, as_dict=False, check_cache=False)
        except SpotifyOauthError as e:
            logger.warning("Spotify token exchange rejected: %s", e)
            raise _auth_error_from_oauth(e) from e
        except requests.RequestException as e:
            raise UpstreamError(f"Spotify token endpoint unreachable: {e}") from e
        token_info = auth.cache_handler.get_cached_token()
        if not token_info:
            raise AuthError("Spotify returned no token")
        self.session = _session_from_token_info(token_info)
        return self.session

    def refresh(self, refresh_token: str) -> AuthSession:
        try:
            token_info = self._oauth().refresh_access_token(refresh_token)
        except SpotifyOauthError as e:
            raise _auth_error_from_oauth(e) from e
        except requests.RequestException as e:
            raise UpstreamError(f"Spotify token endpoint unreachable: {e}") from e
        self.session = _session_from_token_info(token_info, refresh_token)
        return self.session

    def app_session(self) -> AuthSession:
        """Client-credentials token; fetched again once the cached one has expired."""
        global _app_session
        if _app_session is not None and not _app_session.is_expired():
            return _app_session
        auth = SpotifyClientCredentials(
            client_id=self.client_id,
            client_secret=self.client_secret,
            cache_handler=MemoryCacheHandler(),
        )
        try:
            auth.get_access_token(as_dict=False, check_cache=False)
        except SpotifyOauthError as e:
            raise AuthError(f"Failed to get Spotify app token: {e}", reason=getattr(e, "error", None)) from e
        except requests.RequestException as e:
            raise UpstreamError(f"Spotify token endpoint unreachable: {e}") from e
        _app_session = _session_from_token_info(auth.cache_handler.get_cached_token() or {})
        logger.info("Fetched Spotify app token (expires %s)", _app_session.expires_at)
        return _app_session

    # API plumbing

    def _api(self, session: AuthSession) -> Spotify:
        return Spotify(auth=session.access_token)

    def _reader(self) -> Spotify:
        if self.is_authenticated():
            return self._api(self.session)
        return self._api(self.app_session())

    def _writer(self) -> Spotify:
        return self._api(self.require_session())

    def _call(self, what: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a Spotipy call, translating failures into our error types."""
        try:
            return fn(*args, **kwargs)
        except SpotifyException as e:
            if e.http_status == 401:
                raise AuthError("Spotify session expired. Please log in again.") from e
            raise UpstreamError(
                f"Spotify API error while {what}: {e.http_status} {e.msg}",
                status=e.http_status,
            ) from e
        except requests.RequestException as e:
            raise UpstreamError(f"Spotify API unreachable while {what}: {e}") from e

    # Read path

    def fetch_playlist(self, playlist_id: str) -> PlaylistData:
        sp = self._reader()
        data = self._call("fetching playlist", sp.playlist, playlist_id)
        page = data.get("tracks") or {}
        items = list(page.get("items") or [])
        while page.get("next"):
            page = self._call("fetching playlist page", sp.next, page) or {}
            items.extend(page.get("items") or [])
        tracks = tuple(t for t in (_map_track(item.get("track")) for item in items) if t)
        logger.info("Read Spotify playlist %s: %d tracks", playlist_id, len(tracks))
        return PlaylistData(
            title=data.get("name") or "Untitled Playlist",
            description=data.get("description") or "",
            tracks=tracks,
            source_platform=Platform.SPOTIFY,
            original_url=(data.get("external_urls") or {}).get("spotify") or self.playlist_url(playlist_id),
        )

    # Write path

    def current_user_id(self) -> str:
        try:
            user = self._call("resolving current user", self._writer().current_user)
        except UpstreamError as e:
            if e.status == 403:
                raise AuthError("Spotify refused access to this account. Please log in again.") from e
            raise
        return user["id"]

    def create_playlist(self, user_id: str, name: str, description: str) -> str:
        # POST /me/playlists; the owner is implied by the token
        created = self._call(
            "creating playlist",
            self._writer().current_user_playlist_create,
            name,
            public=False,
            description=description,
        )
        return created["id"]

    def search_track(self, track: Track, relaxed: bool = False) -> Optional[str]:
        if relaxed:
            query = f"{track.title} {track.artist}".strip()
        else:
            query = f'track:"{_quoted(track.title)}" artist:"{_quoted(track.artist)}"'
        result = self._call("searching", self._writer().search, q=query, type="track", limit=1)
        items = ((result or {}).get("tracks") or {}).get("items") or []
        return items[0]["uri"] if items else None

    def add_items(self, playlist_id: str, item_ids: List[str]) -> None:
        self._call("adding tracks", self._writer().playlist_add_items, playlist_id, item_ids)

    def playlist_url(self, playlist_id: str) -> str:
        return f"https://open.spotify.com/playlist/{playlist_id}"
