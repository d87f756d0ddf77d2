"""YouTube Music via the YouTube Data API v3 (google-api-python-client).

Unlike Spotify, reads need the user's own OAuth token too.
"""
import logging
from datetime import timezone
from typing import List, Optional

import httplib2
import requests
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from oauthlib.oauth2.rfc6749.errors import InvalidGrantError, OAuth2Error

from relistify import config
from relistify.core.errors import AuthError, UpstreamError
from relistify.core.normalize import clean_channel_artist, truncate
from relistify.core.platform import PlatformClient
from relistify.models.playlist import Platform, PlaylistData, Track
from relistify.models.session import AuthSession

logger = logging.getLogger(__name__)

MUSIC_CATEGORY_ID = "10"
PAGE_SIZE = 50
MAX_TITLE_LENGTH = 150
# Placeholder titles YouTube returns for entries the user can no longer play
_UNAVAILABLE_TITLES = {"Deleted video", "Private video"}


def _invalid_grant() -> AuthError:
    return AuthError(
        "Authorization code is invalid or has expired. Please try authenticating again.",
        reason="invalid_grant",
    )


def _session_from_credentials(creds: Credentials, refresh_token: Optional[str] = None) -> AuthSession:
    expires_at = creds.expiry.replace(tzinfo=timezone.utc) if creds.expiry else None
    return AuthSession(
        access_token=creds.token,
        refresh_token=creds.refresh_token or refresh_token,
        expires_at=expires_at,
    )


def _strip_angle_brackets(text: str) -> str:
    # The API rejects titles/descriptions containing < or >
    return text.replace("<", "").replace(">", "")


def _map_item(item: dict) -> Optional[Track]:
    """playlistItems resource -> Track (no duration: the API does not expose one here)."""
    snippet = item.get("snippet") or {}
    title = snippet.get("title") or "Unknown Title"
    if title in _UNAVAILABLE_TITLES:
        return None
    channel = snippet.get("videoOwnerChannelTitle") or snippet.get("channelTitle") or "Unknown Artist"
    video_id = (snippet.get("resourceId") or {}).get("videoId") or (item.get("contentDetails") or {}).get("videoId")
    return Track(
        title=title,
        artist=clean_channel_artist(channel, title),
        source_track_id=video_id,
        source_url=f"https://music.youtube.com/watch?v={video_id}" if video_id else None,
    )


class YouTubePlatformClient(PlatformClient):
    platform = Platform.YOUTUBE
    # playlistItems.insert takes one video per call
    batch_size = 1
    max_description_length = 5000
    description_separator = "\n\n"

    def __init__(
        self,
        session: Optional[AuthSession] = None,
        *,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ) -> None:
        super().__init__(session)
        self.client_id = config.GOOGLE_CLIENT_ID if client_id is None else client_id
        self.client_secret = config.GOOGLE_CLIENT_SECRET if client_secret is None else client_secret
        self.redirect_uri = config.YOUTUBE_REDIRECT_URI if redirect_uri is None else redirect_uri
        config.require(
            "YouTube",
            GOOGLE_CLIENT_ID=self.client_id,
            GOOGLE_CLIENT_SECRET=self.client_secret,
        )
        self._service = None

    # OAuth

    def _flow(self) -> Flow:
        config.require("YouTube", YOUTUBE_REDIRECT_URI=self.redirect_uri)
        client_config = {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": config.GOOGLE_AUTH_URI,
                "token_uri": config.GOOGLE_TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }
        return Flow.from_client_config(
            client_config,
            scopes=config.YOUTUBE_SCOPES,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def get_auth_url(self) -> str:
        url, _state = self._flow().authorization_url(
            access_type="offline",
            include_granted_scopes="true",
            prompt="consent",
            state="youtube",
        )
        return url

    def exchange_code(self, code: str) -> AuthSession:
        flow = self._flow()
        try:
            flow.fetch_token(code=code)
        except InvalidGrantError as e:
            logger.warning("YouTube token exchange rejected: %s", e)
            raise _invalid_grant() from e
        except OAuth2Error as e:
            raise AuthError(f"YouTube authentication failed: {e.description or e.error}", reason=e.error) from e
        except requests.RequestException as e:
            raise UpstreamError(f"Google token endpoint unreachable: {e}") from e
        self.session = _session_from_credentials(flow.credentials)
        self._service = None
        return self.session

    def refresh(self, refresh_token: str) -> AuthSession:
        creds = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=config.GOOGLE_TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=config.YOUTUBE_SCOPES,
        )
        try:
            creds.refresh(Request())
        except RefreshError as e:
            reason = "invalid_grant" if "invalid_grant" in str(e) else None
            raise AuthError(f"YouTube session could not be refreshed: {e}", reason=reason) from e
        self.session = _session_from_credentials(creds, refresh_token)
        self._service = None
        return self.session

    # API plumbing

    def _api(self):
        session = self.require_session()
        if self._service is None:
            creds = Credentials(token=session.access_token)
            self._service = build("youtube", "v3", credentials=creds, cache_discovery=False)
        return self._service

    def _call(self, what: str, request) -> dict:
        """Execute a googleapiclient request, translating failures into our error types."""
        try:
            return request.execute()
        except HttpError as e:
            status = e.resp.status
            if status == 401:
                raise AuthError("YouTube session expired. Please log in again.") from e
            raise UpstreamError(f"YouTube API error while {what}: {status} {e}", status=status) from e
        except (httplib2.HttpLib2Error, OSError) as e:
            raise UpstreamError(f"YouTube API unreachable while {what}: {e}") from e

    # Read path

    def fetch_playlist(self, playlist_id: str) -> PlaylistData:
        yt = self._api()
        resp = self._call("fetching playlist", yt.playlists().list(part="snippet", id=playlist_id))
        found = resp.get("items") or []
        if not found:
            raise UpstreamError(f"YouTube playlist {playlist_id} not found", status=404)
        snippet = found[0].get("snippet") or {}

        tracks: List[Track] = []
        page_token = None
        while True:
            resp = self._call(
                "fetching playlist items",
                yt.playlistItems().list(
                    part="snippet,contentDetails",
                    playlistId=playlist_id,
                    maxResults=PAGE_SIZE,
                    pageToken=page_token,
                ),
            )
            for item in resp.get("items") or []:
                track = _map_item(item)
                if track:
                    tracks.append(track)
            page_token = resp.get("nextPageToken")
            if not page_token:
                break
        logger.info("Read YouTube playlist %s: %d tracks", playlist_id, len(tracks))
        return PlaylistData(
            title=snippet.get("title") or "Untitled Playlist",
            description=snippet.get("description") or "",
            tracks=tuple(tracks),
            source_platform=Platform.YOUTUBE,
            original_url=self.playlist_url(playlist_id),
        )

    # Write path

    def current_user_id(self) -> str:
        try:
            resp = self._call("resolving current user", self._api().channels().list(part="id", mine=True))
        except UpstreamError as e:
            if e.status == 403:
                raise AuthError("YouTube refused access to this account. Please log in again.") from e
            raise
        channels = resp.get("items") or []
        if not channels:
            raise AuthError("This Google account has no YouTube channel to own playlists.")
        return channels[0]["id"]

    def create_playlist(self, user_id: str, name: str, description: str) -> str:
        body = {
            "snippet": {
                "title": truncate(_strip_angle_brackets(name), MAX_TITLE_LENGTH),
                "description": _strip_angle_brackets(description),
                "defaultLanguage": "en",
            },
            "status": {"privacyStatus": "private"},
        }
        created = self._call("creating playlist", self._api().playlists().insert(part="snippet,status", body=body))
        playlist_id = created.get("id")
        if not playlist_id:
            raise UpstreamError("Failed to create playlist - no playlist ID returned")
        return playlist_id

    def search_track(self, track: Track, relaxed: bool = False) -> Optional[str]:
        params = {
            "part": "snippet",
            "q": f"{track.title} {track.artist}".strip(),
            "type": "video",
            "maxResults": 1,
        }
        if not relaxed:
            params["videoCategoryId"] = MUSIC_CATEGORY_ID
        resp = self._call("searching", self._api().search().list(**params))
        for item in resp.get("items") or []:
            video_id = (item.get("id") or {}).get("videoId")
            if video_id:
                return video_id
        return None

    def add_items(self, playlist_id: str, item_ids: List[str]) -> None:
        for video_id in item_ids:
            body = {
                "snippet": {
                    "playlistId": playlist_id,
                    "resourceId": {"kind": "youtube#video", "videoId": video_id},
                }
            }
            self._call("adding tracks", self._api().playlistItems().insert(part="snippet", body=body))

    def playlist_url(self, playlist_id: str) -> str:
        return f"https://music.youtube.com/playlist?list={playlist_id}"
