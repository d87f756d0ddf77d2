from __future__ import annotations

from unittest.mock import MagicMock

import httplib2
import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError
from oauthlib.oauth2.rfc6749.errors import InvalidGrantError
from oauthlib.oauth2.rfc6749.parameters import validate_token_parameters
from oauthlib.oauth2.rfc6749.tokens import OAuth2Token

from relistify import config
from relistify.core import youtube_client as yc
from relistify.core.errors import AuthError, ConfigurationError, UpstreamError
from relistify.models.playlist import Platform, Track
from relistify.models.session import AuthSession


def _http_error(status: int) -> HttpError:
    return HttpError(httplib2.Response({"status": status}), b"{}")


def _item(title, channel, video_id):
    return {
        "snippet": {
            "title": title,
            "videoOwnerChannelTitle": channel,
            "resourceId": {"kind": "youtube#video", "videoId": video_id},
        }
    }


@pytest.fixture
def service(monkeypatch):
    """Patch discovery; return the service mock every client will talk to."""
    yt = MagicMock()
    monkeypatch.setattr(yc, "build", MagicMock(return_value=yt))
    return yt


@pytest.fixture
def client(service):
    return yc.YouTubePlatformClient(AuthSession(access_token="yt-token"))


def test_missing_credentials(monkeypatch) -> None:
    monkeypatch.setattr(config, "GOOGLE_CLIENT_ID", "")
    with pytest.raises(ConfigurationError) as excinfo:
        yc.YouTubePlatformClient()
    assert excinfo.value.missing == ["GOOGLE_CLIENT_ID"]
    assert str(excinfo.value) == "YouTube credentials not configured"


def test_reads_need_a_session(service) -> None:
    with pytest.raises(AuthError):
        yc.YouTubePlatformClient().fetch_playlist("PL1")
    yc.build.assert_not_called()


def test_fetch_playlist_pages_and_cleans_artists(client, service) -> None:
    service.playlists.return_value.list.return_value.execute.return_value = {
        "items": [{"snippet": {"title": "Chill", "description": "Lazy sunday"}}]
    }
    service.playlistItems.return_value.list.return_value.execute.side_effect = [
        {
            "items": [
                _item("Levitating", "Dua Lipa - Topic", "v1"),
                _item("Deleted video", "", "v2"),
            ],
            "nextPageToken": "page-2",
        },
        {
            "items": [
                _item("Glass Animals - Heat Waves", "Some Uploader", "v3"),
                _item("Private video", "", "v4"),
                _item("Anti-Hero", "TaylorSwiftVEVO", "v5"),
            ],
        },
    ]

    playlist = client.fetch_playlist("PL1")

    assert playlist.title == "Chill"
    assert playlist.description == "Lazy sunday"
    assert playlist.source_platform is Platform.YOUTUBE
    assert playlist.original_url == "https://music.youtube.com/playlist?list=PL1"
    assert [(t.title, t.artist) for t in playlist.tracks] == [
        ("Levitating", "Dua Lipa"),
        ("Glass Animals - Heat Waves", "Glass Animals"),
        ("Anti-Hero", "TaylorSwift"),
    ]
    assert playlist.tracks[0].source_url == "https://music.youtube.com/watch?v=v1"
    assert playlist.tracks[0].duration is None

    calls = service.playlistItems.return_value.list.call_args_list
    assert [c.kwargs["pageToken"] for c in calls] == [None, "page-2"]
    assert all(c.kwargs["maxResults"] == 50 for c in calls)


def test_unknown_playlist_is_404(client, service) -> None:
    service.playlists.return_value.list.return_value.execute.return_value = {"items": []}
    with pytest.raises(UpstreamError) as excinfo:
        client.fetch_playlist("nope")
    assert excinfo.value.status == 404
    service.playlistItems.assert_not_called()


def test_http_401_is_auth_error(client, service) -> None:
    service.playlists.return_value.list.return_value.execute.side_effect = _http_error(401)
    with pytest.raises(AuthError):
        client.fetch_playlist("PL1")


def test_network_failure_is_upstream_error(client, service) -> None:
    service.playlists.return_value.list.return_value.execute.side_effect = httplib2.ServerNotFoundError("no dns")
    with pytest.raises(UpstreamError):
        client.fetch_playlist("PL1")


def test_current_user_id_is_channel(client, service) -> None:
    service.channels.return_value.list.return_value.execute.return_value = {"items": [{"id": "UC123"}]}
    assert client.current_user_id() == "UC123"
    service.channels.return_value.list.assert_called_once_with(part="id", mine=True)


def test_forbidden_user_lookup_is_auth_error(client, service) -> None:
    service.channels.return_value.list.return_value.execute.side_effect = _http_error(403)
    with pytest.raises(AuthError):
        client.current_user_id()


def test_current_user_without_channel(client, service) -> None:
    service.channels.return_value.list.return_value.execute.return_value = {"items": []}
    with pytest.raises(AuthError):
        client.current_user_id()


def test_create_playlist_private_with_clean_title(client, service) -> None:
    insert = service.playlists.return_value.insert
    insert.return_value.execute.return_value = {"id": "PLnew"}

    assert client.create_playlist("UC123", "<Mix> " + "x" * 200, "desc <b>") == "PLnew"

    body = insert.call_args.kwargs["body"]
    assert body["status"] == {"privacyStatus": "private"}
    assert len(body["snippet"]["title"]) == 150
    assert body["snippet"]["title"].startswith("Mix ")
    assert body["snippet"]["description"] == "desc b"


def test_create_playlist_failure_carries_status(client, service) -> None:
    service.playlists.return_value.insert.return_value.execute.side_effect = _http_error(403)
    with pytest.raises(UpstreamError) as excinfo:
        client.create_playlist("UC123", "Name", "Desc")
    assert excinfo.value.status == 403


def test_search_uses_music_category_unless_relaxed(client, service) -> None:
    search = service.search.return_value.list
    search.return_value.execute.return_value = {"items": [{"id": {"kind": "youtube#video", "videoId": "abc"}}]}
    track = Track(title="Bad Habit", artist="Steve Lacy")

    assert client.search_track(track) == "abc"
    assert search.call_args.kwargs == {
        "part": "snippet",
        "q": "Bad Habit Steve Lacy",
        "type": "video",
        "maxResults": 1,
        "videoCategoryId": "10",
    }

    client.search_track(track, relaxed=True)
    assert "videoCategoryId" not in search.call_args.kwargs


def test_search_without_hit(client, service) -> None:
    service.search.return_value.list.return_value.execute.return_value = {"items": []}
    assert client.search_track(Track(title="x", artist="y")) is None


def test_add_items_inserts_one_video_per_call(client, service) -> None:
    insert = service.playlistItems.return_value.insert
    client.add_items("PLnew", ["v1", "v2"])
    assert insert.call_count == 2
    assert [c.kwargs["body"]["snippet"]["resourceId"]["videoId"] for c in insert.call_args_list] == ["v1", "v2"]
    assert insert.call_args.kwargs["body"]["snippet"]["playlistId"] == "PLnew"


def test_service_built_once_per_session(client, service) -> None:
    service.search.return_value.list.return_value.execute.return_value = {"items": []}
    client.search_track(Track(title="a", artist="b"))
    client.search_track(Track(title="c", artist="d"))
    assert yc.build.call_count == 1


def test_auth_url_asks_for_offline_access() -> None:
    url = yc.YouTubePlatformClient().get_auth_url()
    assert url.startswith("https://accounts.google.com/o/oauth2/auth?")
    assert "client_id=google-id" in url
    assert "access_type=offline" in url
    assert "prompt=consent" in url
    assert "state=youtube" in url


def test_exchange_code_invalid_grant(monkeypatch) -> None:
    def reject(self, **kwargs):
        raise InvalidGrantError(description="Bad Request")

    monkeypatch.setattr(yc.Flow, "fetch_token", reject)
    with pytest.raises(AuthError) as excinfo:
        yc.YouTubePlatformClient().exchange_code("used-code")
    assert excinfo.value.reason == "invalid_grant"
    assert excinfo.value.status_code == 400


def test_refresh_failure_is_auth_error(monkeypatch) -> None:
    def expired(self, request):
        raise RefreshError("invalid_grant: Token has been expired or revoked.")

    monkeypatch.setattr(yc.Credentials, "refresh", expired)
    with pytest.raises(AuthError) as excinfo:
        yc.YouTubePlatformClient().refresh("old-refresh")
    assert excinfo.value.reason == "invalid_grant"


def test_widened_scope_in_token_response_is_accepted() -> None:
    granted = ["openid"] + config.YOUTUBE_SCOPES
    token = OAuth2Token(
        {"access_token": "a", "token_type": "Bearer", "scope": " ".join(granted)},
        old_scope=config.YOUTUBE_SCOPES,
    )
    assert token.scope_changed
    validate_token_parameters(token)
