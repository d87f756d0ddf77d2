from __future__ import annotations

import pytest

from relistify.core.url_parser import parse_playlist_url
from relistify.models.playlist import Platform


@pytest.mark.parametrize(
    "url, playlist_id",
    [
        ("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M", "37i9dQZF1DXcBWIGoYBM5M"),
        ("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc123", "37i9dQZF1DXcBWIGoYBM5M"),
        ("https://spotify.com/playlist/abcDEF123", "abcDEF123"),
        ("spotify:playlist:abcDEF123", "abcDEF123"),
    ],
)
def test_spotify_shapes(url: str, playlist_id: str) -> None:
    parsed = parse_playlist_url(url)
    assert parsed is not None
    assert parsed.platform is Platform.SPOTIFY
    assert parsed.playlist_id == playlist_id
    assert parsed.original_url == url


@pytest.mark.parametrize(
    "url, playlist_id",
    [
        ("https://music.youtube.com/playlist?list=PLx0sYbCqOb8TBPRdmBHs5Iftvv9TPboYG", "PLx0sYbCqOb8TBPRdmBHs5Iftvv9TPboYG"),
        ("https://www.youtube.com/playlist?list=PL-abc_123", "PL-abc_123"),
        ("https://youtube.com/playlist?list=OLAK5uy_k&feature=share", "OLAK5uy_k"),
    ],
)
def test_youtube_shapes(url: str, playlist_id: str) -> None:
    parsed = parse_playlist_url(url)
    assert parsed is not None
    assert parsed.platform is Platform.YOUTUBE
    assert parsed.playlist_id == playlist_id


def test_input_is_trimmed() -> None:
    parsed = parse_playlist_url("   https://open.spotify.com/playlist/abc123  \n")
    assert parsed.playlist_id == "abc123"
    assert parsed.original_url == "https://open.spotify.com/playlist/abc123"


@pytest.mark.parametrize(
    "url",
    [
        "",
        "   ",
        "not a url",
        "https://open.spotify.com/album/abc123",
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://soundcloud.com/someone/sets/mix",
        None,
        42,
    ],
)
def test_unrecognized_returns_none(url) -> None:
    assert parse_playlist_url(url) is None


def test_to_dict_shape() -> None:
    parsed = parse_playlist_url("https://music.youtube.com/playlist?list=PL1")
    assert parsed.to_dict() == {
        "platform": "youtube",
        "playlistId": "PL1",
        "originalUrl": "https://music.youtube.com/playlist?list=PL1",
    }
