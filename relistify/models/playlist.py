"""Canonical playlist, track and conversion-result shapes shared by both platforms."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Platform(str, Enum):
    SPOTIFY = "spotify"
    YOUTUBE = "youtube"

    @property
    def display_name(self) -> str:
        return "Spotify" if self is Platform.SPOTIFY else "YouTube Music"

    @property
    def other(self) -> "Platform":
        return Platform.YOUTUBE if self is Platform.SPOTIFY else Platform.SPOTIFY


def format_duration(duration_ms: int) -> str:
    """Milliseconds -> "m:ss" (seconds zero-padded)."""
    total_seconds = int(duration_ms) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


@dataclass(frozen=True)
class Track:
    """One source track. Matching identity is (title, artist)."""
    title: str
    artist: str
    album: Optional[str] = None
    duration_seconds: Optional[int] = None
    source_track_id: Optional[str] = None
    source_url: Optional[str] = None

    @property
    def duration(self) -> Optional[str]:
        if self.duration_seconds is None:
            return None
        return format_duration(self.duration_seconds * 1000)

    @property
    def label(self) -> str:
        """Human-readable "title by artist" used in failure reports."""
        return f"{self.title} by {self.artist}"

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "durationSeconds": self.duration_seconds,
            "duration": self.duration,
            "sourceTrackId": self.source_track_id,
            "sourceUrl": self.source_url,
        }


@dataclass(frozen=True)
class PlaylistData:
    """A source playlist as read from its platform; read-only afterwards."""
    title: str
    tracks: Tuple[Track, ...]
    source_platform: Platform
    original_url: str
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "tracks": [t.to_dict() for t in self.tracks],
            "sourcePlatform": self.source_platform.value,
            "originalUrl": self.original_url,
        }


@dataclass(frozen=True)
class ParsedUrl:
    platform: Platform
    playlist_id: str
    original_url: str

    def to_dict(self) -> dict:
        return {
            "platform": self.platform.value,
            "playlistId": self.playlist_id,
            "originalUrl": self.original_url,
        }


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one conversion. added_count + len(failed_tracks) == number of source tracks."""
    destination_playlist_id: str
    destination_playlist_url: str
    added_count: int
    failed_tracks: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "destinationPlaylistId": self.destination_playlist_id,
            "destinationPlaylistUrl": self.destination_playlist_url,
            "addedCount": self.added_count,
            "failedTracks": list(self.failed_tracks),
        }
