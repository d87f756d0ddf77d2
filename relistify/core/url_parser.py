"""Classify a pasted playlist link and pull out the platform-native playlist id."""
import re
from typing import List, Optional, Tuple

from relistify.models.playlist import ParsedUrl, Platform

# Checked in order; Spotify before YouTube, first match wins
_PATTERNS: List[Tuple[Platform, "re.Pattern[str]"]] = [
    (Platform.SPOTIFY, re.compile(r"spotify\.com/playlist/([a-zA-Z0-9]+)")),
    (Platform.SPOTIFY, re.compile(r"open\.spotify\.com/playlist/([a-zA-Z0-9]+)")),
    (Platform.SPOTIFY, re.compile(r"^spotify:playlist:([a-zA-Z0-9]+)$")),
    (Platform.YOUTUBE, re.compile(r"music\.youtube\.com/playlist\?list=([a-zA-Z0-9_-]+)")),
    (Platform.YOUTUBE, re.compile(r"youtube\.com/playlist\?list=([a-zA-Z0-9_-]+)")),
]


def parse_playlist_url(url) -> Optional[ParsedUrl]:
    """Return ParsedUrl for a recognized Spotify or YouTube playlist link, else None."""
    if not isinstance(url, str):
        return None
    trimmed = url.strip()
    if not trimmed:
        return None
    for platform, pattern in _PATTERNS:
        match = pattern.search(trimmed)
        if match:
            return ParsedUrl(platform=platform, playlist_id=match.group(1), original_url=trimmed)
    return None
