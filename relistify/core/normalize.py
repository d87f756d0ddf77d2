"""Field cleanup for playlist reads and writes: channel artists, playlist names, descriptions."""
import re
from typing import Optional

from relistify.models.playlist import Platform

# Channel suffixes YouTube attaches to artist channels
_CHANNEL_SUFFIXES = (
    re.compile(r"\s-\sTopic$"),
    re.compile(r"\s?VEVO$"),
    re.compile(r"\sOfficial$"),
)

TITLE_ARTIST_SEPARATOR = " - "
ELLIPSIS = "..."


def clean_channel_artist(channel_title: str, video_title: str = "") -> str:
    """Best-effort artist for a YouTube video.

    Strips known channel suffixes; if the video title looks like
    "Artist - Song", the part before the separator wins.
    """
    artist = (channel_title or "").strip()
    for pattern in _CHANNEL_SUFFIXES:
        artist = pattern.sub("", artist)
    if TITLE_ARTIST_SEPARATOR in (video_title or ""):
        head = video_title.split(TITLE_ARTIST_SEPARATOR, 1)[0].strip()
        if head:
            artist = head
    return artist


def playlist_name(title: str, source: Platform) -> str:
    return f"{title} (from {source.display_name})"


def truncate(text: str, max_length: int) -> str:
    """Cut to max_length, marking the cut with "..."."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


def build_description(
    description: Optional[str],
    original_url: str,
    source: Platform,
    *,
    max_length: int,
    separator: str = " - ",
) -> str:
    """Source description (if any) followed by an attribution line, truncated to max_length."""
    text = ""
    if description and description.strip():
        text = description.strip() + separator
    text += f"Converted from {source.display_name} playlist: {original_url or ''}"
    return truncate(text, max_length)
