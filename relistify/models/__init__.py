"""Data models for playlists, tracks, conversion results and auth sessions."""
from relistify.models.playlist import ConversionResult, ParsedUrl, Platform, PlaylistData, Track
from relistify.models.session import AuthSession

__all__ = [
    "AuthSession",
    "ConversionResult",
    "ParsedUrl",
    "Platform",
    "PlaylistData",
    "Track",
]
