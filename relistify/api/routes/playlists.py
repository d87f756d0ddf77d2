"""Playlist link parsing."""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from relistify.core.url_parser import parse_playlist_url

router = APIRouter()


class ParseBody(BaseModel):
    url: str


@router.post("/parse")
def parse_url(body: ParseBody):
    """Classify a pasted link as Spotify or YouTube Music and extract the playlist id."""
    parsed = parse_playlist_url(body.url)
    if parsed is None:
        raise HTTPException(
            status_code=400,
            detail="Unrecognized playlist URL. Paste a Spotify or YouTube Music playlist link.",
        )
    return parsed.to_dict()
