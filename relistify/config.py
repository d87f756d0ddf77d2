"""Configuration: env, OAuth credentials, rate-limit delays, cookie settings."""
import os
from pathlib import Path

from dotenv import load_dotenv

from relistify.core.errors import ConfigurationError

# Base paths (project root = parent of relistify package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SPOTIFY_CLIENT_ID etc. are set
load_dotenv(BASE_DIR / ".env")

# API
API_HOST = os.getenv("RELISTIFY_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("RELISTIFY_API_PORT", "8000"))
LOG_LEVEL = os.getenv("RELISTIFY_LOG_LEVEL", "INFO").upper()
# After OAuth callback, redirect here (e.g. http://localhost:5173 for Vite dev)
RELISTIFY_WEB_ORIGIN = os.getenv("RELISTIFY_WEB_ORIGIN", "")

# Spotify (client credentials for reads, user OAuth for writes)
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "")
SPOTIFY_REDIRECT_URI = os.getenv("SPOTIFY_REDIRECT_URI", "http://localhost:8000/api/spotify/callback")
SPOTIFY_SCOPES = "playlist-modify-public playlist-modify-private user-read-private user-read-email"

# YouTube Data API v3 (Google OAuth web client; reads and writes need the user's token)
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
YOUTUBE_REDIRECT_URI = os.getenv("YOUTUBE_REDIRECT_URI", "http://localhost:8000/api/youtube/callback")
YOUTUBE_SCOPES = [
    "https://www.googleapis.com/auth/youtube",
    "https://www.googleapis.com/auth/youtube.force-ssl",
]
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
# include_granted_scopes may hand back a wider scope set; accept it instead of raising
os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")

# Conversion pacing (seconds) to stay under destination rate limits
SEARCH_DELAY_SEC = float(os.getenv("RELISTIFY_SEARCH_DELAY_SEC", "0.1"))
BATCH_DELAY_SEC = float(os.getenv("RELISTIFY_BATCH_DELAY_SEC", "0.2"))

# Token cookies: access 1 day (capped by token expiry), refresh 30 days
ACCESS_COOKIE_MAX_AGE = 24 * 60 * 60
REFRESH_COOKIE_MAX_AGE = 30 * 24 * 60 * 60
COOKIE_SECURE = os.getenv("RELISTIFY_COOKIE_SECURE", "0").lower() in ("1", "true", "yes")

# Finished conversions kept in memory for polling; oldest dropped first
MAX_FINISHED_JOBS = int(os.getenv("RELISTIFY_MAX_FINISHED_JOBS", "50"))


def require(platform_name: str, **values: str) -> None:
    """Raise ConfigurationError if any of the given settings is empty.

    Called before any network request so a missing credential never shows up
    as an upstream failure.
    """
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(platform_name, missing)
