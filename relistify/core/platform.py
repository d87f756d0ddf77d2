"""Contract shared by the Spotify and YouTube Music clients."""
from abc import ABC, abstractmethod
from typing import List, Optional

from relistify.core.converter import ProgressCallback, convert_playlist
from relistify.core.errors import AuthError
from relistify.models.playlist import ConversionResult, Platform, PlaylistData, Track
from relistify.models.session import AuthSession


class PlatformClient(ABC):
    """One streaming platform: OAuth, playlist reads, and the primitives the converter writes with."""

    platform: Platform
    # Max items per playlist-add request
    batch_size: int = 1
    max_description_length: int = 5000
    description_separator: str = "\n\n"

    def __init__(self, session: Optional[AuthSession] = None) -> None:
        self.session = session

    def is_authenticated(self) -> bool:
        return self.session is not None and not self.session.is_expired()

    def require_session(self) -> AuthSession:
        if not self.is_authenticated():
            raise AuthError(
                f"Not authenticated with {self.platform.display_name}. Please log in again."
            )
        return self.session

    # OAuth

    @abstractmethod
    def get_auth_url(self) -> str:
        """Provider consent URL for the authorization-code flow."""

    @abstractmethod
    def exchange_code(self, code: str) -> AuthSession:
        """Redeem a one-time authorization code. Raises AuthError(reason="invalid_grant") on reuse/expiry."""

    @abstractmethod
    def refresh(self, refresh_token: str) -> AuthSession:
        """Get a fresh access token from a refresh token."""

    # Read path

    @abstractmethod
    def fetch_playlist(self, playlist_id: str) -> PlaylistData:
        ...

    # Write path primitives

    @abstractmethod
    def current_user_id(self) -> str:
        ...

    @abstractmethod
    def create_playlist(self, user_id: str, name: str, description: str) -> str:
        """Create a private playlist and return its id. Raises UpstreamError on failure."""

    @abstractmethod
    def search_track(self, track: Track, relaxed: bool = False) -> Optional[str]:
        """Return the destination id of the top hit, or None."""

    @abstractmethod
    def add_items(self, playlist_id: str, item_ids: List[str]) -> None:
        """Append one batch (at most batch_size ids)."""

    @abstractmethod
    def playlist_url(self, playlist_id: str) -> str:
        ...

    def create_and_populate_playlist(
        self,
        playlist: PlaylistData,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ConversionResult:
        """Recreate playlist on this platform. Every call creates a new playlist."""
        self.require_session()
        return convert_playlist(self, playlist, on_progress)
