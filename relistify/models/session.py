"""Per-platform OAuth session value."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class AuthSession:
    """Access token plus optional refresh token and expiry (UTC).

    A session read back from a cookie has no known expiry; the cookie's own
    max-age bounds it, so it counts as valid until the browser drops it.
    """
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def seconds_left(self, now: Optional[datetime] = None) -> Optional[int]:
        if self.expires_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return max(0, int((self.expires_at - now).total_seconds()))

    @classmethod
    def from_expires_in(
        cls,
        access_token: str,
        expires_in: Optional[int],
        refresh_token: Optional[str] = None,
    ) -> "AuthSession":
        expires_at = None
        if expires_in:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
        return cls(access_token=access_token, refresh_token=refresh_token, expires_at=expires_at)

    def to_dict(self) -> dict:
        return {
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "has_refresh_token": bool(self.refresh_token),
        }
