"""Error taxonomy shared by platform clients, converter and API."""
from typing import Iterable, Optional


class RelistifyError(Exception):
    """Base error; carries the HTTP status the API answers with."""
    kind = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class ConfigurationError(RelistifyError):
    """A required credential or environment value is missing. Never retried."""
    kind = "configuration_error"
    status_code = 500

    def __init__(self, platform_name: str, missing: Iterable[str] = ()) -> None:
        super().__init__(f"{platform_name} credentials not configured")
        self.platform_name = platform_name
        self.missing = list(missing)

    def to_dict(self) -> dict:
        return {**super().to_dict(), "missing": self.missing}


class AuthError(RelistifyError):
    """No usable token, or the token exchange was rejected. Caller must re-authenticate."""
    kind = "auth_error"
    status_code = 401

    def __init__(self, message: str, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.reason = reason
        if reason == "invalid_grant":
            self.status_code = 400

    def to_dict(self) -> dict:
        return {**super().to_dict(), "reason": self.reason}


class UpstreamError(RelistifyError):
    """Non-success response from a platform API during playlist read or create."""
    kind = "upstream_error"
    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status

    def to_dict(self) -> dict:
        return {**super().to_dict(), "upstream_status": self.status}
