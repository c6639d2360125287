from typing import Optional


class TwitchError(Exception):
    """Base class for every failure that aborts a viewer check."""


class ConfigError(TwitchError):
    """Credentials or settings are missing or unreadable."""


class _HttpFailure(TwitchError):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthError(_HttpFailure):
    """Token request failed or returned something that is not a token."""


class HelixLookupError(_HttpFailure, LookupError):
    """User or stream lookup against the Helix API failed."""
