import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Union

import requests

from config import Credentials, DEFAULT_TIMEOUT
from errors import AuthError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://id.twitch.tv/oauth2/token"


@dataclass(frozen=True)
class AccessToken:
    """Bearer token issued by the Twitch OAuth endpoint."""
    access_token: str = field(repr=False)
    expires_in: int
    created_at: int
    refresh_token: Optional[str] = field(default=None, repr=False)
    scope: Optional[Union[str, list]] = None
    token_type: Optional[str] = None

    @property
    def expires_at(self) -> int:
        return self.created_at + self.expires_in

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return now >= self.expires_at


def _parse_token(payload, now: float, fallback_refresh_token: Optional[str] = None) -> AccessToken:
    if not isinstance(payload, dict):
        raise AuthError("Token response is not a JSON object")
    access_token = payload.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise AuthError("Token response has no access_token")
    expires_in = payload.get("expires_in", 0)
    if isinstance(expires_in, bool) or not isinstance(expires_in, int) or expires_in < 0:
        raise AuthError(f"Token response has invalid expires_in: {expires_in!r}")
    created_at = payload.get("created_at")
    if isinstance(created_at, bool) or not isinstance(created_at, int):
        # Twitch does not send created_at; stamp it locally
        created_at = int(now)
    return AccessToken(
        access_token=access_token,
        expires_in=expires_in,
        created_at=created_at,
        refresh_token=payload.get("refresh_token") or fallback_refresh_token,
        scope=payload.get("scope"),
        token_type=payload.get("token_type"),
    )


def _request_token(data: dict, session=None, timeout: float = DEFAULT_TIMEOUT):
    http = session or requests
    try:
        resp = http.post(TOKEN_URL, data=data, timeout=timeout)
    except requests.RequestException as exc:
        raise AuthError(f"Token request failed: {exc}") from exc
    try:
        resp.raise_for_status()
    except requests.HTTPError as exc:
        logger.error("Token endpoint returned an error", extra={"status_code": resp.status_code})
        raise AuthError(
            f"Token endpoint returned HTTP {resp.status_code}: {resp.text}",
            status_code=resp.status_code,
            body=resp.text,
        ) from exc
    try:
        return resp.json()
    except ValueError as exc:
        raise AuthError("Token response is not valid JSON", status_code=resp.status_code, body=resp.text) from exc


def get_app_access_token(credentials: Credentials, session=None, timeout: float = DEFAULT_TIMEOUT,
                         now: Optional[float] = None) -> AccessToken:
    """Obtain an app access token with the client-credentials grant."""
    payload = _request_token({
        "grant_type": "client_credentials",
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
    }, session=session, timeout=timeout)
    token = _parse_token(payload, time.time() if now is None else now)
    logger.info("Twitch app access token acquired", extra={"expires_in": token.expires_in})
    return token


def refresh_access_token(credentials: Credentials, refresh_token: str, session=None,
                         timeout: float = DEFAULT_TIMEOUT, now: Optional[float] = None) -> AccessToken:
    """Refresh an access token using a refresh token."""
    payload = _request_token({
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
    }, session=session, timeout=timeout)
    token = _parse_token(payload, time.time() if now is None else now, fallback_refresh_token=refresh_token)
    logger.info("Twitch access token refreshed", extra={"expires_in": token.expires_in})
    return token


def refresh_if_expired(credentials: Credentials, token: AccessToken, session=None,
                       timeout: float = DEFAULT_TIMEOUT, now: Optional[float] = None) -> AccessToken:
    """Return ``token`` untouched while it is still valid, otherwise a refreshed one.

    Not used by the viewer check itself; callers that hold a token across
    several checks can call it before each one.
    """
    now = time.time() if now is None else now
    if not token.is_expired(now):
        return token
    if not token.refresh_token:
        raise AuthError("Access token expired and no refresh token is available")
    logger.debug("Access token expired at %d, refreshing", token.expires_at)
    return refresh_access_token(credentials, token.refresh_token, session=session, timeout=timeout, now=now)
