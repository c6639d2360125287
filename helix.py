"""Thin wrappers around the two Helix endpoints the viewer check needs.

Both lookups return ``None`` for an empty ``data`` list; that is a normal
answer (unknown login, channel offline), not a failure.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from config import Credentials, DEFAULT_TIMEOUT
from errors import HelixLookupError
from twitch_auth import AccessToken

logger = logging.getLogger(__name__)

HELIX_BASE = "https://api.twitch.tv/helix"
USERS_URL = f"{HELIX_BASE}/users"
STREAMS_URL = f"{HELIX_BASE}/streams"


@dataclass(frozen=True)
class UserRecord:
    id: str
    login: str
    display_name: str


@dataclass(frozen=True)
class StreamRecord:
    viewer_count: int


def _headers(credentials: Credentials, token: AccessToken) -> dict:
    return {
        "Client-ID": credentials.client_id,
        "Authorization": f"Bearer {token.access_token}",
    }


def _get_data(url: str, params: dict, credentials: Credentials, token: AccessToken,
              session=None, timeout: float = DEFAULT_TIMEOUT) -> list:
    http = session or requests
    try:
        resp = http.get(url, params=params, headers=_headers(credentials, token), timeout=timeout)
    except requests.RequestException as exc:
        raise HelixLookupError(f"Request to {url} failed: {exc}") from exc
    logger.debug(f"Helix API call {url}: status={resp.status_code}")
    try:
        resp.raise_for_status()
    except requests.HTTPError as exc:
        logger.error("Helix API error", extra={"url": url, "status_code": resp.status_code})
        raise HelixLookupError(
            f"{url} returned HTTP {resp.status_code}: {resp.text}",
            status_code=resp.status_code,
            body=resp.text,
        ) from exc
    try:
        payload = resp.json()
    except ValueError as exc:
        raise HelixLookupError(f"{url} returned invalid JSON", status_code=resp.status_code, body=resp.text) from exc
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        raise HelixLookupError(f"{url} response has no data list", status_code=resp.status_code, body=resp.text)
    return data


def get_user(credentials: Credentials, token: AccessToken, login: str, session=None,
             timeout: float = DEFAULT_TIMEOUT) -> Optional[UserRecord]:
    """Resolve a login name to a user record, or None if Twitch does not know it."""
    data = _get_data(USERS_URL, {"login": login}, credentials, token, session=session, timeout=timeout)
    if not data:
        logger.info("No Twitch user found", extra={"login": login})
        return None
    first = data[0]
    fields = [first.get(key) if isinstance(first, dict) else None for key in ("id", "login", "display_name")]
    if not all(isinstance(value, str) for value in fields) or not fields[0] or not fields[1]:
        raise HelixLookupError(f"Malformed user record for {login!r}: {first!r}")
    user = UserRecord(*fields)
    logger.info("Resolved Twitch user", extra={"login": user.login, "user_id": user.id})
    return user


def get_stream(credentials: Credentials, token: AccessToken, user_id: str, session=None,
               timeout: float = DEFAULT_TIMEOUT) -> Optional[StreamRecord]:
    """Return the live stream for ``user_id``, or None when the user is offline."""
    data = _get_data(STREAMS_URL, {"user_id": user_id}, credentials, token, session=session, timeout=timeout)
    if not data:
        logger.info("Stream is offline", extra={"user_id": user_id})
        return None
    first = data[0]
    viewer_count = first.get("viewer_count") if isinstance(first, dict) else None
    if isinstance(viewer_count, bool) or not isinstance(viewer_count, int) or viewer_count < 0:
        raise HelixLookupError(f"Malformed stream record for user {user_id}: {first!r}")
    logger.info("Stream is live", extra={"user_id": user_id, "viewer_count": viewer_count})
    return StreamRecord(viewer_count=viewer_count)
