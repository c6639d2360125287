import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Optional

import requests

from config import load_config, load_credentials, get_timeout, Credentials, DEFAULT_TIMEOUT
from errors import ConfigError, TwitchError
from helix import get_user, get_stream, UserRecord, StreamRecord
from logger import setup_logging
from twitch_auth import get_app_access_token

logger = logging.getLogger(__name__)

DEFAULT_LOGIN = "vladtenten"


@dataclass(frozen=True)
class ViewerReport:
    login: str
    user: Optional[UserRecord] = None
    stream: Optional[StreamRecord] = None

    @property
    def is_live(self) -> bool:
        return self.stream is not None

    def format(self) -> str:
        if self.user is None:
            return f"User {self.login} not found"
        if self.stream is None:
            return f"User {self.user.login} is currently offline"
        return f"Viewer Count: {self.stream.viewer_count}"


def check_viewers(credentials: Credentials, login: str, session=None,
                  timeout: float = DEFAULT_TIMEOUT) -> ViewerReport:
    """Authenticate, resolve ``login`` and look up its live stream.

    Any failure propagates as a TwitchError; nothing is retried.
    """
    token = get_app_access_token(credentials, session=session, timeout=timeout)
    user = get_user(credentials, token, login, session=session, timeout=timeout)
    if user is None:
        return ViewerReport(login=login)
    stream = get_stream(credentials, token, user.id, session=session, timeout=timeout)
    return ViewerReport(login=login, user=user, stream=stream)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Report whether a Twitch user is live and how many viewers they have")
    p.add_argument("login", nargs="?", help="Twitch login to check (defaults to the configured streamer_login)")
    p.add_argument("--config", help="Path to config.yaml")
    p.add_argument("--log-level", help="Logging level (overrides LOG_LEVEL)")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config)
        log_cfg = config.get("logging") or {}
        try:
            setup_logging(level=args.log_level or log_cfg.get("level", "INFO"), log_dir=log_cfg.get("dir"))
        except OSError as exc:
            raise ConfigError(f"Cannot set up logging: {exc}") from exc
    except TwitchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    logger.info("Config loaded.")

    login = args.login or (config.get("twitch") or {}).get("streamer_login") or DEFAULT_LOGIN
    try:
        credentials = load_credentials(config)
        timeout = get_timeout(config)
        with requests.Session() as session:
            report = check_viewers(credentials, login, session=session, timeout=timeout)
    except TwitchError as exc:
        logger.error("Viewer check failed: %s", exc, extra={"login": login, "error": type(exc).__name__})
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(report.format())
    return 0


def cli():
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
