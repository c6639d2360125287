import os
from dataclasses import dataclass, field
from dotenv import find_dotenv, load_dotenv
import yaml

from errors import ConfigError

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Credentials:
    client_id: str
    client_secret: str = field(repr=False)


def load_config(path=None):
    # .env and config.yaml are looked up from the working directory, not the install location
    load_dotenv(find_dotenv(usecwd=True))
    path = path or os.path.join(os.getcwd(), "config.yaml")
    config = {}
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot load config file {path}: {exc}") from exc
        if not isinstance(config, dict):
            raise ConfigError(f"Config file {path} must contain a mapping at the top level")

    # override/add settings from environment variables when provided
    env_map = {
        'TWITCH_CLIENT_ID': ('twitch', 'client_id'),
        'TWITCH_CLIENT_SECRET': ('twitch', 'client_secret'),
        'TWITCH_STREAMER_LOGIN': ('twitch', 'streamer_login'),
        'TWITCH_HTTP_TIMEOUT': ('twitch', 'timeout'),
        'LOG_LEVEL': ('logging', 'level'),
        'LOG_DIR': ('logging', 'dir'),
    }

    for env_key, path_tuple in env_map.items():
        val = os.getenv(env_key)
        if val is None:
            continue
        # ensure nested dicts exist
        d = config
        for key in path_tuple[:-1]:
            d = d.setdefault(key, {})
        d[path_tuple[-1]] = val

    return config


def load_credentials(config) -> Credentials:
    """Build Credentials from the ``twitch`` section, or raise ConfigError."""
    twitch_cfg = config.get("twitch") or {}
    client_id = str(twitch_cfg.get("client_id") or "").strip()
    client_secret = str(twitch_cfg.get("client_secret") or "").strip()
    missing = [name for name, val in (("TWITCH_CLIENT_ID", client_id), ("TWITCH_CLIENT_SECRET", client_secret)) if not val]
    if missing:
        raise ConfigError(f"Missing Twitch credentials: {', '.join(missing)} (set them in .env or config.yaml)")
    return Credentials(client_id=client_id, client_secret=client_secret)


def get_timeout(config) -> float:
    raw = (config.get("twitch") or {}).get("timeout")
    if raw is None or raw == "":
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid HTTP timeout: {raw!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"HTTP timeout must be positive, got {raw!r}")
    return timeout
