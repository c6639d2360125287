import logging
import os
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger

LOG_FILE_NAME = "twitch_viewers.log"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _json_file_handler(log_file: str, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
    return handler


def _has_file_handler(root: logging.Logger, log_file: str) -> bool:
    return any(isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(log_file)
               for h in root.handlers)


def _has_console_handler(root: logging.Logger) -> bool:
    # file handlers subclass StreamHandler, so compare the exact type
    return any(type(h) is logging.StreamHandler for h in root.handlers)


def setup_logging(level: str = "INFO", log_dir: str = None) -> logging.Logger:
    """Send logs to stderr and to a rotating JSON-lines file.

    ``log_dir`` defaults to ``./logs`` under the working directory. Raises
    OSError when the directory cannot be created or the file opened.
    """
    log_dir = log_dir or os.path.join(os.getcwd(), "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, LOG_FILE_NAME)
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)

    if not _has_file_handler(root, log_file):
        root.addHandler(_json_file_handler(log_file, log_level))
    if not _has_console_handler(root):
        console = logging.StreamHandler()
        console.setLevel(log_level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root.addHandler(console)

    root.debug("Logging initialized. File: %s", log_file)
    return root
