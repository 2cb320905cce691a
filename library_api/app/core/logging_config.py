"""
Logging configuration for the library service.

``setup_logging`` applies the requested level to the ``library_api``
loggers only.  The root logger stays at ``WARNING`` so request logs
from uvicorn and the HTTP client used by the test suite do not drown
out loan and notification messages.  An optional log file rotates once
it reaches ``LOG_MAX_BYTES``.

Handlers are tagged by name, so calling ``setup_logging`` again (tests,
repeated ``create_app`` calls) adjusts the level without duplicating
output.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

APP_LOGGER = "library_api"
CONSOLE_HANDLER = "library_api.console"
FILE_HANDLER = "library_api.file"

LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3


def _has_handler(logger: logging.Logger, name: str) -> bool:
    return any(handler.get_name() == name for handler in logger.handlers)


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> logging.Logger:
    """Configure logging for the application and return its logger.

    Parameters
    ----------
    level : str
        Level name for the ``library_api`` loggers (e.g. ``"DEBUG"``).
        Case insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path of a rotating log file.  If omitted, only the console
        handler is attached.
    """
    root = logging.getLogger()
    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if not _has_handler(root, CONSOLE_HANDLER):
        root.setLevel(logging.WARNING)
        console_handler = logging.StreamHandler()
        console_handler.set_name(CONSOLE_HANDLER)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    if logfile and not _has_handler(root, FILE_HANDLER):
        file_handler = RotatingFileHandler(
            Path(logfile).resolve(),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.set_name(FILE_HANDLER)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return app_logger
