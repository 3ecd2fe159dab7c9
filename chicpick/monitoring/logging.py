"""Logging setup for the closet client."""

from __future__ import annotations

import logging
from pathlib import Path

from chicpick.config.settings import ClosetSettings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
STORAGE_LOGGER = "chicpick.storage"
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(settings: ClosetSettings | None = None) -> None:
    """Configure console logging and, if configured, the storage diagnostics file.

    Unreadable wardrobe documents and failed writes are reported on the
    ``chicpick.storage`` logger; with ``CHICPICK_LOG_FILE`` set they are also
    appended to that file so they survive the session.
    """

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # Request lines from the HTTP stack would otherwise flood INFO output.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if settings.log_file:
        path = Path(settings.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        storage_logger = logging.getLogger(STORAGE_LOGGER)
        if not any(
            isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == path.resolve()
            for handler in storage_logger.handlers
        ):
            handler = logging.FileHandler(path, encoding="utf-8")
            handler.setLevel(logging.WARNING)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            storage_logger.addHandler(handler)
