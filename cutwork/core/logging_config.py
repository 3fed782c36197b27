"""
Logging configuration.

Console logging is always enabled; a rotating file handler is added when
``log_file`` is configured.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from cutwork.core.config import get_settings

MAX_BYTES = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_installed_handlers: list[logging.Handler] = []


def setup_logging(log_level: str | None = None, log_file: str | None = None) -> None:
    """
    Configure root logging.

    Args:
        log_level: Level name, defaults to the ``log_level`` setting.
        log_file: Optional log file path, defaults to the ``log_file`` setting.
    """
    settings = get_settings()
    level = logging.getLevelName((log_level or settings.log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO
    target_file = log_file if log_file is not None else settings.log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Only handlers installed here are replaced; handlers added by the host stay.
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    if target_file:
        path = Path(target_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(path),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root_logger.info("Logging initialized at level %s", logging.getLevelName(level))
