from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .settings import log_dir as _default_log_dir
from .settings import log_level

LOGGER_NAME = "csvapi"
LOG_FILE = "app.log"
MAX_BYTES = 2 * 1024 * 1024
BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOGGER: logging.Logger | None = None


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the shared ``csvapi`` logger, configuring it on first use.

    Writes to ``<log dir>/app.log`` (rotated) and mirrors to stdout.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level())
    logger.propagate = False

    if not logger.handlers:
        base = Path(log_dir) if log_dir is not None else _default_log_dir()
        base.mkdir(parents=True, exist_ok=True)
        fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

        file_handler = RotatingFileHandler(
            base / LOG_FILE,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(fmt)
        logger.addHandler(console)

    _LOGGER = logger
    return logger


__all__ = ["LOGGER_NAME", "get_logger"]
