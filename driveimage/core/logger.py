from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .profiles import _work_dir

LOGGER_NAME = "driveimage"
LOG_LEVEL_ENV = "DRIVEIMAGE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOGGER: logging.Logger | None = None


def _parse_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value}")
    return level


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the shared ``driveimage`` logger.

    First use attaches a rotating file handler (``<work>/logs/app.log``) and a
    stderr handler so command output on stdout stays clean. The starting level
    comes from ``DRIVEIMAGE_LOG_LEVEL`` (default INFO).
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    base = Path(log_dir) if log_dir is not None else _work_dir() / "logs"
    base.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_parse_level(os.getenv(LOG_LEVEL_ENV) or "INFO"))
    logger.propagate = False

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(
        base / "app.log", maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    logger.addHandler(console)

    _LOGGER = logger
    return logger


def set_level(level: str) -> logging.Logger:
    """Apply a level name such as ``DEBUG`` to the shared logger.

    Raises:
        ValueError: The name is not a logging level.
    """

    logger = get_logger()
    logger.setLevel(_parse_level(level))
    return logger
