from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "stratum"
FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_STREAM_HANDLER: logging.Handler | None = None
_FILE_HANDLER: logging.Handler | None = None
_CONFIGURED_LOG_PATH: str | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: str = "WARNING", log_path: Optional[Path] = None) -> logging.Logger:
    """Send ``stratum.*`` log records to stderr and, optionally, to a file.

    Idempotent per-process: calling again adjusts the level and swaps the
    file handler when ``log_path`` changes, without stacking handlers.
    """
    global _STREAM_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH

    logger = logging.getLogger(LOGGER_NAME)
    lvl = _level_from_name(level)
    logger.setLevel(lvl)

    if _STREAM_HANDLER is None:
        _STREAM_HANDLER = logging.StreamHandler(sys.stderr)
        _STREAM_HANDLER.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(_STREAM_HANDLER)
    _STREAM_HANDLER.setLevel(lvl)

    resolved = str(Path(log_path).resolve()) if log_path is not None else None
    if resolved != _CONFIGURED_LOG_PATH and _FILE_HANDLER is not None:
        logger.removeHandler(_FILE_HANDLER)
        _FILE_HANDLER.close()
        _FILE_HANDLER = None
    if resolved is not None and _FILE_HANDLER is None:
        Path(resolved).parent.mkdir(parents=True, exist_ok=True)
        _FILE_HANDLER = logging.FileHandler(resolved, encoding="utf-8")
        _FILE_HANDLER.setFormatter(logging.Formatter(FORMAT))
        logger.addHandler(_FILE_HANDLER)
    if _FILE_HANDLER is not None:
        _FILE_HANDLER.setLevel(lvl)
    _CONFIGURED_LOG_PATH = resolved
    return logger


def reset_logging_for_tests() -> None:
    """Test-only: remove the handlers installed by configure_logging."""
    global _STREAM_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH
    logger = logging.getLogger(LOGGER_NAME)
    for h in (_STREAM_HANDLER, _FILE_HANDLER):
        if h is not None:
            logger.removeHandler(h)
            h.close()
    _STREAM_HANDLER = None
    _FILE_HANDLER = None
    _CONFIGURED_LOG_PATH = None
    logger.setLevel(logging.NOTSET)


__all__ = ["configure_logging", "reset_logging_for_tests", "LOGGER_NAME"]
