from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from modctl.core.utils.io import ensure_directory

LOGGER_NAME = "modctl"

_STREAM_HANDLER: logging.Handler | None = None
_FILE_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.WARNING


def _drop_handler(logger: logging.Logger, handler: logging.Handler | None) -> None:
    if handler is None:
        return
    logger.removeHandler(handler)
    handler.close()


def configure_logging(
    *,
    level: str = "WARNING",
    log_path: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the ``modctl`` logger for one CLI process.

    Installs a stderr handler at ``level`` and, when ``log_path`` is given, a
    file handler. Calling again replaces both, so repeated ``main()`` calls in
    one process do not stack handlers.
    """
    global _STREAM_HANDLER, _FILE_HANDLER

    logger = logging.getLogger(LOGGER_NAME)
    numeric = _level_from_name(level)
    logger.setLevel(numeric)
    logger.propagate = False

    _drop_handler(logger, _STREAM_HANDLER)
    _STREAM_HANDLER = logging.StreamHandler(stream or sys.stderr)
    _STREAM_HANDLER.setLevel(numeric)
    _STREAM_HANDLER.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(_STREAM_HANDLER)

    _drop_handler(logger, _FILE_HANDLER)
    _FILE_HANDLER = None
    if log_path is not None:
        ensure_directory(Path(log_path).parent)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(numeric)
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(fh)
        _FILE_HANDLER = fh

    return logger


def reset_logging_for_tests() -> None:
    """Test-only: remove handlers installed by :func:`configure_logging`."""
    global _STREAM_HANDLER, _FILE_HANDLER
    logger = logging.getLogger(LOGGER_NAME)
    _drop_handler(logger, _STREAM_HANDLER)
    _drop_handler(logger, _FILE_HANDLER)
    _STREAM_HANDLER = None
    _FILE_HANDLER = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


__all__ = ["LOGGER_NAME", "configure_logging", "reset_logging_for_tests"]
