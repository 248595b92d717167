"""Centralised logging helpers for the CQL language server."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

from ..config import ServerSettings

ROOT_LOGGER = "cql_lsp"
LOG_FORMAT = "[%(asctime)s %(levelname)s %(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LOGGER_CACHE: Dict[str, logging.Logger] = {}
_HANDLER_MARK = "_cql_lsp_handler"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return a cached :class:`logging.Logger` instance."""

    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = logging.getLogger(name)
    return _LOGGER_CACHE[name]


def configure_logging(settings: ServerSettings, *, log_file: Optional[Path] = None) -> logging.Logger:
    """Attach the file and stderr sinks to the package logger.

    Stdout carries the protocol stream, so nothing is ever logged there.
    Calling this again replaces the handlers installed by a previous call.
    """

    logger = get_logger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stderr)]

    target = log_file or settings.log_file
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(target, encoding="utf-8"))
    except OSError as exc:
        logger.warning("Cannot open log file %s: %s", target, exc)

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        logger.addHandler(handler)

    logger.setLevel(logging.getLevelNamesMapping().get(settings.log_level, logging.INFO))
    logger.propagate = False
    return logger


__all__ = ["get_logger", "configure_logging", "LOG_FORMAT", "DATE_FORMAT"]
