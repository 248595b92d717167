"""Logging setup for the language server process."""

from .logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
