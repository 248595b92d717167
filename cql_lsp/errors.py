"""Unified error model for the CQL language server."""

from __future__ import annotations

from typing import Optional


class CqlLspError(Exception):
    """Base class for errors raised by the language server and its CLI."""

    code: Optional[str] = "CQL_LSP_ERROR"
    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if hint is not None:
            self.hint = hint

    def format(self) -> str:
        head = f"Error [{self.code}]: {self.message}" if self.code else f"Error: {self.message}"
        if self.hint:
            return f"{head}\nHint: {self.hint}"
        return head


class ConfigurationError(CqlLspError):
    """Raised when settings from the environment or a config file are invalid."""

    code = "CQL_LSP_CONFIG_ERROR"


class SchemaProviderError(CqlLspError):
    """Raised when a schema lookup against the database fails."""

    code = "CQL_LSP_SCHEMA_ERROR"

    def __init__(self, message: str, *, operation: str, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.operation = operation


class DocumentNotFoundError(CqlLspError):
    """Raised when a file handed to the CLI does not exist."""

    code = "CQL_LSP_FILE_NOT_FOUND"


__all__ = [
    "CqlLspError",
    "ConfigurationError",
    "SchemaProviderError",
    "DocumentNotFoundError",
]
