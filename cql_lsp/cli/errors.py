"""
Error reporting for the cql-lsp command line.

Every command funnels unexpected failures through
:func:`handle_cli_exception`, which prints a single formatted message to
stderr and exits with a non-zero status.
"""

from __future__ import annotations

import os
import sys
import traceback

from ..errors import CqlLspError

# Maximum length for traceback output in CLI
_CLI_TRACE_LIMIT = 4000


def cli_verbose_enabled(flag: bool = False) -> bool:
    """Verbose output is on when requested or when CQL_LSP_VERBOSE is set."""
    if flag:
        return True
    return os.environ.get("CQL_LSP_VERBOSE", "").lower() in {"1", "true", "yes"}


def format_cli_error(exc: BaseException, *, include_traceback: bool = False) -> str:
    """
    Format exception for CLI display with its code and hint.

    Examples:
        >>> print(format_cli_error(CqlLspError("Invalid port", code="X", hint="Use 9042")))
        Error [X]: Invalid port
        Hint: Use 9042
    """
    if isinstance(exc, CqlLspError):
        message = exc.format()
    else:
        message = f"Error: {exc}"

    if include_traceback:
        trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        if len(trace) > _CLI_TRACE_LIMIT:
            trace = trace[-_CLI_TRACE_LIMIT:]
        message = f"{message}\n\n{trace.rstrip()}"
    return message


def handle_cli_exception(exc: BaseException, *, verbose: bool = False, exit_code: int = 1) -> None:
    """Print *exc* to stderr and exit. Does not return."""
    verbose_effective = cli_verbose_enabled(verbose)
    print(format_cli_error(exc, include_traceback=verbose_effective), file=sys.stderr)
    sys.exit(exit_code)


__all__ = ["cli_verbose_enabled", "format_cli_error", "handle_cli_exception"]
