"""
Command line interface for cql-lsp.

Subcommands:
    lsp               run the language server over stdio
    format FILE       format a CQL file
    check-connection  report whether the configured database is reachable
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from cql_lsp import __version__

from .commands import cmd_check_connection, cmd_format, cmd_lsp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cql-lsp",
        description="Language server for CQL: completion and formatting",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", default=None, help="Path to a TOML file with a [cql-lsp] table")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=None,
        help="Log level (or set CQL_LSP_LOG_LEVEL)",
    )
    parser.add_argument("--log-file", default=None, help="Log file path (or set CQL_LSP_LOG_FILE)")
    parser.add_argument("--db-url", default=None, help="Database host[:port] (or set CQL_LSP_DB_URL)")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print full tracebacks on errors (or set CQL_LSP_VERBOSE=1)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    lsp_parser = subparsers.add_parser("lsp", help="Run the language server over stdio")
    lsp_parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not connect to a database; offer static completions only",
    )
    lsp_parser.set_defaults(func=cmd_lsp)

    format_parser = subparsers.add_parser("format", help="Format a CQL file")
    format_parser.add_argument("file", help="Path to the .cql file")
    mode = format_parser.add_mutually_exclusive_group()
    mode.add_argument("--check", action="store_true", help="Exit 1 if the file would be reformatted")
    mode.add_argument("--write", action="store_true", help="Rewrite the file in place")
    format_parser.set_defaults(func=cmd_format)

    check_parser = subparsers.add_parser("check-connection", help="Check that the database is reachable")
    check_parser.set_defaults(func=cmd_check_connection)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main CLI entrypoint.

    Examples:
        >>> main(['format', 'schema.cql', '--check'])  # doctest: +SKIP
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)
    args.func(args)


__all__ = ["main", "build_parser"]
