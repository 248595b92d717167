"""Command implementations for the cql-lsp CLI."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from ..config import ServerSettings, load_settings
from ..errors import CqlLspError, DocumentNotFoundError
from ..formatting import CqlFormatter, DefaultFormattingRules
from ..observability import configure_logging
from ..schema.provider import CassandraSchemaProvider
from .errors import handle_cli_exception


def resolve_settings(args: argparse.Namespace) -> ServerSettings:
    """Settings from config file and environment, overridden by CLI flags."""
    config_path = Path(args.config) if getattr(args, "config", None) else None
    settings = load_settings(config_path=config_path)
    return settings.with_overrides(
        log_level=getattr(args, "log_level", None),
        log_file=getattr(args, "log_file", None),
        db_url=getattr(args, "db_url", None),
    )


def cmd_lsp(args: argparse.Namespace) -> None:
    """
    Handle the 'lsp' subcommand: serve the language server over stdio.

    With ``--offline`` no database connection is attempted and only static
    completions are offered.
    """
    try:
        from ..lsp.server import create_server

        settings = resolve_settings(args)
        configure_logging(settings)
        server = create_server(settings, offline=args.offline)
        print(f"Starting cql-lsp (pid={os.getpid()})", file=sys.stderr)
        try:
            server.start_io()
        except KeyboardInterrupt:
            print("Language server interrupted by user.", file=sys.stderr)
    except Exception as exc:
        handle_cli_exception(exc, verbose=getattr(args, "verbose", False))


def cmd_format(args: argparse.Namespace) -> None:
    """
    Handle the 'format' subcommand.

    Prints the formatted document to stdout unless ``--write`` (rewrite the
    file in place) or ``--check`` (exit 1 when the file would change) is given.
    """
    try:
        settings = resolve_settings(args)
        path = Path(args.file)
        if not path.is_file():
            raise DocumentNotFoundError(f"File not found: {path}", hint="Pass the path of a .cql file")

        formatter = CqlFormatter(DefaultFormattingRules.with_indent(settings.indent_size))
        content = path.read_text(encoding="utf-8")
        result = formatter.format_document(content)

        if args.check:
            if result.is_changed:
                print(f"Would reformat {path}")
                raise SystemExit(1)
            print(f"{path} is already formatted")
            return
        if args.write:
            if result.is_changed:
                path.write_text(result.formatted_text, encoding="utf-8")
                print(f"Formatted {path}")
            else:
                print(f"{path} is already formatted")
            return
        sys.stdout.write(result.formatted_text)
        if not result.formatted_text.endswith("\n"):
            sys.stdout.write("\n")
    except (CqlLspError, OSError) as exc:
        handle_cli_exception(exc, verbose=getattr(args, "verbose", False))


def cmd_check_connection(args: argparse.Namespace) -> None:
    """Handle the 'check-connection' subcommand."""
    try:
        settings = resolve_settings(args)
        provider = CassandraSchemaProvider(settings)
        if asyncio.run(provider.check_connection()):
            print(f"Connected to {settings.db_url}")
            return
        print(f"Cannot connect to {settings.db_url}", file=sys.stderr)
        raise SystemExit(1)
    except CqlLspError as exc:
        handle_cli_exception(exc, verbose=getattr(args, "verbose", False))


__all__ = ["cmd_lsp", "cmd_format", "cmd_check_connection", "resolve_settings"]
