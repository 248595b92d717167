"""
Main entry point for the cql-lsp CLI when run as a module.

This allows the CLI to be executed using:
    python -m cql_lsp.cli

or the equivalent ``cql-lsp`` console script.
"""

from . import main

if __name__ == '__main__':
    main()
