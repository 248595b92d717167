"""
Whole-document CQL formatter.

The formatter rewrites a document line by line through a fixed pipeline of
passes: whitespace and terminator clean-up, punctuation spacing, blank line
normalisation, terminator insertion and block indentation. It is used by the
``textDocument/formatting`` handler and by ``cql-lsp format``.
"""

from __future__ import annotations

from .core import CqlFormatter, FormatEdit, FormattedResult, FormattingOptions, IndentStyle
from .rules import DefaultFormattingRules

__all__ = [
    "CqlFormatter",
    "FormatEdit",
    "FormattedResult",
    "FormattingOptions",
    "IndentStyle",
    "DefaultFormattingRules",
]
