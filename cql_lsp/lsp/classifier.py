"""Cursor position classification.

:func:`classify` decides which completion strategy applies at a cursor by
looking only at raw line text. The rules are tried in a fixed order and the
first one that matches wins, because several of them overlap on real input
(a ``SELECT`` line can also look like the start of a keyword position).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..lang.keywords import IF_NOT_EXISTS_OBJECTS, STATEMENT_KEYWORDS, is_cql_type
from ..lang.scanner import (
    TERMINATOR,
    LineBuffer,
    code_text,
    find_block_opener,
    has_unclosed_bracket,
    in_comment,
    is_inside_bracket_block,
    line_starts_with_keyword,
    open_quote,
)
from ..schema.models import SchemaObjectKind
from .protocol import Context, ContextKind

logger = logging.getLogger(__name__)

IF_NOT_EXISTS = "if not exists"

USE_RE = re.compile(r"^\s*use(?!\w)", re.IGNORECASE)
GRAPH_ENGINE_RE = re.compile(r"\bgraph_engine\s*=\s*['\"]?\w*$", re.IGNORECASE)
DROP_OBJECT_RE = re.compile(
    r"^\s*drop\s+(keyspace|table|aggregate|function|index|type|materialized\s+view|view)\s+"
    r"(?:if\s+exists\s+)?\S*$",
    re.IGNORECASE,
)
CREATE_OBJECT_RE = re.compile(
    r"^\s*create\s+(?:or\s+replace\s+)?(?:custom\s+)?(?:"
    + "|".join(kind.replace(" ", r"\s+") for kind in IF_NOT_EXISTS_OBJECTS)
    + r")\s+",
    re.IGNORECASE,
)
COLUMN_BLOCK_RE = re.compile(r"^\s*create\s+(?:table|type)\b", re.IGNORECASE)
TABLE_POSITION_RES: Tuple[re.Pattern, ...] = (
    re.compile(r"^\s*insert\s+into\s+[\w.\"]*$", re.IGNORECASE),
    re.compile(r"^\s*update\s+[\w.\"]*$", re.IGNORECASE),
    re.compile(r"\bfrom\s+[\w.\"]*$", re.IGNORECASE),
    re.compile(r"^\s*truncate\s+(?:table\s+)?[\w.\"]*$", re.IGNORECASE),
)

# Tokens after which the cursor is inside a condition expression.
EXPRESSION_TOKENS = frozenset({
    "where", "and", "or", "=", "<", ">", "<=", ">=", "!=", "in", "contains",
})


@dataclass(frozen=True)
class Cursor:
    """The slice of the document a rule may look at."""

    lines: Sequence[str]
    index: int
    line: str
    prefix: str

    @property
    def tokens(self) -> List[str]:
        return self.prefix.lower().split()

    @property
    def trailing_space(self) -> bool:
        return bool(self.prefix) and self.prefix[-1].isspace()

    @property
    def last_complete_token(self) -> Optional[str]:
        tokens = self.tokens
        if self.trailing_space:
            return tokens[-1] if tokens else None
        return tokens[-2] if len(tokens) >= 2 else None

    @property
    def terminated(self) -> bool:
        return TERMINATOR in code_text(self.prefix)

    @property
    def commented(self) -> bool:
        return in_comment(self.prefix, self.index, self.lines)


Rule = Callable[[Cursor], Optional[Context]]


def classify(lines: Sequence[str], line_index: int, character: int) -> Context:
    """Return the completion context at ``(line_index, character)``.

    ``character`` is a UTF-16 offset. Positions outside the document or in
    the middle of a surrogate pair classify as ``NONE``.
    """
    if line_index < 0 or line_index >= len(lines):
        return Context.none()
    line = lines[line_index]
    prefix = LineBuffer(line).prefix(character)
    if prefix is None:
        return Context.none()

    cursor = Cursor(lines=lines, index=line_index, line=line, prefix=prefix)
    for rule in RULES:
        context = rule(cursor)
        if context is not None:
            logger.debug("Classified %d:%d as %s via %s", line_index, character, context.kind.name, rule.__name__)
            return context
    return Context.none()


# ----------------------------------------------------------------------
# Rules, in precedence order
# ----------------------------------------------------------------------
def string_literal(cursor: Cursor) -> Optional[Context]:
    if open_quote(cursor.prefix) is None:
        return None
    if USE_RE.match(cursor.prefix) and not cursor.terminated:
        return Context(ContextKind.SUGGEST_KEYSPACE)
    if GRAPH_ENGINE_RE.search(cursor.prefix):
        return Context(ContextKind.SUGGEST_GRAPH_ENGINE_TYPE)
    return Context(ContextKind.IN_STRING_LITERAL)


def use_statement(cursor: Cursor) -> Optional[Context]:
    if TERMINATOR in cursor.prefix:
        return None
    tokens = cursor.tokens
    if tokens and tokens[0] == "use":
        return Context(ContextKind.SUGGEST_KEYSPACE)
    return None


def drop_object_name(cursor: Cursor) -> Optional[Context]:
    if TERMINATOR in cursor.prefix:
        return None
    match = DROP_OBJECT_RE.match(cursor.prefix)
    if match is None:
        return None
    return Context.drop_object(SchemaObjectKind.from_keyword(match.group(1)))


def object_keyword(cursor: Cursor) -> Optional[Context]:
    tokens = cursor.tokens
    if not tokens:
        return None
    if len(tokens) > 2 or (len(tokens) == 2 and cursor.trailing_space):
        return None
    return {
        "create": Context(ContextKind.SUGGEST_CREATE_KEYWORD),
        "alter": Context(ContextKind.SUGGEST_ALTER_KEYWORD),
        "drop": Context(ContextKind.SUGGEST_DROP_KEYWORD),
    }.get(tokens[0])


def if_not_exists(cursor: Cursor) -> Optional[Context]:
    if if_not_exists_start(cursor.prefix) is None:
        return None
    return Context(ContextKind.SUGGEST_IF_NOT_EXISTS)


def column_definition(cursor: Cursor) -> Optional[Context]:
    if not in_column_block(cursor.line, cursor.index, cursor.lines):
        return None
    tokens = cursor.tokens
    count = len(tokens)
    if cursor.trailing_space:
        if count == 1:
            return Context(ContextKind.SUGGEST_COLUMN_TYPE)
        if count == 2 and is_cql_type(tokens[1]):
            return Context(ContextKind.SUGGEST_TYPE_MODIFIER)
        return None
    if count == 2:
        return Context(ContextKind.SUGGEST_COLUMN_TYPE)
    if count == 3 and is_cql_type(tokens[1]):
        return Context(ContextKind.SUGGEST_TYPE_MODIFIER)
    return None


def select_fields(cursor: Cursor) -> Optional[Context]:
    if cursor.commented:
        return None
    tokens = cursor.tokens
    if not _open_selector(tokens):
        return None
    if cursor.trailing_space:
        last = tokens[-1]
        if last == "select" or last.endswith(","):
            return Context(ContextKind.SUGGEST_FIELDS)
        if len(tokens) >= 2 and tokens[-2].endswith(","):
            return Context(ContextKind.SUGGEST_FIELDS)
        return None
    if len(tokens) >= 2 and (tokens[-2] == "select" or tokens[-2].endswith(",")):
        return Context(ContextKind.SUGGEST_FIELDS)
    return None


def select_from(cursor: Cursor) -> Optional[Context]:
    if cursor.commented:
        return None
    tokens = cursor.tokens
    if "select" not in tokens or "from" in tokens:
        return None
    previous = cursor.last_complete_token
    if previous is None or previous == "select" or previous.endswith(","):
        return None
    return Context(ContextKind.SUGGEST_FROM)


def table_name(cursor: Cursor) -> Optional[Context]:
    if cursor.terminated or cursor.commented:
        return None
    if any(pattern.search(cursor.prefix) for pattern in TABLE_POSITION_RES):
        return Context(ContextKind.SUGGEST_TABLE)
    return None


def graph_engine(cursor: Cursor) -> Optional[Context]:
    if GRAPH_ENGINE_RE.search(cursor.prefix):
        return Context(ContextKind.SUGGEST_GRAPH_ENGINE_TYPE)
    return None


def keywords(cursor: Cursor) -> Optional[Context]:
    if cursor.commented:
        return None
    if has_unclosed_bracket(cursor.prefix, cursor.index, cursor.lines):
        return None
    if cursor.last_complete_token in EXPRESSION_TOKENS:
        return None
    return Context(ContextKind.SUGGEST_KEYWORDS)


RULES: Tuple[Rule, ...] = (
    string_literal,
    use_statement,
    drop_object_name,
    object_keyword,
    if_not_exists,
    column_definition,
    select_fields,
    select_from,
    table_name,
    graph_engine,
    keywords,
)


# ----------------------------------------------------------------------
# Helpers shared with the completion dispatcher
# ----------------------------------------------------------------------
def if_not_exists_start(prefix: str) -> Optional[int]:
    """Index in *prefix* where a (partial) ``IF NOT EXISTS`` would begin."""
    match = CREATE_OBJECT_RE.match(prefix)
    if match is None:
        return None
    remainder = " ".join(prefix[match.end():].lower().split())
    if prefix[match.end():].endswith(" ") and remainder:
        remainder += " "
    if remainder == IF_NOT_EXISTS or not IF_NOT_EXISTS.startswith(remainder):
        return None
    return match.end()


def in_column_block(line: str, index: int, lines: Sequence[str]) -> bool:
    """True if *line* sits inside the column list of ``CREATE TABLE``/``CREATE TYPE``."""
    if not is_inside_bracket_block(line, index, lines):
        return False
    opener = find_block_opener(index, lines)
    if opener is None:
        return False
    for up in range(opener, -1, -1):
        text = lines[up]
        if COLUMN_BLOCK_RE.match(text):
            return True
        if line_starts_with_keyword(text, STATEMENT_KEYWORDS):
            return False
    return False


def _open_selector(tokens: Sequence[str]) -> bool:
    return "select" in tokens and "*" not in tokens and "from" not in tokens


__all__ = ["classify", "Cursor", "RULES", "if_not_exists_start", "in_column_block"]
