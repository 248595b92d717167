"""Active keyspace resolution and table references on the cursor line."""

from __future__ import annotations

import re
from typing import NamedTuple, Optional, Sequence

USE_LINE_RE = re.compile(r"""^use\s*(["'])(\w+)\1;$""", re.IGNORECASE)
QUALIFIED_TABLE_RE = re.compile(r"""\bfrom\s+"?(\w+)"?\."?(\w+)"?""", re.IGNORECASE)
BARE_TABLE_RE = re.compile(r"""\bfrom\s+"?(\w+)"?(?![\w."])""", re.IGNORECASE)


class TableReference(NamedTuple):
    keyspace: Optional[str]
    table: str


def active_keyspace(lines: Sequence[str], line_index: int) -> Optional[str]:
    """Keyspace named by the last ``USE "<name>";`` strictly above *line_index*."""
    keyspace: Optional[str] = None
    for text in lines[: max(line_index, 0)]:
        match = USE_LINE_RE.match(text.strip())
        if match is not None:
            keyspace = match.group(2)
    return keyspace


def qualified_table_reference(line: str) -> Optional[TableReference]:
    """``from ks.table`` on *line*, if present."""
    match = QUALIFIED_TABLE_RE.search(line)
    if match is None:
        return None
    return TableReference(keyspace=match.group(1), table=match.group(2))


def bare_table_reference(line: str) -> Optional[str]:
    """The unqualified table name after ``from`` on *line*, if present."""
    match = BARE_TABLE_RE.search(line)
    if match is None:
        return None
    return match.group(1)


__all__ = [
    "TableReference",
    "active_keyspace",
    "qualified_table_reference",
    "bare_table_reference",
]
