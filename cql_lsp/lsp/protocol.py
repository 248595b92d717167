"""Shared protocol helpers for the CQL language server."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from ..schema.models import SchemaObjectKind


class ContextKind(Enum):
    """What the cursor is positioned on, as far as completion is concerned."""

    IN_STRING_LITERAL = auto()
    SUGGEST_KEYSPACE = auto()
    SUGGEST_GRAPH_ENGINE_TYPE = auto()
    SUGGEST_KEYWORDS = auto()
    SUGGEST_FIELDS = auto()
    SUGGEST_FROM = auto()
    SUGGEST_TABLE = auto()
    SUGGEST_IF_NOT_EXISTS = auto()
    SUGGEST_CREATE_KEYWORD = auto()
    SUGGEST_ALTER_KEYWORD = auto()
    SUGGEST_DROP_KEYWORD = auto()
    SUGGEST_DROP_OBJECT_NAME = auto()
    SUGGEST_COLUMN_TYPE = auto()
    SUGGEST_TYPE_MODIFIER = auto()
    NONE = auto()


@dataclass(frozen=True, slots=True)
class Context:
    """Result of classifying a cursor position.

    ``object_kind`` is only set for ``SUGGEST_DROP_OBJECT_NAME``.
    """

    kind: ContextKind
    object_kind: Optional[SchemaObjectKind] = None

    @classmethod
    def none(cls) -> "Context":
        return cls(ContextKind.NONE)

    @classmethod
    def drop_object(cls, object_kind: SchemaObjectKind) -> "Context":
        return cls(ContextKind.SUGGEST_DROP_OBJECT_NAME, object_kind)


@dataclass(slots=True)
class CompletionRequest:
    """A read-only snapshot of everything a completion strategy may look at."""

    uri: str
    lines: List[str]
    line_index: int
    character: int
    context: Context
    active_lines: List[str] = field(default_factory=list)

    @property
    def line(self) -> str:
        if 0 <= self.line_index < len(self.lines):
            return self.lines[self.line_index]
        return ""


__all__ = [
    "ContextKind",
    "Context",
    "CompletionRequest",
    "SchemaObjectKind",
]
