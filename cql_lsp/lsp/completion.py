"""Completion strategies keyed by classified context."""

from __future__ import annotations

import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    InsertTextFormat,
    Position,
    Range,
    TextEdit,
)

from ..lang.keywords import (
    ALTER_OBJECTS,
    COLLECTION_TYPES,
    COMMAND_SEQUENCES,
    CREATE_OBJECTS,
    DROP_OBJECTS,
    GRAPH_ENGINE_TYPES,
    KEYWORDS,
    NATIVE_FUNCTIONS,
    NATIVE_TYPES,
    TYPE_MODIFIERS,
)
from ..lang.scanner import LineBuffer, has_word, open_quote
from ..schema.models import SchemaObjectKind
from ..schema.provider import SchemaProvider
from .classifier import if_not_exists_start
from .protocol import CompletionRequest, ContextKind
from .scope import active_keyspace, bare_table_reference, qualified_table_reference

logger = logging.getLogger(__name__)

PARTIAL_NAME_RE = re.compile(r"[\w.\"]*$")
IDENTIFIER_CHARS = re.compile(r"\w")
FROM_RE = re.compile(r"\bfrom\b", re.IGNORECASE)

Strategy = Callable[[CompletionRequest], Awaitable[List[CompletionItem]]]


class CompletionProvider:
    """Turns a :class:`CompletionRequest` into completion items.

    Schema-backed strategies never raise: any failure of the schema provider
    is logged and treated as an empty result.
    """

    def __init__(self, schema: SchemaProvider) -> None:
        self.schema = schema
        self._strategies: Dict[ContextKind, Strategy] = {
            ContextKind.SUGGEST_KEYSPACE: self._keyspaces,
            ContextKind.SUGGEST_FIELDS: self._fields,
            ContextKind.SUGGEST_TABLE: self._tables,
            ContextKind.SUGGEST_DROP_OBJECT_NAME: self._drop_objects,
            ContextKind.SUGGEST_GRAPH_ENGINE_TYPE: self._graph_engines,
            ContextKind.SUGGEST_IF_NOT_EXISTS: self._if_not_exists,
        }
        self._static: Dict[ContextKind, Callable[[], List[CompletionItem]]] = {
            ContextKind.SUGGEST_KEYWORDS: keyword_items,
            ContextKind.SUGGEST_CREATE_KEYWORD: lambda: object_items(CREATE_OBJECTS),
            ContextKind.SUGGEST_ALTER_KEYWORD: lambda: object_items(ALTER_OBJECTS),
            ContextKind.SUGGEST_DROP_KEYWORD: lambda: object_items(DROP_OBJECTS),
            ContextKind.SUGGEST_COLUMN_TYPE: type_items,
            ContextKind.SUGGEST_TYPE_MODIFIER: modifier_items,
            ContextKind.SUGGEST_FROM: from_items,
        }

    async def complete(self, request: CompletionRequest) -> List[CompletionItem]:
        kind = request.context.kind
        static = self._static.get(kind)
        if static is not None:
            return static()
        strategy = self._strategies.get(kind)
        if strategy is None:
            return []
        return await strategy(request)

    # ------------------------------------------------------------------
    # Schema backed strategies
    # ------------------------------------------------------------------
    async def _keyspaces(self, request: CompletionRequest) -> List[CompletionItem]:
        keyspaces = await self._fetch("list_keyspaces", self.schema.list_keyspaces)
        cursor = _CursorText(request)
        quote = open_quote(cursor.prefix)
        if quote is None:
            return [
                CompletionItem(
                    label=keyspace.name,
                    kind=CompletionItemKind.Module,
                    detail="Keyspace",
                    insert_text=f'"{keyspace.name}";',
                )
                for keyspace in keyspaces
            ]

        start = cursor.prefix.rfind(quote) + 1
        typed = cursor.prefix[start:]
        line = cursor.line
        end = cursor.index
        while end < len(line) and IDENTIFIER_CHARS.match(line[end]):
            end += 1
        if end < len(line) and line[end] == quote:
            end += 1
        if end < len(line) and line[end] == ";":
            end += 1
        edit_range = cursor.range(start, end)
        return [
            CompletionItem(
                label=keyspace.name,
                kind=CompletionItemKind.Module,
                detail="Keyspace",
                filter_text=keyspace.name,
                text_edit=TextEdit(range=edit_range, new_text=f"{keyspace.name}{quote};"),
            )
            for keyspace in keyspaces
            if keyspace.name.startswith(typed)
        ]

    async def _fields(self, request: CompletionRequest) -> List[CompletionItem]:
        cursor = _CursorText(request)
        line = cursor.line
        keyspace = active_keyspace(request.active_lines, request.line_index)
        qualified = qualified_table_reference(line)
        if qualified is not None:
            columns = await self._fetch(
                "list_columns", self.schema.list_columns, qualified.keyspace, qualified.table
            )
        elif keyspace is not None:
            columns = await self._fetch(
                "list_columns", self.schema.list_columns, keyspace, bare_table_reference(line)
            )
        else:
            columns = await self._fetch("list_columns_global", self.schema.list_columns_global)

        completes_statement = should_edit(line)
        start = cursor.partial_start()
        items: List[CompletionItem] = []
        for column in columns:
            if has_word(cursor.prefix, column.name.lower()):
                continue
            text_edit = None
            if completes_statement:
                table = column.table if column.keyspace == keyspace else column.qualified_table
                text_edit = TextEdit(
                    range=cursor.range(start, len(line)),
                    new_text=f"{column.name} FROM {table};",
                )
            items.append(
                CompletionItem(
                    label=column.name,
                    kind=CompletionItemKind.Field,
                    detail=f"{column.type} ({column.qualified_table})",
                    text_edit=text_edit,
                )
            )

        items.extend(
            CompletionItem(
                label=name,
                kind=CompletionItemKind.Function,
                detail="Native function",
                insert_text=f"{name}($1)",
                insert_text_format=InsertTextFormat.Snippet,
            )
            for name in NATIVE_FUNCTIONS
        )
        return items

    async def _tables(self, request: CompletionRequest) -> List[CompletionItem]:
        cursor = _CursorText(request)
        edit_range = cursor.range(cursor.partial_start(), cursor.index)
        keyspace = active_keyspace(request.active_lines, request.line_index)

        items: List[CompletionItem] = []
        if keyspace is not None:
            for table in await self._fetch("list_tables", self.schema.list_tables, keyspace):
                items.append(
                    CompletionItem(
                        label=table.name,
                        kind=CompletionItemKind.Struct,
                        detail=f"Table in {keyspace}",
                        sort_text=f"0_{table.name.lower()}",
                        text_edit=TextEdit(range=edit_range, new_text=table.name),
                    )
                )
        for table in await self._fetch("list_tables_global", self.schema.list_tables_global):
            items.append(
                CompletionItem(
                    label=table.qualified_name,
                    kind=CompletionItemKind.Struct,
                    detail="Table",
                    sort_text=f"1_{table.qualified_name.lower()}",
                    text_edit=TextEdit(range=edit_range, new_text=table.qualified_name),
                )
            )
        return items

    async def _drop_objects(self, request: CompletionRequest) -> List[CompletionItem]:
        object_kind = request.context.object_kind or SchemaObjectKind.TABLE
        objects = await self._fetch("list_objects", self.schema.list_objects, object_kind)
        cursor = _CursorText(request)
        edit_range = cursor.range(cursor.prefix.rfind(" ") + 1, len(cursor.line))
        return [
            CompletionItem(
                label=obj.qualified_name,
                kind=_DROP_ITEM_KINDS.get(object_kind, CompletionItemKind.Struct),
                detail=object_kind.value.title(),
                text_edit=TextEdit(range=edit_range, new_text=f"{obj.qualified_name};"),
            )
            for obj in objects
        ]

    # ------------------------------------------------------------------
    # Literal value strategies
    # ------------------------------------------------------------------
    async def _graph_engines(self, request: CompletionRequest) -> List[CompletionItem]:
        cursor = _CursorText(request)
        in_literal = open_quote(cursor.prefix) is not None
        return [
            CompletionItem(
                label=name,
                kind=CompletionItemKind.EnumMember,
                detail="Graph engine",
                insert_text=name if in_literal else f"'{name}'",
            )
            for name in GRAPH_ENGINE_TYPES
        ]

    async def _if_not_exists(self, request: CompletionRequest) -> List[CompletionItem]:
        cursor = _CursorText(request)
        start = if_not_exists_start(cursor.prefix)
        if start is None:
            return []
        return [
            CompletionItem(
                label="IF NOT EXISTS",
                kind=CompletionItemKind.Keyword,
                text_edit=TextEdit(range=cursor.range(start, cursor.index), new_text="IF NOT EXISTS "),
            )
        ]

    async def _fetch(self, operation: str, call: Callable[..., Awaitable[Sequence[Any]]], *args: Any) -> List[Any]:
        try:
            return list(await call(*args))
        except Exception:
            logger.warning("Schema lookup %s failed; continuing without results", operation, exc_info=True)
            return []


_DROP_ITEM_KINDS = {
    SchemaObjectKind.KEYSPACE: CompletionItemKind.Module,
    SchemaObjectKind.TABLE: CompletionItemKind.Struct,
    SchemaObjectKind.VIEW: CompletionItemKind.Struct,
    SchemaObjectKind.TYPE: CompletionItemKind.TypeParameter,
    SchemaObjectKind.FUNCTION: CompletionItemKind.Function,
    SchemaObjectKind.AGGREGATE: CompletionItemKind.Function,
    SchemaObjectKind.INDEX: CompletionItemKind.Reference,
}


class _CursorText:
    """Cursor line helpers working in code points, emitting UTF-16 ranges."""

    def __init__(self, request: CompletionRequest) -> None:
        self.line = request.line
        self.line_index = request.line_index
        self.buffer = LineBuffer(self.line)
        index = self.buffer.index_at(request.character)
        self.index = len(self.line) if index is None else index
        self.prefix = self.line[: self.index]

    def partial_start(self) -> int:
        match = PARTIAL_NAME_RE.search(self.prefix)
        return match.start() if match else self.index

    def range(self, start: int, end: int) -> Range:
        return Range(
            start=Position(line=self.line_index, character=self.buffer.character_at(start)),
            end=Position(line=self.line_index, character=self.buffer.character_at(end)),
        )


def should_edit(line: str) -> bool:
    """True when choosing a field should also complete ``FROM <table>;``."""
    matches = list(FROM_RE.finditer(line))
    if not matches:
        return True
    tail = line[matches[-1].end():]
    return not any(ch.isalpha() for ch in tail)


# ----------------------------------------------------------------------
# Static item tables
# ----------------------------------------------------------------------
def keyword_items() -> List[CompletionItem]:
    items = [
        CompletionItem(label=keyword, kind=CompletionItemKind.Keyword, detail="Keyword", insert_text=keyword)
        for keyword in KEYWORDS
    ]
    items.extend(
        CompletionItem(
            label=sequence.label,
            kind=CompletionItemKind.Snippet,
            detail=sequence.detail,
            insert_text=sequence.snippet,
            insert_text_format=InsertTextFormat.Snippet,
            sort_text=f"2_{sequence.label.lower()}",
        )
        for sequence in COMMAND_SEQUENCES
    )
    return items


def object_items(objects: Sequence[str]) -> List[CompletionItem]:
    return [
        CompletionItem(label=name, kind=CompletionItemKind.Keyword, insert_text=name)
        for name in objects
    ]


def type_items() -> List[CompletionItem]:
    items = [
        CompletionItem(label=name, kind=CompletionItemKind.TypeParameter, detail="Native type")
        for name in sorted(NATIVE_TYPES)
    ]
    items.extend(
        CompletionItem(
            label=name,
            kind=CompletionItemKind.TypeParameter,
            detail="Collection type",
            insert_text=snippet,
            insert_text_format=InsertTextFormat.Snippet,
        )
        for name, snippet in COLLECTION_TYPES
    )
    return items


def modifier_items() -> List[CompletionItem]:
    return [
        CompletionItem(label=modifier, kind=CompletionItemKind.Keyword, detail="Column modifier")
        for modifier in TYPE_MODIFIERS
    ]


def from_items() -> List[CompletionItem]:
    return [CompletionItem(label="FROM", kind=CompletionItemKind.Keyword, insert_text="FROM ")]


__all__ = [
    "CompletionProvider",
    "should_edit",
    "keyword_items",
    "object_items",
    "type_items",
    "modifier_items",
    "from_items",
]
