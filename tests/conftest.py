from __future__ import annotations

from typing import List, Optional, Sequence

import pytest
from lsprotocol.types import (
    CompletionList,
    CompletionParams,
    Position,
    TextDocumentIdentifier,
    TextDocumentItem,
)

from cql_lsp.lsp.workspace import CqlWorkspace
from cql_lsp.schema.models import (
    Aggregate,
    Column,
    Function,
    Index,
    Keyspace,
    Table,
    UserType,
    View,
)
from cql_lsp.schema.provider import SchemaProvider

DEFAULT_URI = "file:///tmp/queries.cql"


class FakeSchemaProvider(SchemaProvider):
    """In-memory schema; records every call it receives."""

    def __init__(
        self,
        *,
        keyspaces: Sequence[str] = (),
        tables: Sequence[Table] = (),
        columns: Sequence[Column] = (),
        indexes: Sequence[Index] = (),
        types: Sequence[UserType] = (),
        functions: Sequence[Function] = (),
        aggregates: Sequence[Aggregate] = (),
        views: Sequence[View] = (),
    ) -> None:
        self.keyspaces = [Keyspace(name) for name in keyspaces]
        self.tables = list(tables)
        self.columns = list(columns)
        self.indexes = list(indexes)
        self.types = list(types)
        self.functions = list(functions)
        self.aggregates = list(aggregates)
        self.views = list(views)
        self.calls: List[tuple] = []

    async def list_keyspaces(self) -> List[Keyspace]:
        self.calls.append(("list_keyspaces",))
        return list(self.keyspaces)

    async def list_tables_global(self) -> List[Table]:
        self.calls.append(("list_tables_global",))
        return list(self.tables)

    async def list_tables(self, keyspace: str) -> List[Table]:
        self.calls.append(("list_tables", keyspace))
        return [table for table in self.tables if table.keyspace == keyspace]

    async def list_columns_global(self) -> List[Column]:
        self.calls.append(("list_columns_global",))
        return list(self.columns)

    async def list_columns(self, keyspace: str, table: Optional[str] = None) -> List[Column]:
        self.calls.append(("list_columns", keyspace, table))
        return [
            column
            for column in self.columns
            if column.keyspace == keyspace and (table is None or column.table == table)
        ]

    async def list_indexes(self) -> List[Index]:
        return list(self.indexes)

    async def list_types(self) -> List[UserType]:
        return list(self.types)

    async def list_functions(self) -> List[Function]:
        return list(self.functions)

    async def list_aggregates(self) -> List[Aggregate]:
        return list(self.aggregates)

    async def list_views(self) -> List[View]:
        return list(self.views)


class FailingSchemaProvider(FakeSchemaProvider):
    """Every lookup raises, as a broken third-party provider would."""

    async def list_keyspaces(self) -> List[Keyspace]:
        raise RuntimeError("connection refused")

    async def list_tables_global(self) -> List[Table]:
        raise RuntimeError("connection refused")

    async def list_tables(self, keyspace: str) -> List[Table]:
        raise RuntimeError("connection refused")

    async def list_columns_global(self) -> List[Column]:
        raise RuntimeError("connection refused")

    async def list_columns(self, keyspace: str, table: Optional[str] = None) -> List[Column]:
        raise RuntimeError("connection refused")

    async def list_indexes(self) -> List[Index]:
        raise RuntimeError("connection refused")

    async def list_types(self) -> List[UserType]:
        raise RuntimeError("connection refused")

    async def list_functions(self) -> List[Function]:
        raise RuntimeError("connection refused")

    async def list_aggregates(self) -> List[Aggregate]:
        raise RuntimeError("connection refused")

    async def list_views(self) -> List[View]:
        raise RuntimeError("connection refused")


@pytest.fixture()
def schema() -> FakeSchemaProvider:
    return FakeSchemaProvider(
        keyspaces=["shop", "analytics"],
        tables=[
            Table(keyspace="shop", name="orders"),
            Table(keyspace="shop", name="customers"),
            Table(keyspace="analytics", name="events"),
        ],
        columns=[
            Column(keyspace="shop", table="orders", name="id", type="uuid"),
            Column(keyspace="shop", table="orders", name="total", type="decimal"),
            Column(keyspace="shop", table="customers", name="email", type="text"),
            Column(keyspace="analytics", table="events", name="kind", type="text"),
        ],
    )


@pytest.fixture()
def workspace(schema: FakeSchemaProvider) -> CqlWorkspace:
    return CqlWorkspace(schema)


async def open_document(
    workspace: CqlWorkspace,
    text: str,
    *,
    uri: str = DEFAULT_URI,
    version: int = 1,
) -> TextDocumentItem:
    item = TextDocumentItem(uri=uri, language_id="cql", version=version, text=text)
    await workspace.did_open(item)
    return item


async def complete_at(
    workspace: CqlWorkspace,
    item: TextDocumentItem,
    line: int,
    character: Optional[int] = None,
) -> CompletionList:
    """Request completion at ``(line, character)``; the default is end of line."""
    if character is None:
        character = len(item.text.split("\n")[line])
    params = CompletionParams(
        text_document=TextDocumentIdentifier(uri=item.uri),
        position=Position(line=line, character=character),
    )
    return await workspace.completion(params)


def labels(completions: CompletionList) -> List[str]:
    return [item.label for item in completions.items]


__all__ = [
    "FakeSchemaProvider",
    "FailingSchemaProvider",
    "open_document",
    "complete_at",
    "labels",
    "DEFAULT_URI",
]
