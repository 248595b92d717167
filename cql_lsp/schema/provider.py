"""Schema lookups used by the completion dispatcher.

The provider answers read-only questions about keyspaces, tables, columns and
other schema objects. Every public coroutine fails independently: a driver
error, an authentication failure or a timeout is logged and surfaces as an
empty list, so completion degrades to whatever static suggestions remain.
Nothing is cached between calls.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Cluster

from ..config import ServerSettings
from ..errors import SchemaProviderError
from .models import (
    Aggregate,
    Column,
    Function,
    Index,
    Keyspace,
    KeyspaceObject,
    SchemaObjectKind,
    Table,
    UserType,
    View,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

KEYSPACES_QUERY = "SELECT keyspace_name FROM system_schema.keyspaces"
TABLES_QUERY = "SELECT keyspace_name, table_name FROM system_schema.tables"
COLUMNS_QUERY = "SELECT keyspace_name, table_name, column_name, type FROM system_schema.columns"
INDEXES_QUERY = "SELECT keyspace_name, index_name FROM system_schema.indexes"
TYPES_QUERY = "SELECT keyspace_name, type_name FROM system_schema.types"
FUNCTIONS_QUERY = "SELECT keyspace_name, function_name FROM system_schema.functions"
AGGREGATES_QUERY = "SELECT keyspace_name, aggregate_name FROM system_schema.aggregates"
VIEWS_QUERY = "SELECT keyspace_name, view_name FROM system_schema.views"


class SchemaProvider(ABC):
    """Asynchronous, read-only access to schema metadata."""

    @abstractmethod
    async def list_keyspaces(self) -> List[Keyspace]: ...

    @abstractmethod
    async def list_tables_global(self) -> List[Table]: ...

    @abstractmethod
    async def list_tables(self, keyspace: str) -> List[Table]: ...

    @abstractmethod
    async def list_columns_global(self) -> List[Column]: ...

    @abstractmethod
    async def list_columns(self, keyspace: str, table: Optional[str] = None) -> List[Column]: ...

    @abstractmethod
    async def list_indexes(self) -> List[Index]: ...

    @abstractmethod
    async def list_types(self) -> List[UserType]: ...

    @abstractmethod
    async def list_functions(self) -> List[Function]: ...

    @abstractmethod
    async def list_aggregates(self) -> List[Aggregate]: ...

    @abstractmethod
    async def list_views(self) -> List[View]: ...

    async def check_connection(self) -> bool:
        return True

    async def list_objects(self, kind: SchemaObjectKind) -> Sequence[Any]:
        """Dispatch to the listing that matches a droppable object kind."""
        if kind is SchemaObjectKind.KEYSPACE:
            return await self.list_keyspaces()
        if kind is SchemaObjectKind.TABLE:
            return await self.list_tables_global()
        if kind is SchemaObjectKind.AGGREGATE:
            return await self.list_aggregates()
        if kind is SchemaObjectKind.FUNCTION:
            return await self.list_functions()
        if kind is SchemaObjectKind.INDEX:
            return await self.list_indexes()
        if kind is SchemaObjectKind.TYPE:
            return await self.list_types()
        return await self.list_views()


class NullSchemaProvider(SchemaProvider):
    """Provider used when the server runs without a database."""

    async def list_keyspaces(self) -> List[Keyspace]:
        return []

    async def list_tables_global(self) -> List[Table]:
        return []

    async def list_tables(self, keyspace: str) -> List[Table]:
        return []

    async def list_columns_global(self) -> List[Column]:
        return []

    async def list_columns(self, keyspace: str, table: Optional[str] = None) -> List[Column]:
        return []

    async def list_indexes(self) -> List[Index]:
        return []

    async def list_types(self) -> List[UserType]:
        return []

    async def list_functions(self) -> List[Function]:
        return []

    async def list_aggregates(self) -> List[Aggregate]:
        return []

    async def list_views(self) -> List[View]:
        return []

    async def check_connection(self) -> bool:
        return False


class CassandraSchemaProvider(SchemaProvider):
    """Reads ``system_schema`` through the DataStax driver.

    Each call opens its own cluster connection and shuts it down afterwards;
    the blocking driver work runs in the default executor and is bounded by
    the configured connect timeout.
    """

    def __init__(
        self,
        settings: ServerSettings,
        *,
        cluster_factory: Optional[Callable[[], Cluster]] = None,
    ) -> None:
        self.settings = settings
        self._cluster_factory = cluster_factory or self._create_cluster

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def list_keyspaces(self) -> List[Keyspace]:
        rows = await self._safe_fetch("list_keyspaces", KEYSPACES_QUERY)
        return [Keyspace(name=row.keyspace_name) for row in rows]

    async def list_tables_global(self) -> List[Table]:
        rows = await self._safe_fetch("list_tables_global", TABLES_QUERY)
        return _objects(Table, rows, "table_name")

    async def list_tables(self, keyspace: str) -> List[Table]:
        rows = await self._safe_fetch(
            "list_tables",
            f"{TABLES_QUERY} WHERE keyspace_name = %s",
            (keyspace,),
        )
        return _objects(Table, rows, "table_name")

    async def list_columns_global(self) -> List[Column]:
        rows = await self._safe_fetch("list_columns_global", COLUMNS_QUERY)
        return _columns(rows)

    async def list_columns(self, keyspace: str, table: Optional[str] = None) -> List[Column]:
        if table is None:
            rows = await self._safe_fetch(
                "list_columns",
                f"{COLUMNS_QUERY} WHERE keyspace_name = %s",
                (keyspace,),
            )
        else:
            rows = await self._safe_fetch(
                "list_columns",
                f"{COLUMNS_QUERY} WHERE keyspace_name = %s AND table_name = %s",
                (keyspace, table),
            )
        return _columns(rows)

    async def list_indexes(self) -> List[Index]:
        rows = await self._safe_fetch("list_indexes", INDEXES_QUERY)
        return _objects(Index, rows, "index_name")

    async def list_types(self) -> List[UserType]:
        rows = await self._safe_fetch("list_types", TYPES_QUERY)
        return _objects(UserType, rows, "type_name")

    async def list_functions(self) -> List[Function]:
        rows = await self._safe_fetch("list_functions", FUNCTIONS_QUERY)
        return _objects(Function, rows, "function_name")

    async def list_aggregates(self) -> List[Aggregate]:
        rows = await self._safe_fetch("list_aggregates", AGGREGATES_QUERY)
        return _objects(Aggregate, rows, "aggregate_name")

    async def list_views(self) -> List[View]:
        rows = await self._safe_fetch("list_views", VIEWS_QUERY)
        return _objects(View, rows, "view_name")

    async def check_connection(self) -> bool:
        loop = asyncio.get_running_loop()
        try:
            await asyncio.wait_for(
                loop.run_in_executor(None, self._connect_and_close),
                timeout=self._deadline,
            )
        except Exception as exc:
            logger.warning("Database at %s is not reachable: %s", self.settings.db_url, exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @property
    def _deadline(self) -> float:
        # connect + one query
        return self.settings.connect_timeout * 2

    def _create_cluster(self) -> Cluster:
        host, port = self.settings.contact_point
        return Cluster(
            contact_points=[host],
            port=port,
            auth_provider=PlainTextAuthProvider(
                username=self.settings.db_user,
                password=self.settings.db_password,
            ),
            connect_timeout=self.settings.connect_timeout,
            control_connection_timeout=self.settings.connect_timeout,
        )

    def _connect_and_close(self) -> None:
        cluster = self._cluster_factory()
        try:
            cluster.connect()
        finally:
            cluster.shutdown()

    def _run_query(self, query: str, parameters: Optional[Sequence[Any]]) -> List[Any]:
        cluster = self._cluster_factory()
        try:
            session = cluster.connect()
            result = session.execute(query, parameters, timeout=self.settings.connect_timeout)
            return list(result)
        finally:
            cluster.shutdown()

    async def _fetch(
        self,
        operation: str,
        query: str,
        parameters: Optional[Sequence[Any]] = None,
    ) -> List[Any]:
        logger.debug("Schema lookup %s: %s %s", operation, query, parameters or ())
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(None, self._run_query, query, parameters),
                timeout=self._deadline,
            )
        except asyncio.TimeoutError as exc:
            raise SchemaProviderError(
                f"{operation} timed out after {self._deadline:.1f}s",
                operation=operation,
            ) from exc
        except Exception as exc:
            raise SchemaProviderError(f"{operation} failed: {exc}", operation=operation) from exc

    async def _safe_fetch(
        self,
        operation: str,
        query: str,
        parameters: Optional[Sequence[Any]] = None,
    ) -> List[Any]:
        try:
            return await self._fetch(operation, query, parameters)
        except SchemaProviderError as exc:
            logger.warning("Schema lookup %s failed: %s", exc.operation, exc.message)
            return []


def _objects(kind: Callable[..., T], rows: Iterable[Any], name_column: str) -> List[T]:
    return [kind(keyspace=row.keyspace_name, name=getattr(row, name_column)) for row in rows]


def _columns(rows: Iterable[Any]) -> List[Column]:
    return [
        Column(
            keyspace=row.keyspace_name,
            table=row.table_name,
            name=row.column_name,
            type=row.type,
        )
        for row in rows
    ]


__all__ = [
    "SchemaProvider",
    "NullSchemaProvider",
    "CassandraSchemaProvider",
    "KeyspaceObject",
]
