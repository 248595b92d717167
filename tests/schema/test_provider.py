from __future__ import annotations

import logging
import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from cql_lsp.config import ServerSettings
from cql_lsp.schema.models import Column, Keyspace, SchemaObjectKind, Table, View
from cql_lsp.schema.provider import (
    COLUMNS_QUERY,
    TABLES_QUERY,
    CassandraSchemaProvider,
    NullSchemaProvider,
)


def make_provider(rows=(), *, execute=None, connect_timeout=1.0):
    cluster = MagicMock()
    session = cluster.connect.return_value
    if execute is not None:
        session.execute.side_effect = execute
    else:
        session.execute.return_value = list(rows)
    settings = ServerSettings(db_url="db.local:9142", connect_timeout=connect_timeout)
    provider = CassandraSchemaProvider(settings, cluster_factory=lambda: cluster)
    return provider, cluster, session


@pytest.mark.asyncio
async def test_list_keyspaces():
    provider, cluster, session = make_provider(
        [SimpleNamespace(keyspace_name="shop"), SimpleNamespace(keyspace_name="system")]
    )

    keyspaces = await provider.list_keyspaces()

    assert keyspaces == [Keyspace("shop"), Keyspace("system")]
    cluster.shutdown.assert_called_once()


@pytest.mark.asyncio
async def test_list_tables_binds_keyspace():
    provider, cluster, session = make_provider(
        [SimpleNamespace(keyspace_name="shop", table_name="orders")]
    )

    tables = await provider.list_tables("shop")

    assert tables == [Table("shop", "orders")]
    query, parameters = session.execute.call_args.args
    assert query == f"{TABLES_QUERY} WHERE keyspace_name = %s"
    assert parameters == ("shop",)
    assert session.execute.call_args.kwargs == {"timeout": 1.0}


@pytest.mark.asyncio
async def test_list_columns_for_table():
    row = SimpleNamespace(keyspace_name="shop", table_name="orders", column_name="id", type="uuid")
    provider, cluster, session = make_provider([row])

    columns = await provider.list_columns("shop", "orders")

    assert columns == [Column("shop", "orders", "id", "uuid")]
    query, parameters = session.execute.call_args.args
    assert query == f"{COLUMNS_QUERY} WHERE keyspace_name = %s AND table_name = %s"
    assert parameters == ("shop", "orders")


@pytest.mark.asyncio
async def test_list_columns_global_has_no_parameters():
    provider, cluster, session = make_provider([])

    assert await provider.list_columns_global() == []
    assert session.execute.call_args.args == (COLUMNS_QUERY, None)


@pytest.mark.asyncio
async def test_driver_failure_is_logged_and_empty(caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("Unauthorized")

    provider, cluster, session = make_provider(execute=boom)

    with caplog.at_level(logging.WARNING, logger="cql_lsp.schema.provider"):
        tables = await provider.list_tables_global()

    assert tables == []
    assert "list_tables_global" in caplog.text
    assert "Unauthorized" in caplog.text
    cluster.shutdown.assert_called_once()


@pytest.mark.asyncio
async def test_slow_query_times_out(caplog):
    def slow(*args, **kwargs):
        time.sleep(0.5)
        return []

    provider, cluster, session = make_provider(execute=slow, connect_timeout=0.05)

    with caplog.at_level(logging.WARNING, logger="cql_lsp.schema.provider"):
        started = time.monotonic()
        views = await provider.list_views()
        elapsed = time.monotonic() - started

    assert views == []
    assert elapsed < 0.5
    assert "timed out" in caplog.text


@pytest.mark.asyncio
async def test_check_connection():
    provider, cluster, session = make_provider()

    assert await provider.check_connection() is True
    cluster.connect.assert_called_once()
    cluster.shutdown.assert_called_once()


@pytest.mark.asyncio
async def test_check_connection_failure():
    provider, cluster, session = make_provider()
    cluster.connect.side_effect = OSError("refused")

    assert await provider.check_connection() is False
    cluster.shutdown.assert_called_once()


@pytest.mark.asyncio
async def test_list_objects_dispatches_by_kind():
    provider, cluster, session = make_provider(
        [SimpleNamespace(keyspace_name="shop", view_name="by_total")]
    )

    objects = await provider.list_objects(SchemaObjectKind.VIEW)

    assert objects == [View("shop", "by_total")]
    assert "system_schema.views" in session.execute.call_args.args[0]


@pytest.mark.asyncio
async def test_null_provider():
    provider = NullSchemaProvider()

    assert await provider.list_keyspaces() == []
    assert await provider.list_columns("shop", "orders") == []
    assert await provider.list_objects(SchemaObjectKind.INDEX) == []
    assert await provider.check_connection() is False


def test_kind_from_keyword():
    assert SchemaObjectKind.from_keyword("MATERIALIZED  VIEW") is SchemaObjectKind.VIEW
    assert SchemaObjectKind.from_keyword("view") is SchemaObjectKind.VIEW
    assert SchemaObjectKind.from_keyword("Table") is SchemaObjectKind.TABLE
