"""Schema metadata: models and the database-backed provider."""

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
from .provider import CassandraSchemaProvider, NullSchemaProvider, SchemaProvider

__all__ = [
    "SchemaProvider",
    "CassandraSchemaProvider",
    "NullSchemaProvider",
    "SchemaObjectKind",
    "Keyspace",
    "KeyspaceObject",
    "Table",
    "Index",
    "UserType",
    "Function",
    "Aggregate",
    "View",
    "Column",
]
