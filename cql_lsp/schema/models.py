"""Read-only projections of ``system_schema`` rows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SchemaObjectKind(Enum):
    """Object kinds that can follow ``DROP``."""

    KEYSPACE = "keyspace"
    TABLE = "table"
    AGGREGATE = "aggregate"
    FUNCTION = "function"
    INDEX = "index"
    TYPE = "type"
    VIEW = "materialized view"

    @classmethod
    def from_keyword(cls, keyword: str) -> "SchemaObjectKind":
        normalized = " ".join(keyword.lower().split())
        if normalized == "view":
            return cls.VIEW
        return cls(normalized)


@dataclass(frozen=True, slots=True)
class Keyspace:
    name: str

    @property
    def qualified_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class KeyspaceObject:
    """An object living inside a keyspace."""

    keyspace: str
    name: str

    @property
    def qualified_name(self) -> str:
        return f"{self.keyspace}.{self.name}"


class Table(KeyspaceObject):
    pass


class Index(KeyspaceObject):
    pass


class UserType(KeyspaceObject):
    pass


class Function(KeyspaceObject):
    pass


class Aggregate(KeyspaceObject):
    pass


class View(KeyspaceObject):
    pass


@dataclass(frozen=True, slots=True)
class Column:
    keyspace: str
    table: str
    name: str
    type: str

    @property
    def qualified_table(self) -> str:
        return f"{self.keyspace}.{self.table}"

    def __str__(self) -> str:
        return f"Column [keyspace: {self.keyspace}, table: {self.table}, column: {self.name}, type: {self.type}]"


__all__ = [
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
