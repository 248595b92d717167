"""CQL vocabulary and line scanning primitives."""

from .keywords import (
    ALTER_OBJECTS,
    CLAUSE_KEYWORDS,
    COLLECTION_TYPES,
    COMMAND_SEQUENCES,
    CREATE_OBJECTS,
    DROP_OBJECTS,
    GRAPH_ENGINE_TYPES,
    IF_NOT_EXISTS_OBJECTS,
    KEYWORDS,
    NATIVE_FUNCTIONS,
    NATIVE_TYPES,
    STATEMENT_KEYWORDS,
    TYPE_MODIFIERS,
    CommandSequence,
    first_token,
    is_cql_type,
)
from .scanner import LineBuffer, is_in_string_literal

__all__ = [
    "ALTER_OBJECTS",
    "CLAUSE_KEYWORDS",
    "COLLECTION_TYPES",
    "COMMAND_SEQUENCES",
    "CREATE_OBJECTS",
    "DROP_OBJECTS",
    "GRAPH_ENGINE_TYPES",
    "IF_NOT_EXISTS_OBJECTS",
    "KEYWORDS",
    "NATIVE_FUNCTIONS",
    "NATIVE_TYPES",
    "STATEMENT_KEYWORDS",
    "TYPE_MODIFIERS",
    "CommandSequence",
    "LineBuffer",
    "first_token",
    "is_cql_type",
    "is_in_string_literal",
]
