"""
CQL keyword and type vocabulary.

This module is the single source of truth for every static word list the
language server offers or scans for: statement and clause keywords, native
types and their modifiers, native functions, the object kinds accepted by
``CREATE``/``ALTER``/``DROP`` and the snippet command sequences offered as
keyword completions.

**Usage:**
    from cql_lsp.lang import STATEMENT_KEYWORDS, is_cql_type

    if first_token in STATEMENT_KEYWORDS:
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple


# ============================================================================
# Statement and clause keywords
# ============================================================================

# Words that begin a new CQL statement.
STATEMENT_KEYWORDS: FrozenSet[str] = frozenset({
    'alter',
    'apply',
    'begin',
    'commit',
    'create',
    'delete',
    'describe',
    'desc',
    'drop',
    'grant',
    'insert',
    'list',
    'revoke',
    'select',
    'truncate',
    'update',
    'use',
})

# Words that begin a new clause of an already open statement.
CLAUSE_KEYWORDS: FrozenSet[str] = STATEMENT_KEYWORDS | frozenset({
    'and',
    'from',
    'if',
    'limit',
    'order',
    'set',
    'using',
    'values',
    'where',
    'with',
})

# Plain keywords offered wherever a keyword may follow.
KEYWORDS: Tuple[str, ...] = (
    'ADD',
    'AGGREGATE',
    'ALL',
    'ALLOW FILTERING',
    'ALTER',
    'AND',
    'APPLY BATCH',
    'AS',
    'ASC',
    'AUTHORIZE',
    'BATCH',
    'BEGIN BATCH',
    'BY',
    'CALLED ON NULL INPUT',
    'CLUSTERING ORDER BY',
    'COMPACT STORAGE',
    'CONTAINS',
    'CONTAINS KEY',
    'CREATE',
    'CUSTOM',
    'DELETE',
    'DESC',
    'DESCRIBE',
    'DISTINCT',
    'DROP',
    'ENTRIES',
    'EXISTS',
    'FILTERING',
    'FINALFUNC',
    'FROM',
    'FROZEN',
    'FULL',
    'FUNCTION',
    'FUNCTIONS',
    'GRANT',
    'GROUP BY',
    'IF',
    'IF EXISTS',
    'IF NOT EXISTS',
    'IN',
    'INDEX',
    'INITCOND',
    'INSERT INTO',
    'INTO',
    'IS NOT NULL',
    'JSON',
    'KEY',
    'KEYS',
    'KEYSPACE',
    'KEYSPACES',
    'LANGUAGE',
    'LIMIT',
    'LIST',
    'LOGIN',
    'MATERIALIZED VIEW',
    'MODIFY',
    'NORECURSIVE',
    'NOSUPERUSER',
    'NOT',
    'NULL',
    'OF',
    'ON',
    'OR',
    'ORDER BY',
    'PARTITION',
    'PASSWORD',
    'PER PARTITION LIMIT',
    'PERMISSION',
    'PERMISSIONS',
    'PRIMARY KEY',
    'RENAME',
    'REPLACE',
    'RETURNS',
    'REVOKE',
    'ROLE',
    'ROLES',
    'SCHEMA',
    'SELECT',
    'SET',
    'SFUNC',
    'STATIC',
    'STORAGE',
    'STYPE',
    'SUPERUSER',
    'TABLE',
    'TABLES',
    'TIMESTAMP',
    'TO',
    'TOKEN',
    'TRIGGER',
    'TRUNCATE',
    'TTL',
    'TYPE',
    'UNLOGGED',
    'UPDATE',
    'USE',
    'USER',
    'USERS',
    'USING',
    'VALUES',
    'VIEW',
    'WHERE',
    'WITH',
    'WRITETIME',
)


# ============================================================================
# Object kinds for CREATE / ALTER / DROP
# ============================================================================

CREATE_OBJECTS: Tuple[str, ...] = (
    'AGGREGATE',
    'CUSTOM INDEX',
    'FUNCTION',
    'INDEX',
    'KEYSPACE',
    'MATERIALIZED VIEW',
    'OR REPLACE AGGREGATE',
    'OR REPLACE FUNCTION',
    'ROLE',
    'SEARCH INDEX',
    'TABLE',
    'TRIGGER',
    'TYPE',
    'USER',
)

ALTER_OBJECTS: Tuple[str, ...] = (
    'KEYSPACE',
    'MATERIALIZED VIEW',
    'ROLE',
    'TABLE',
    'TYPE',
    'USER',
)

DROP_OBJECTS: Tuple[str, ...] = (
    'AGGREGATE',
    'FUNCTION',
    'INDEX',
    'KEYSPACE',
    'MATERIALIZED VIEW',
    'ROLE',
    'SEARCH INDEX',
    'TABLE',
    'TRIGGER',
    'TYPE',
    'USER',
)

# Object kinds that accept ``IF NOT EXISTS`` right after the kind keyword.
IF_NOT_EXISTS_OBJECTS: Tuple[str, ...] = (
    'aggregate',
    'function',
    'index',
    'keyspace',
    'materialized view',
    'role',
    'table',
    'type',
    'user',
)


# ============================================================================
# Types
# ============================================================================

NATIVE_TYPES: FrozenSet[str] = frozenset({
    'ascii',
    'bigint',
    'blob',
    'boolean',
    'counter',
    'date',
    'decimal',
    'double',
    'duration',
    'float',
    'inet',
    'int',
    'smallint',
    'text',
    'time',
    'timestamp',
    'timeuuid',
    'tinyint',
    'uuid',
    'varchar',
    'varint',
})

# Parameterised types, rendered as snippets with placeholders.
COLLECTION_TYPES: Tuple[Tuple[str, str], ...] = (
    ('frozen', 'frozen<$1>'),
    ('list', 'list<$1>'),
    ('map', 'map<$1, $2>'),
    ('set', 'set<$1>'),
    ('tuple', 'tuple<$1>'),
    ('vector', 'vector<$1, $2>'),
)

_COLLECTION_NAMES: FrozenSet[str] = frozenset(name for name, _ in COLLECTION_TYPES)

TYPE_MODIFIERS: Tuple[str, ...] = (
    'PRIMARY KEY',
    'STATIC',
)

GRAPH_ENGINE_TYPES: Tuple[str, ...] = (
    'Core',
    'Classic',
)


# ============================================================================
# Native functions
# ============================================================================

NATIVE_FUNCTIONS: Tuple[str, ...] = (
    'avg',
    'blobAsText',
    'cast',
    'count',
    'currentDate',
    'currentTime',
    'currentTimestamp',
    'currentTimeUUID',
    'max',
    'maxTimeuuid',
    'min',
    'minTimeuuid',
    'now',
    'sum',
    'textAsBlob',
    'toDate',
    'token',
    'toTimestamp',
    'toUnixTimestamp',
    'ttl',
    'uuid',
    'writetime',
)


# ============================================================================
# Snippet command sequences
# ============================================================================

@dataclass(frozen=True)
class CommandSequence:
    """A whole-statement template offered next to plain keywords."""

    label: str
    snippet: str
    detail: str


COMMAND_SEQUENCES: Tuple[CommandSequence, ...] = (
    CommandSequence('ALTER KEYSPACE', 'ALTER KEYSPACE $0', 'ALTER KEYSPACE cql command'),
    CommandSequence('ALTER MATERIALIZED VIEW', 'ALTER MATERIALIZED VIEW $0', 'ALTER MATERIALIZED VIEW cql command'),
    CommandSequence('ALTER ROLE', 'ALTER ROLE $0', 'ALTER ROLE cql command'),
    CommandSequence('ALTER TABLE', 'ALTER TABLE $0', 'ALTER TABLE cql command'),
    CommandSequence('ALTER TYPE', 'ALTER TYPE $0', 'ALTER TYPE cql command'),
    CommandSequence('ALTER USER', 'ALTER USER $0', 'ALTER USER cql command'),
    CommandSequence('COMMIT SEARCH INDEX', 'COMMIT SEARCH INDEX ON $0;', 'COMMIT SEARCH INDEX cql command'),
    CommandSequence('CREATE AGGREGATE', 'CREATE AGGREGATE IF NOT EXISTS $0', 'CREATE AGGREGATE cql command'),
    CommandSequence('CREATE FUNCTION', 'CREATE FUNCTION IF NOT EXISTS $0', 'CREATE FUNCTION cql command'),
    CommandSequence('CREATE INDEX', 'CREATE INDEX IF NOT EXISTS $1 ON $0', 'CREATE INDEX cql command'),
    CommandSequence('CREATE KEYSPACE', 'CREATE KEYSPACE IF NOT EXISTS $0', 'CREATE KEYSPACE cql command'),
    CommandSequence(
        'CREATE MATERIALIZED VIEW',
        'CREATE MATERIALIZED VIEW IF NOT EXISTS $0',
        'CREATE MATERIALIZED VIEW cql command',
    ),
    CommandSequence('CREATE ROLE', 'CREATE ROLE IF NOT EXISTS $0', 'CREATE ROLE cql command'),
    CommandSequence('CREATE SEARCH INDEX', 'CREATE SEARCH INDEX IF NOT EXISTS ON $0', 'CREATE SEARCH INDEX cql command'),
    CommandSequence('CREATE TABLE', 'CREATE TABLE IF NOT EXISTS $0', 'CREATE TABLE cql command'),
    CommandSequence('CREATE TYPE', 'CREATE TYPE IF NOT EXISTS $0', 'CREATE TYPE cql command'),
    CommandSequence('CREATE USER', 'CREATE USER IF NOT EXISTS $0', 'CREATE USER cql command'),
    CommandSequence('DROP AGGREGATE', 'DROP AGGREGATE IF EXISTS $0', 'DROP AGGREGATE cql command'),
    CommandSequence('DROP FUNCTION', 'DROP FUNCTION IF EXISTS $0', 'DROP FUNCTION cql command'),
    CommandSequence('DROP INDEX', 'DROP INDEX IF EXISTS $0', 'DROP INDEX cql command'),
    CommandSequence('DROP KEYSPACE', 'DROP KEYSPACE IF EXISTS $0;', 'DROP KEYSPACE cql command'),
    CommandSequence('DROP MATERIALIZED VIEW', 'DROP MATERIALIZED VIEW IF EXISTS $0;', 'DROP MATERIALIZED VIEW cql command'),
    CommandSequence('DROP ROLE', 'DROP ROLE IF EXISTS $0;', 'DROP ROLE cql command'),
    CommandSequence('DROP SEARCH INDEX', 'DROP SEARCH INDEX ON $0', 'DROP SEARCH INDEX cql command'),
    CommandSequence('DROP TABLE', 'DROP TABLE IF EXISTS $0;', 'DROP TABLE cql command'),
    CommandSequence('DROP TYPE', 'DROP TYPE IF EXISTS $0;', 'DROP TYPE cql command'),
    CommandSequence('DROP USER', 'DROP USER IF EXISTS $0;', 'DROP USER cql command'),
    CommandSequence('LIST ALL PERMISSIONS', 'LIST ALL PERMISSIONS $0', 'LIST ALL PERMISSIONS cql command'),
    CommandSequence('LIST ROLES', 'LIST ROLES $0', 'LIST ROLES cql command'),
    CommandSequence('LIST USERS', 'LIST USERS;', 'LIST USERS cql command'),
    CommandSequence('REVOKE', 'REVOKE $0 FROM $1;', 'REVOKE cql command'),
    CommandSequence('REVOKE ALL PERMISSIONS', 'REVOKE ALL PERMISSIONS $0', 'REVOKE ALL PERMISSIONS cql command'),
    CommandSequence('SELECT', 'SELECT $1 FROM $0;', 'SELECT cql command'),
    CommandSequence('TRUNCATE TABLE', 'TRUNCATE TABLE $0;', 'TRUNCATE TABLE cql command'),
    CommandSequence('USE', 'USE "$0";', 'USE cql command'),
)


# ============================================================================
# Lookups
# ============================================================================

def is_cql_type(token: str) -> bool:
    """Return True if *token* names a native or collection CQL type.

    Parameterised types are recognised by their head (``map<text,`` counts),
    and a trailing comma is ignored.
    """
    word = token.strip().rstrip(',').lower()
    if not word:
        return False
    if word in NATIVE_TYPES:
        return True
    head = word.split('<', 1)[0]
    return head in _COLLECTION_NAMES


def first_token(line: str) -> Optional[str]:
    """Return the lower-cased first whitespace-delimited token of *line*."""
    parts = line.lower().split()
    return parts[0] if parts else None


__all__ = [
    'STATEMENT_KEYWORDS',
    'CLAUSE_KEYWORDS',
    'KEYWORDS',
    'CREATE_OBJECTS',
    'ALTER_OBJECTS',
    'DROP_OBJECTS',
    'IF_NOT_EXISTS_OBJECTS',
    'NATIVE_TYPES',
    'COLLECTION_TYPES',
    'TYPE_MODIFIERS',
    'GRAPH_ENGINE_TYPES',
    'NATIVE_FUNCTIONS',
    'CommandSequence',
    'COMMAND_SEQUENCES',
    'is_cql_type',
    'first_token',
]
