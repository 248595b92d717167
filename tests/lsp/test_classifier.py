from __future__ import annotations

import pytest

from cql_lsp.lang.keywords import IF_NOT_EXISTS_OBJECTS
from cql_lsp.lsp.classifier import classify, if_not_exists_start, in_column_block
from cql_lsp.lsp.protocol import Context, ContextKind
from cql_lsp.schema.models import SchemaObjectKind


def classify_end(line: str) -> Context:
    return classify([line], 0, len(line))


@pytest.mark.parametrize(
    "line, expected",
    [
        ("SELECT a, b ", ContextKind.SUGGEST_FIELDS),
        ("SELECT ", ContextKind.SUGGEST_FIELDS),
        ("SELECT a, b", ContextKind.SUGGEST_FIELDS),
        ("SELECT a ", ContextKind.SUGGEST_FROM),
        ("SELECT * ", ContextKind.SUGGEST_FROM),
        ("SELECT a fr", ContextKind.SUGGEST_FROM),
        ("SELECT a FROM ", ContextKind.SUGGEST_TABLE),
        ("SELECT a FROM sh", ContextKind.SUGGEST_TABLE),
        ("DELETE FROM ", ContextKind.SUGGEST_TABLE),
        ("INSERT INTO ", ContextKind.SUGGEST_TABLE),
        ("UPDATE ord", ContextKind.SUGGEST_TABLE),
        ("TRUNCATE TABLE ", ContextKind.SUGGEST_TABLE),
        ("USE ", ContextKind.SUGGEST_KEYSPACE),
        ('USE "sh', ContextKind.SUGGEST_KEYSPACE),
        ("SELECT 'abc", ContextKind.IN_STRING_LITERAL),
        ("CREATE ", ContextKind.SUGGEST_CREATE_KEYWORD),
        ("CREATE TA", ContextKind.SUGGEST_CREATE_KEYWORD),
        ("ALTER ", ContextKind.SUGGEST_ALTER_KEYWORD),
        ("DROP ", ContextKind.SUGGEST_DROP_KEYWORD),
        ("DROP TAB", ContextKind.SUGGEST_DROP_KEYWORD),
        ("CREATE TABLE ", ContextKind.SUGGEST_IF_NOT_EXISTS),
        ("create or replace function ", ContextKind.SUGGEST_IF_NOT_EXISTS),
        ("CREATE TABLE IF NOT ", ContextKind.SUGGEST_IF_NOT_EXISTS),
        ("CREATE KEYSPACE ks WITH graph_engine = ", ContextKind.SUGGEST_GRAPH_ENGINE_TYPE),
        ("CREATE KEYSPACE ks WITH graph_engine = 'Co", ContextKind.SUGGEST_GRAPH_ENGINE_TYPE),
        ("", ContextKind.SUGGEST_KEYWORDS),
        ('USE "shop"; ', ContextKind.SUGGEST_KEYWORDS),
        ("SELECT * FROM t WHERE ", ContextKind.NONE),
        ("SELECT * FROM t WHERE a = 1 AND ", ContextKind.NONE),
        ("SELECT * FROM t WHERE a = ", ContextKind.NONE),
        ("-- a comment ", ContextKind.NONE),
        ("INSERT INTO t (a, ", ContextKind.NONE),
    ],
)
def test_classify_line(line: str, expected: ContextKind) -> None:
    assert classify_end(line).kind is expected


@pytest.mark.parametrize(
    "line, kind",
    [
        ("DROP TABLE ", SchemaObjectKind.TABLE),
        ("DROP KEYSPACE ", SchemaObjectKind.KEYSPACE),
        ("drop materialized view ", SchemaObjectKind.VIEW),
        ("DROP VIEW shop.", SchemaObjectKind.VIEW),
        ("DROP TYPE IF EXISTS ", SchemaObjectKind.TYPE),
        ("DROP AGGREGATE ", SchemaObjectKind.AGGREGATE),
        ("DROP FUNCTION ", SchemaObjectKind.FUNCTION),
        ("DROP INDEX sh", SchemaObjectKind.INDEX),
    ],
)
def test_drop_object_name(line: str, kind: SchemaObjectKind) -> None:
    context = classify_end(line)
    assert context.kind is ContextKind.SUGGEST_DROP_OBJECT_NAME
    assert context.object_kind is kind


@pytest.mark.parametrize("kind", IF_NOT_EXISTS_OBJECTS)
def test_every_object_kind_offers_if_not_exists(kind: str) -> None:
    assert classify_end(f"CREATE {kind.upper()} ").kind is ContextKind.SUGGEST_IF_NOT_EXISTS


@pytest.mark.parametrize(
    "line",
    ["-- SELECT ", "SELECT 1; -- SELECT a, ", "// SELECT a ", "-- SELECT a FROM ", "/* INSERT INTO "],
)
def test_commented_select_and_table_positions(line: str) -> None:
    assert classify_end(line).kind is ContextKind.NONE


def test_select_inside_block_comment() -> None:
    lines = ["/*", "SELECT ", "*/"]
    assert classify(lines, 1, len(lines[1])).kind is ContextKind.NONE


def test_drop_table_beats_table_rule() -> None:
    assert classify_end("DROP TABLE ").kind is ContextKind.SUGGEST_DROP_OBJECT_NAME


def test_terminated_drop_is_not_a_drop_position() -> None:
    assert classify_end("DROP TABLE t; ").kind is not ContextKind.SUGGEST_DROP_OBJECT_NAME


class TestColumnBlock:
    def lines(self, column_line: str):
        return ["CREATE TABLE shop.items (", column_line, ");"]

    def test_column_type_after_name(self):
        lines = self.lines("    id ")
        assert classify(lines, 1, len(lines[1])).kind is ContextKind.SUGGEST_COLUMN_TYPE

    def test_column_type_while_typing(self):
        lines = self.lines("    id in")
        assert classify(lines, 1, len(lines[1])).kind is ContextKind.SUGGEST_COLUMN_TYPE

    def test_modifier_after_type(self):
        lines = self.lines("    id int ")
        assert classify(lines, 1, len(lines[1])).kind is ContextKind.SUGGEST_TYPE_MODIFIER

    def test_modifier_while_typing(self):
        lines = self.lines("    id int PRI")
        assert classify(lines, 1, len(lines[1])).kind is ContextKind.SUGGEST_TYPE_MODIFIER

    def test_only_create_table_or_type_blocks(self):
        lines = ["INSERT INTO t (", "    id ", ") VALUES (1);"]
        assert not in_column_block(lines[1], 1, lines)
        assert in_column_block("  street ", 1, ["CREATE TYPE address (", "  street ", ");"])


class TestInvalidPositions:
    def test_position_past_end_of_line(self):
        assert classify(["SELECT"], 0, 10).kind is ContextKind.NONE

    def test_position_inside_surrogate_pair(self):
        assert classify(["😀 SELECT"], 0, 1).kind is ContextKind.NONE

    def test_line_out_of_range(self):
        assert classify(["SELECT"], 3, 0).kind is ContextKind.NONE
        assert classify([], 0, 0).kind is ContextKind.NONE

    def test_non_ascii_before_cursor(self):
        line = "SELECT 'é😀' FROM "
        assert classify([line], 0, len(line) + 1).kind is ContextKind.SUGGEST_TABLE


class TestIfNotExistsStart:
    def test_start_of_remainder(self):
        assert if_not_exists_start("CREATE TABLE ") == 13
        assert if_not_exists_start("CREATE TABLE IF ") == 13

    def test_complete_or_unrelated_remainder(self):
        assert if_not_exists_start("CREATE TABLE IF NOT EXISTS") is None
        assert if_not_exists_start("CREATE TABLE users ") is None
        assert if_not_exists_start("SELECT ") is None
