from __future__ import annotations

import pytest

from cql_lsp.lang.keywords import STATEMENT_KEYWORDS, first_token, is_cql_type
from cql_lsp.lang.scanner import (
    CODE,
    COMMENT,
    LITERAL,
    LineBuffer,
    Segment,
    code_text,
    has_terminator,
    has_unclosed_bracket,
    has_word,
    in_comment,
    is_in_string_literal,
    is_inside_block_comment,
    is_inside_bracket_block,
    is_inside_selector_block,
    line_starts_with_keyword,
    split_segments,
)


class TestLineBuffer:
    def test_maps_utf16_offsets_to_code_points(self):
        buffer = LineBuffer("aé😀b")
        assert buffer.utf16_length == 5
        assert buffer.index_at(0) == 0
        assert buffer.index_at(2) == 2
        assert buffer.index_at(4) == 3
        assert buffer.index_at(5) == 4
        assert buffer.character_at(3) == 4

    def test_rejects_invalid_offsets(self):
        buffer = LineBuffer("aé😀b")
        assert buffer.index_at(3) is None  # inside the surrogate pair
        assert buffer.index_at(6) is None
        assert buffer.index_at(-1) is None
        assert buffer.prefix(3) is None

    def test_prefix_and_suffix(self):
        buffer = LineBuffer("SELECT x")
        assert buffer.prefix(6) == "SELECT"
        assert buffer.suffix(6) == " x"


class TestStringLiterals:
    @pytest.mark.parametrize(
        "line, position, expected",
        [
            ("SELECT 'abc", 11, True),
            ("SELECT 'abc' ", 13, False),
            ('"it\'s', 4, True),
            ("'a\\'b", 5, True),
            ("USE \"ks\";", 9, False),
            ("USE \"ks\";", 6, True),
            ("abc", 10, False),
        ],
    )
    def test_is_in_string_literal(self, line, position, expected):
        assert is_in_string_literal(line, position) is expected

    @pytest.mark.parametrize(
        "line",
        [
            "SELECT 'abc' FROM t",
            'USE "sh',
            "INSERT INTO t (a) VALUES ('x\\'y', \"z",
            "graph_engine = 'Co",
            "plain words only",
        ],
    )
    @pytest.mark.parametrize("escaped", ["\\'", '\\"', "\\\\", "\\x"])
    def test_escaped_sequence_does_not_leak(self, line, escaped):
        shifted = escaped + line
        for position in range(len(line) + 1):
            assert is_in_string_literal(shifted, position + len(escaped)) == is_in_string_literal(line, position)


class TestSegments:
    def test_split_segments(self):
        assert split_segments("SELECT 'a b' -- note") == [
            Segment("SELECT ", CODE),
            Segment("'a b'", LITERAL),
            Segment(" ", CODE),
            Segment("-- note", COMMENT),
        ]

    def test_unclosed_literal_is_marked_open(self):
        segments = split_segments("SELECT 'abc")
        assert segments[-1] == Segment("'abc", LITERAL, closed=False)

    def test_code_text_drops_literals_and_comments(self):
        assert code_text("a 'x;' ; -- c;") == "a  ; "
        assert has_terminator("a 'x;' ; -- c;")
        assert not has_terminator("'x;'")
        assert not has_terminator("SELECT 1 // done;")


class TestKeywords:
    def test_line_starts_with_keyword(self):
        assert line_starts_with_keyword("  Select x", STATEMENT_KEYWORDS)
        assert not line_starts_with_keyword("selector x", STATEMENT_KEYWORDS)
        assert not line_starts_with_keyword("", STATEMENT_KEYWORDS)

    def test_has_word_respects_boundaries(self):
        assert has_word("select a from t", "from")
        assert not has_word("SELECT a.from", "from")
        assert not has_word("SELECT fromage", "from")

    def test_is_cql_type(self):
        assert is_cql_type("int")
        assert is_cql_type("int,")
        assert is_cql_type("map<text,")
        assert is_cql_type("FROZEN<address>")
        assert not is_cql_type("users")
        assert not is_cql_type("")

    def test_first_token(self):
        assert first_token("  CREATE TABLE") == "create"
        assert first_token("   ") is None


class TestBlocks:
    def test_block_comment(self):
        lines = ["/*", "inside", "*/", "after"]
        assert is_inside_block_comment(lines[1], 1, lines)
        assert not is_inside_block_comment(lines[3], 3, lines)
        assert not is_inside_block_comment(lines[0], 0, lines)

    def test_closed_comment_above_does_not_open(self):
        lines = ["x /* a */", "b", "y */"]
        assert not is_inside_block_comment(lines[1], 1, lines)

    def test_in_comment(self):
        assert in_comment("SELECT 1 -- no", 0, ["SELECT 1 -- no"])
        assert in_comment("/* open", 0, ["/* open"])
        assert not in_comment("SELECT '--' ", 0, ["SELECT '--' "])

    def test_bracket_block(self):
        lines = ["CREATE TABLE t (", "id int,", "name text", ");"]
        assert is_inside_bracket_block(lines[1], 1, lines)
        assert is_inside_bracket_block(lines[2], 2, lines)
        assert not is_inside_bracket_block(lines[0], 0, lines)
        assert not is_inside_bracket_block(lines[3], 3, lines)

    def test_bracket_block_does_not_cross_statements(self):
        lines = ["SELECT (a);", "b", "c)"]
        assert not is_inside_bracket_block(lines[1], 1, lines)

    def test_brace_block(self):
        lines = ["WITH replication = {", "'class': 'SimpleStrategy'", "};"]
        assert is_inside_bracket_block(lines[1], 1, lines, "{", "}")

    def test_selector_block(self):
        lines = ["SELECT a,", "b,", "c", "FROM t;"]
        assert is_inside_selector_block(lines[1], 1, lines)
        assert is_inside_selector_block(lines[2], 2, lines)
        assert not is_inside_selector_block(lines[3], 3, lines)

    def test_selector_block_needs_from_below(self):
        lines = ["SELECT a,", "b", "c;"]
        assert not is_inside_selector_block(lines[1], 1, lines)

    def test_unclosed_bracket(self):
        assert has_unclosed_bracket("INSERT INTO t (a, ", 0, ["INSERT INTO t (a, b"])
        assert not has_unclosed_bracket("SELECT count(a) ", 0, ["SELECT count(a) "])

    def test_unclosed_bracket_on_previous_line(self):
        lines = ["CREATE TABLE t (", "id "]
        assert has_unclosed_bracket("id ", 1, lines)

    def test_unclosed_bracket_stops_at_terminator(self):
        lines = ["SELECT (a;", "x "]
        assert not has_unclosed_bracket("x ", 1, lines)
