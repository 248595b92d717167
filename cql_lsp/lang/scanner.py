"""Line scanning primitives shared by the classifier and the formatter.

Everything here is a pure function over plain strings. Positions coming from
the client are UTF-16 code unit offsets, so each line is wrapped in a
:class:`LineBuffer` that maps those offsets onto code point indices once and
refuses (returns ``None``) offsets that are out of range or split a surrogate
pair. Callers treat ``None`` as "no match".
"""

from __future__ import annotations

import re
from bisect import bisect_left
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence

from .keywords import CLAUSE_KEYWORDS, STATEMENT_KEYWORDS, first_token

QUOTES = ("'", '"')
TERMINATOR = ";"
BLOCK_COMMENT_OPEN = "/*"
BLOCK_COMMENT_CLOSE = "*/"
LINE_COMMENT_MARKERS = ("--", "//")

CODE = "code"
LITERAL = "literal"
COMMENT = "comment"


class LineBuffer:
    """A line indexed by code point with UTF-16 offset bookkeeping."""

    __slots__ = ("text", "_offsets")

    def __init__(self, text: str) -> None:
        self.text = text
        offsets = [0]
        total = 0
        for ch in text:
            total += 2 if ord(ch) > 0xFFFF else 1
            offsets.append(total)
        self._offsets = offsets

    def __len__(self) -> int:
        return len(self.text)

    @property
    def utf16_length(self) -> int:
        return self._offsets[-1]

    def index_at(self, character: int) -> Optional[int]:
        """Map a UTF-16 offset to a code point index, or None if invalid."""
        if character < 0 or character > self._offsets[-1]:
            return None
        index = bisect_left(self._offsets, character)
        if self._offsets[index] != character:
            return None
        return index

    def character_at(self, index: int) -> int:
        """Map a code point index back to a UTF-16 offset (clamped)."""
        index = min(max(index, 0), len(self.text))
        return self._offsets[index]

    def prefix(self, character: int) -> Optional[str]:
        index = self.index_at(character)
        if index is None:
            return None
        return self.text[:index]

    def suffix(self, character: int) -> Optional[str]:
        index = self.index_at(character)
        if index is None:
            return None
        return self.text[index:]


class Segment(NamedTuple):
    text: str
    kind: str
    closed: bool = True


# ----------------------------------------------------------------------
# Quotes and literals
# ----------------------------------------------------------------------
def open_quote(text: str) -> Optional[str]:
    """Return the quote character still open at the end of *text*."""
    in_double = False
    in_single = False
    escape_next = False
    for ch in text:
        if escape_next:
            escape_next = False
            continue
        if ch == "\\":
            escape_next = True
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == "'" and not in_double:
            in_single = not in_single
    if in_double != in_single:
        return '"' if in_double else "'"
    return None


def is_in_string_literal(line: str, position: int) -> bool:
    prefix = LineBuffer(line).prefix(position)
    if prefix is None:
        return False
    return open_quote(prefix) is not None


def split_segments(line: str) -> List[Segment]:
    """Split *line* into code, literal and trailing line-comment segments."""
    segments: List[Segment] = []
    buffer: List[str] = []
    quote: Optional[str] = None
    escape_next = False
    index = 0
    length = len(line)

    def flush(kind: str, closed: bool = True) -> None:
        if buffer:
            segments.append(Segment("".join(buffer), kind, closed))
            buffer.clear()

    while index < length:
        ch = line[index]
        if quote is not None:
            buffer.append(ch)
            if escape_next:
                escape_next = False
            elif ch == "\\":
                escape_next = True
            elif ch == quote:
                flush(LITERAL)
                quote = None
            index += 1
            continue
        if ch in QUOTES:
            flush(CODE)
            quote = ch
            buffer.append(ch)
            index += 1
            continue
        if line.startswith(LINE_COMMENT_MARKERS, index):
            flush(CODE)
            segments.append(Segment(line[index:], COMMENT))
            return segments
        buffer.append(ch)
        if ch == "\\" and index + 1 < length:
            buffer.append(line[index + 1])
            index += 1
        index += 1

    if quote is not None:
        flush(LITERAL, closed=False)
    else:
        flush(CODE)
    return segments


def code_text(line: str) -> str:
    """Return *line* with literals and line comments removed."""
    return "".join(segment.text for segment in split_segments(line) if segment.kind == CODE)


def has_terminator(line: str) -> bool:
    return TERMINATOR in code_text(line)


# ----------------------------------------------------------------------
# Keywords
# ----------------------------------------------------------------------
def line_starts_with_keyword(line: str, keywords: Iterable[str]) -> bool:
    token = first_token(line)
    return token is not None and token in keywords


def has_word(text: str, word: str) -> bool:
    return re.search(rf"(?<![\w.]){re.escape(word)}(?![\w.])", text.lower()) is not None


# ----------------------------------------------------------------------
# Comments
# ----------------------------------------------------------------------
def is_block_comment_marker(line: str) -> bool:
    return BLOCK_COMMENT_OPEN in line or BLOCK_COMMENT_CLOSE in line


def is_inside_block_comment(line: str, index: int, lines: Sequence[str]) -> bool:
    """True if the line at *index* sits strictly between ``/*`` and ``*/`` lines."""
    if index <= 0 or index >= len(lines) - 1 or is_block_comment_marker(line):
        return False

    opened = False
    for above in _walk_up(lines, index):
        if is_block_comment_marker(above):
            opened = above.rfind(BLOCK_COMMENT_OPEN) > above.rfind(BLOCK_COMMENT_CLOSE)
            break
    if not opened:
        return False

    for below in _walk_down(lines, index):
        if is_block_comment_marker(below):
            close_at = below.find(BLOCK_COMMENT_CLOSE)
            open_at = below.find(BLOCK_COMMENT_OPEN)
            return close_at != -1 and (open_at == -1 or close_at < open_at)
    return False


def in_comment(prefix: str, index: int, lines: Sequence[str]) -> bool:
    """True if the text right before the cursor is commented out."""
    segments = split_segments(prefix)
    if segments and segments[-1].kind == COMMENT:
        return True
    code = "".join(segment.text for segment in segments if segment.kind == CODE)
    if code.rfind(BLOCK_COMMENT_OPEN) > code.rfind(BLOCK_COMMENT_CLOSE):
        return True
    if 0 <= index < len(lines):
        return is_inside_block_comment(lines[index], index, lines)
    return False


# ----------------------------------------------------------------------
# Bracket blocks
# ----------------------------------------------------------------------
def find_block_opener(
    index: int,
    lines: Sequence[str],
    openers: str = "(",
    closers: str = ")",
) -> Optional[int]:
    """Index of the line above *index* holding the unmatched opener, if any."""
    depth = 0
    for up in range(index - 1, -1, -1):
        above = lines[up]
        if above.rstrip().endswith(TERMINATOR):
            return None
        for ch in reversed(code_text(above)):
            if ch in closers:
                depth += 1
            elif ch in openers:
                if depth == 0:
                    return up
                depth -= 1
        if depth == 0 and line_starts_with_keyword(above, CLAUSE_KEYWORDS):
            return None
    return None


def find_block_closer(
    index: int,
    lines: Sequence[str],
    openers: str = "(",
    closers: str = ")",
) -> Optional[int]:
    """Index of the line below *index* holding the unmatched closer, if any."""
    depth = 0
    for down in range(index + 1, len(lines)):
        below = lines[down]
        code = code_text(below)
        for ch in code:
            if ch in openers:
                depth += 1
            elif ch in closers:
                if depth == 0:
                    return down
                depth -= 1
        if TERMINATOR in code:
            return None
        if depth == 0 and line_starts_with_keyword(below, CLAUSE_KEYWORDS):
            return None
    return None


def is_inside_bracket_block(
    line: str,
    index: int,
    lines: Sequence[str],
    openers: str = "(",
    closers: str = ")",
) -> bool:
    """True if the whole line sits inside a multi-line bracket block."""
    if index <= 0 or index >= len(lines) - 1 or not line.strip():
        return False
    code = code_text(line)
    if TERMINATOR in code or any(ch in code for ch in openers + closers):
        return False
    if line_starts_with_keyword(line, CLAUSE_KEYWORDS):
        return False
    return (
        find_block_opener(index, lines, openers, closers) is not None
        and find_block_closer(index, lines, openers, closers) is not None
    )


def is_inside_selector_block(line: str, index: int, lines: Sequence[str]) -> bool:
    """True if the line is one of the selectors between ``SELECT`` and ``FROM``."""
    if index <= 0 or index >= len(lines) - 1 or not line.strip():
        return False
    if has_terminator(line) or line_starts_with_keyword(line, CLAUSE_KEYWORDS):
        return False
    if has_word(line, "select") or has_word(line, "from") or has_word(line, "values"):
        return False

    for above in _walk_up(lines, index):
        if has_word(above, "select"):
            if has_word(above, "from") or has_terminator(above):
                return False
            break
        if has_terminator(above) or line_starts_with_keyword(above, CLAUSE_KEYWORDS):
            return False
    else:
        return False

    for below in _walk_down(lines, index):
        if has_word(below, "from"):
            return True
        if has_terminator(below) or line_starts_with_keyword(below, CLAUSE_KEYWORDS):
            return False
    return False


def has_unclosed_bracket(
    prefix: str,
    index: int,
    lines: Sequence[str],
    openers: str = "(",
    closers: str = ")",
) -> bool:
    """True if the cursor sits after an opener left open in its statement.

    The walk starts at the text before the cursor and continues upward until a
    line ending in a terminator or starting with a statement keyword.
    """
    depth = 0
    for position, text in enumerate(_statement_lines(prefix, index, lines)):
        if position > 0 and text.rstrip().endswith(TERMINATOR):
            return False
        for ch in reversed(code_text(text)):
            if ch in closers:
                depth += 1
            elif ch in openers:
                if depth == 0:
                    return True
                depth -= 1
        if line_starts_with_keyword(text, STATEMENT_KEYWORDS):
            return False
    return False


def _statement_lines(prefix: str, index: int, lines: Sequence[str]) -> Iterator[str]:
    yield prefix
    if 0 <= index <= len(lines):
        yield from _walk_up(lines, index)


def _walk_up(lines: Sequence[str], index: int) -> Iterator[str]:
    for up in range(index - 1, -1, -1):
        yield lines[up]


def _walk_down(lines: Sequence[str], index: int) -> Iterator[str]:
    for down in range(index + 1, len(lines)):
        yield lines[down]


__all__ = [
    "LineBuffer",
    "Segment",
    "CODE",
    "LITERAL",
    "COMMENT",
    "QUOTES",
    "TERMINATOR",
    "open_quote",
    "is_in_string_literal",
    "split_segments",
    "code_text",
    "has_terminator",
    "line_starts_with_keyword",
    "has_word",
    "is_block_comment_marker",
    "is_inside_block_comment",
    "in_comment",
    "find_block_opener",
    "find_block_closer",
    "is_inside_bracket_block",
    "is_inside_selector_block",
    "has_unclosed_bracket",
]
