"""Line based CQL formatter.

The formatter is a fixed sequence of passes, each a pure ``lines -> lines``
function. Later passes rely on what earlier ones established (terminator
insertion expects normalised whitespace), so the order in :data:`PASSES`
matters. Running the pipeline on its own output changes nothing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from lsprotocol.types import Position, Range, TextEdit

from ..lang.keywords import STATEMENT_KEYWORDS
from ..lang.scanner import (
    CODE,
    COMMENT,
    LITERAL,
    LINE_COMMENT_MARKERS,
    TERMINATOR,
    LineBuffer,
    code_text,
    has_word,
    is_block_comment_marker,
    is_inside_block_comment,
    is_inside_bracket_block,
    is_inside_selector_block,
    line_starts_with_keyword,
    open_quote,
    split_segments,
)

logger = logging.getLogger(__name__)

Pass = Callable[[List[str]], List[str]]

_SPACES_RE = re.compile(r"[ \t]+")
_DUPLICATE_TERMINATORS_RE = re.compile(r";(\s*;)+")
_TYPE_HEAD_RE = re.compile(r"\b(?:list|set|map|frozen|tuple|vector)\s*$", re.IGNORECASE)
_COMMA_RE = re.compile(r",\s*")
_TIGHTEN_RES = (
    (re.compile(r"\(\s+"), "("),
    (re.compile(r"\s+\)"), ")"),
    (re.compile(r"\s+,"), ","),
    (re.compile(r"\s+;"), ";"),
)


class IndentStyle(Enum):
    """Supported indentation styles."""
    SPACES = "spaces"
    TABS = "tabs"


@dataclass
class FormattingOptions:
    """Configuration options for CQL formatting."""

    indent_style: IndentStyle = IndentStyle.SPACES
    indent_size: int = 4

    @property
    def indent(self) -> str:
        if self.indent_style == IndentStyle.TABS:
            return "\t"
        return " " * self.indent_size


@dataclass
class FormattedResult:
    """Result of a formatting run."""

    formatted_text: str
    is_changed: bool
    lines: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FormatEdit:
    """Replacement of one line (or a trailing run of lines).

    Offsets are UTF-16 code units. ``old_length`` is the end character of the
    replaced span on ``end_line`` (the edit's own line when unset).
    """

    line_index: int
    old_length: int
    new_text: str
    start_character: int = 0
    end_line: Optional[int] = None

    @property
    def range(self) -> Range:
        end_line = self.line_index if self.end_line is None else self.end_line
        return Range(
            start=Position(line=self.line_index, character=self.start_character),
            end=Position(line=end_line, character=self.old_length),
        )

    def to_text_edit(self) -> TextEdit:
        return TextEdit(range=self.range, new_text=self.new_text)


# ----------------------------------------------------------------------
# Segment helpers
# ----------------------------------------------------------------------
def _is_comment_line(line: str, index: int, lines: Sequence[str]) -> bool:
    return is_block_comment_marker(line) or is_inside_block_comment(line, index, lines)


def _is_line_comment(line: str) -> bool:
    return line.lstrip().startswith(LINE_COMMENT_MARKERS)


def _map_segments(lines: List[str], kind: str, rewrite: Callable[[str], str]) -> List[str]:
    """Apply *rewrite* to every segment of *kind*, skipping block comments."""
    result = []
    for index, line in enumerate(lines):
        if _is_comment_line(line, index, lines):
            result.append(line)
            continue
        parts = []
        for segment in split_segments(line):
            if segment.kind == kind and (kind != LITERAL or segment.closed):
                parts.append(rewrite(segment.text))
            else:
                parts.append(segment.text)
        result.append("".join(parts))
    return result


def _ends_statement(line: str) -> bool:
    return code_text(line).rstrip().endswith(TERMINATOR)


def _has_comment(line: str) -> bool:
    if is_block_comment_marker(code_text(line)):
        return True
    return any(segment.kind == COMMENT for segment in split_segments(line))


# ----------------------------------------------------------------------
# Passes
# ----------------------------------------------------------------------
def normalize_whitespace(lines: List[str]) -> List[str]:
    """Trim every line and collapse runs of blanks."""
    return [_SPACES_RE.sub(" ", line.strip()) for line in lines]


def dedupe_terminators(lines: List[str]) -> List[str]:
    return _map_segments(lines, CODE, lambda text: _DUPLICATE_TERMINATORS_RE.sub(";", text))


def tighten_punctuation(lines: List[str]) -> List[str]:
    """Drop spaces just inside brackets and type angles, and before ``,``/``;``."""

    def rewrite(text: str) -> str:
        for pattern, replacement in _TIGHTEN_RES:
            text = pattern.sub(replacement, text)
        return _tighten_type_angles(text)

    return _map_segments(lines, CODE, rewrite)


def _tighten_type_angles(text: str) -> str:
    out: List[str] = []
    depth = 0
    skip_spaces = False
    for ch in text:
        if skip_spaces and ch == " ":
            continue
        skip_spaces = False
        if ch == "<" and _TYPE_HEAD_RE.search("".join(out)):
            while out and out[-1] == " ":
                out.pop()
            out.append(ch)
            depth += 1
            skip_spaces = True
        elif ch == ">" and depth:
            while out and out[-1] == " ":
                out.pop()
            out.append(ch)
            depth -= 1
        else:
            out.append(ch)
    return "".join(out)


def trim_literals(lines: List[str]) -> List[str]:
    """Strip whitespace just inside closed string literals."""

    def rewrite(text: str) -> str:
        quote, inner = text[0], text[1:-1]
        trimmed = inner.strip()
        if _escapes_closing_quote(trimmed):
            trimmed = inner.lstrip()
        return f"{quote}{trimmed}{quote}"

    return _map_segments(lines, LITERAL, rewrite)


def _escapes_closing_quote(text: str) -> bool:
    backslashes = len(text) - len(text.rstrip("\\"))
    return backslashes % 2 == 1


def drop_redundant_blanks(lines: List[str]) -> List[str]:
    """Drop a blank line after another blank or after an opening bracket."""
    result: List[str] = []
    for line in lines:
        if not line and result and (not result[-1] or result[-1].endswith(("(", "{"))):
            continue
        result.append(line)
    return result


def drop_blanks_in_statement(lines: List[str]) -> List[str]:
    """Remove blank lines while a statement is still open."""
    result: List[str] = []
    statement_open = False
    for index, line in enumerate(lines):
        if not line:
            if not statement_open:
                result.append(line)
            continue
        result.append(line)
        if _is_comment_line(line, index, lines) or _is_line_comment(line):
            continue
        if has_word(line, "begin"):
            statement_open = False
        else:
            statement_open = not _ends_statement(line)
    return result


def insert_terminators(lines: List[str]) -> List[str]:
    """Terminate a line when the next statement starts right after it."""
    result = list(lines)
    for index, line in enumerate(lines):
        if not line or TERMINATOR in code_text(line) or _has_comment(line):
            continue
        if is_inside_block_comment(line, index, lines):
            continue
        # a terminator appended to an unclosed literal would belong to the literal
        if open_quote(line) is not None:
            continue
        if line.endswith(("(", ",", "{")) or has_word(line, "begin"):
            continue
        following = _next_code_line(lines, index)
        if following is None or line_starts_with_keyword(following, STATEMENT_KEYWORDS):
            result[index] = line + TERMINATOR
    return result


def _next_code_line(lines: Sequence[str], index: int) -> Optional[str]:
    for below in lines[index + 1:]:
        if below and not _is_line_comment(below):
            return below
    return None


def blank_after_statements(lines: List[str]) -> List[str]:
    """Exactly one blank line after a terminated statement or ``BEGIN``."""
    result: List[str] = []
    index = 0
    count = len(lines)
    while index < count:
        line = lines[index]
        result.append(line)
        index += 1
        if not line or not (_ends_statement(line) or has_word(line, "begin")):
            continue
        following = index
        while following < count and not lines[following]:
            following += 1
        # at the end of the document only pre-existing trailing blanks survive
        if following < count or following > index:
            result.append("")
        index = following
    return result


def space_after_commas(lines: List[str]) -> List[str]:
    spaced = _map_segments(lines, CODE, lambda text: _COMMA_RE.sub(", ", text))
    return [line.rstrip() for line in spaced]


def indent_blocks(lines: List[str], indent: str = "    ") -> List[str]:
    """Indent lines inside an argument list, a brace block or a selector list."""
    result = []
    for index, line in enumerate(lines):
        if line and not is_block_comment_marker(line) and _inside_block(line, index, lines):
            result.append(indent + line)
        else:
            result.append(line)
    return result


def _inside_block(line: str, index: int, lines: Sequence[str]) -> bool:
    return (
        is_inside_bracket_block(line, index, lines, "(", ")")
        or is_inside_bracket_block(line, index, lines, "{", "}")
        or is_inside_selector_block(line, index, lines)
    )


PASSES: Tuple[Pass, ...] = (
    normalize_whitespace,
    dedupe_terminators,
    tighten_punctuation,
    trim_literals,
    drop_redundant_blanks,
    drop_blanks_in_statement,
    insert_terminators,
    blank_after_statements,
    space_after_commas,
)


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------
class CqlFormatter:
    """Runs the formatting passes over whole documents."""

    def __init__(self, options: Optional[FormattingOptions] = None) -> None:
        self.options = options or FormattingOptions()

    def format_lines(self, lines: Sequence[str]) -> List[str]:
        current = list(lines) or [""]
        for step in PASSES:
            current = step(current)
        current = indent_blocks(current, self.options.indent)
        return current or [""]

    def format_document(self, source_text: str) -> FormattedResult:
        lines = self.format_lines(source_text.split("\n"))
        formatted = "\n".join(lines)
        return FormattedResult(formatted_text=formatted, is_changed=formatted != source_text, lines=lines)

    def compute_edits(self, old_lines: Sequence[str]) -> List[FormatEdit]:
        """Edits turning *old_lines* into their formatted form."""
        new_lines = self.format_lines(old_lines)
        edits = _line_edits(list(old_lines), new_lines)
        logger.debug("Formatted %d lines into %d (%d edits)", len(old_lines), len(new_lines), len(edits))
        return edits


def _utf16_length(text: str) -> int:
    return LineBuffer(text).utf16_length


def _line_edits(old_lines: List[str], new_lines: List[str]) -> List[FormatEdit]:
    if not old_lines:
        old_lines = [""]
    edits: List[FormatEdit] = []
    last_old = len(old_lines) - 1
    for index, old in enumerate(old_lines):
        if index >= len(new_lines):
            break
        new_text = new_lines[index]
        if index == last_old and len(new_lines) > len(old_lines):
            new_text = "\n".join(new_lines[index:])
        edits.append(FormatEdit(line_index=index, old_length=_utf16_length(old), new_text=new_text))

    if len(new_lines) < len(old_lines):
        keep = len(new_lines) - 1
        edits.append(
            FormatEdit(
                line_index=keep,
                start_character=_utf16_length(old_lines[keep]),
                old_length=_utf16_length(old_lines[last_old]),
                end_line=last_old,
                new_text="",
            )
        )
    return edits


__all__ = [
    "IndentStyle",
    "FormattingOptions",
    "FormattedResult",
    "FormatEdit",
    "CqlFormatter",
    "PASSES",
    "normalize_whitespace",
    "dedupe_terminators",
    "tighten_punctuation",
    "trim_literals",
    "drop_redundant_blanks",
    "drop_blanks_in_statement",
    "insert_terminators",
    "blank_after_statements",
    "space_after_commas",
    "indent_blocks",
]
