"""Continuation analysis and line information helpers.

A physical line *continues* when the statement it belongs to goes on past
its end: a trailing backslash in code, an open bracket, or an open string.
Statements are maximal runs of physical lines joined by continuation.
"""

from __future__ import annotations

import re
from enum import Enum, auto
from typing import TYPE_CHECKING

from pymode.lexer import is_code, iter_code_matches
from pymode.tokens import ASSIGNMENT_RE, BLOCK_START_RE, LexicalState

if TYPE_CHECKING:
    from pymode.buffer import Buffer


class ContinuationKind(Enum):
    NONE = auto()
    BACKSLASH = auto()
    PAREN = auto()
    STRING = auto()


# ------------------------------------------------------------------
# Backslashes
# ------------------------------------------------------------------


def line_ends_backslash(buffer: Buffer, line: int) -> bool:
    """Return True if the line ends in an odd run of backslashes in code."""
    text = buffer.text
    start = buffer.line_start(line)
    pos = buffer.line_end(line)
    if pos > start and text[pos - 1] == "\r":
        pos -= 1
    count = 0
    while pos - count > start and text[pos - count - 1] == "\\":
        count += 1
    if count % 2 == 0:
        return False
    return not buffer.lexical_state(pos - 1).in_string_or_comment()


def backslash_start(buffer: Buffer, line: int) -> int | None:
    """Indentation point of the line where a backslash-continued line begins.

    Walks up over lines that start inside brackets or strings, so that
    ``foo(a,\\n    b) + \\`` reports the ``foo`` line.
    """
    if not line_ends_backslash(buffer, line):
        return None
    while line > 0:
        state = buffer.lexical_state(buffer.line_start(line))
        if not (state.paren_depth or state.in_string):
            break
        line -= 1
    return buffer.indentation_end(line)


# ------------------------------------------------------------------
# Continuation
# ------------------------------------------------------------------


def _following_state(buffer: Buffer, line: int) -> LexicalState:
    """Lexical state after the line's newline (or at end of text)."""
    if line < buffer.last_line:
        return buffer.lexical_state(buffer.line_start(line + 1))
    return buffer.lexical_state(len(buffer.text))


def continuation_kind(buffer: Buffer, line: int) -> ContinuationKind:
    """Classify why the line continues onto the next one."""
    if line_ends_backslash(buffer, line):
        return ContinuationKind.BACKSLASH
    state = _following_state(buffer, line)
    if state.paren_depth:
        return ContinuationKind.PAREN
    if state.in_string:
        return ContinuationKind.STRING
    return ContinuationKind.NONE


def line_continues(buffer: Buffer, line: int) -> bool:
    return continuation_kind(buffer, line) is not ContinuationKind.NONE


def is_continuation_line(buffer: Buffer, line: int) -> bool:
    """Return True if the line is part of the statement started above it."""
    return line > 0 and line_continues(buffer, line - 1)


def statement_start_line(buffer: Buffer, line: int) -> int:
    while line > 0 and line_continues(buffer, line - 1):
        line -= 1
    return line


def statement_end_line(buffer: Buffer, line: int) -> int:
    last = buffer.last_line
    while line < last and line_continues(buffer, line):
        line += 1
    return line


# ------------------------------------------------------------------
# Line information
# ------------------------------------------------------------------


def is_comment_line(buffer: Buffer, line: int) -> bool:
    pos = buffer.indentation_end(line)
    if pos >= buffer.line_end(line) or buffer.text[pos] != "#":
        return False
    return not buffer.lexical_state(pos).in_string


def is_code_line(buffer: Buffer, line: int) -> bool:
    """Return True for lines that are neither blank nor comment-only."""
    return not buffer.is_blank(line) and not is_comment_line(buffer, line)


def previous_code_line(buffer: Buffer, line: int) -> int | None:
    """Nearest code line strictly above ``line``."""
    line -= 1
    while line >= 0:
        if is_code_line(buffer, line):
            return line
        line -= 1
    return None


def next_code_line(buffer: Buffer, line: int) -> int | None:
    """Nearest code line at or below ``line``."""
    last = buffer.last_line
    while line <= last:
        if is_code_line(buffer, line):
            return line
        line += 1
    return None


def last_code_offset(buffer: Buffer, line: int) -> int | None:
    """Offset of the last code character on the line.

    Trailing comments, whitespace and a continuation backslash are trimmed.
    """
    text = buffer.text
    start = buffer.line_start(line)
    pos = buffer.line_end(line)
    state = buffer.lexical_state(pos)
    if state.comment_start is not None and state.comment_start >= start:
        pos = state.comment_start
    while pos > start and text[pos - 1] in " \t\f\r":
        pos -= 1
    if pos > start and text[pos - 1] == "\\" and line_ends_backslash(buffer, line):
        pos -= 1
        while pos > start and text[pos - 1] in " \t\f":
            pos -= 1
    return pos - 1 if pos > start else None


def statement_ends_with_colon(buffer: Buffer, line: int) -> bool:
    """Return True if the line's last code character is a colon in plain code."""
    offset = last_code_offset(buffer, line)
    if offset is None or buffer.text[offset] != ":":
        return False
    return buffer.lexical_state(offset).context_type() is None


def starts_block(buffer: Buffer, line: int) -> re.Match[str] | None:
    """Match a block keyword at the line's indentation point, if it is code."""
    match = BLOCK_START_RE.match(buffer.text, buffer.line_start(line), buffer.line_end(line))
    if match is None or not is_code(buffer, buffer.indentation_end(line)):
        return None
    return match


def is_block_header(buffer: Buffer, line: int) -> bool:
    """Return True if a statement starts on this line and is a colon-ended block header."""
    if is_continuation_line(buffer, line) or starts_block(buffer, line) is None:
        return False
    return statement_ends_with_colon(buffer, statement_end_line(buffer, line))


# ------------------------------------------------------------------
# Continuation anchors
# ------------------------------------------------------------------


def block_continuation_start(buffer: Buffer, line: int) -> int | None:
    """For a continuation of a block header (``if a and \\``), the header's offset."""
    if not is_continuation_line(buffer, line):
        return None
    start = statement_start_line(buffer, line)
    if starts_block(buffer, start) is None:
        return None
    return buffer.indentation_end(start)


def assignment_continuation_start(buffer: Buffer, line: int) -> int | None:
    """For a continuation of an assignment, the offset just past the operator.

    Whitespace following the operator is skipped.  Statements starting with a
    block keyword never count as assignments.
    """
    if not is_continuation_line(buffer, line):
        return None
    start = statement_start_line(buffer, line)
    if starts_block(buffer, start) is not None:
        return None
    text = buffer.text
    end = buffer.line_end(start)
    for match in iter_code_matches(buffer, ASSIGNMENT_RE, buffer.line_start(start), end):
        pos = match.end()
        while pos < end and text[pos] in " \t":
            pos += 1
        return pos
    return None
