"""Indentation context resolution and indentation calculation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from pymode.continuation import (
    assignment_continuation_start,
    backslash_start,
    block_continuation_start,
    line_ends_backslash,
    previous_code_line,
    starts_block,
    statement_ends_with_colon,
    statement_start_line,
)
from pymode.lexer import iter_code_matches
from pymode.tokens import (
    ALIGNING_KEYWORD_RE,
    BLOCK_KEYWORD_SPACE_RE,
    CLOSE_BRACKETS,
    FIRST_WORD_RE,
)

if TYPE_CHECKING:
    from pymode.buffer import Buffer

_DOT_RE = re.compile(r"\.")


class IndentStatus(Enum):
    NO_INDENT = auto()
    INSIDE_PAREN = auto()
    INSIDE_STRING = auto()
    AFTER_BACKSLASH = auto()
    AFTER_BEGINNING_OF_BLOCK = auto()
    AFTER_LINE = auto()


@dataclass(frozen=True, slots=True)
class IndentContext:
    """Why a line is indented the way it is, and the offset it is measured from."""

    status: IndentStatus
    anchor: int | None = None


def indentation_context(buffer: Buffer, line: int) -> IndentContext:
    """Classify the line's indentation context.

    The checks run in a fixed priority order: a colon-ended line inside an
    unterminated string is INSIDE_STRING, never AFTER_BEGINNING_OF_BLOCK.
    """
    if line == 0:
        return IndentContext(IndentStatus.NO_INDENT)

    state = buffer.lexical_state(buffer.line_start(line))
    if state.paren_starts:
        return IndentContext(IndentStatus.INSIDE_PAREN, state.paren_starts[-1])
    if state.string is not None:
        return IndentContext(IndentStatus.INSIDE_STRING, state.string.start)

    anchor = backslash_start(buffer, line - 1)
    if anchor is not None:
        return IndentContext(IndentStatus.AFTER_BACKSLASH, anchor)

    prev = previous_code_line(buffer, line)
    if prev is None:
        return IndentContext(IndentStatus.NO_INDENT)
    start = statement_start_line(buffer, prev)
    if statement_ends_with_colon(buffer, prev) and starts_block(buffer, start) is not None:
        return IndentContext(IndentStatus.AFTER_BEGINNING_OF_BLOCK, buffer.indentation_end(start))
    return IndentContext(IndentStatus.AFTER_LINE, buffer.indentation_end(start))


def compute_indentation(buffer: Buffer, line: int) -> int:
    """Return the column the line should be indented to."""
    context = indentation_context(buffer, line)
    unit = buffer.indent_unit
    anchor = context.anchor

    match context.status:
        case IndentStatus.NO_INDENT:
            column = 0
        case IndentStatus.AFTER_BEGINNING_OF_BLOCK:
            column = _anchor_indentation(buffer, anchor) + unit
        case IndentStatus.AFTER_LINE:
            column = _anchor_indentation(buffer, anchor)
            if starts_with_dedenter(buffer, line):
                column -= unit
        case IndentStatus.INSIDE_STRING:
            column = _anchor_indentation(buffer, anchor)
        case IndentStatus.AFTER_BACKSLASH:
            column = _after_backslash(buffer, line, anchor)
        case IndentStatus.INSIDE_PAREN:
            column = _inside_paren(buffer, line, anchor)

    return max(0, column)


def starts_with_dedenter(buffer: Buffer, line: int) -> bool:
    """Return True if the line's first word is one of the buffer's dedenters."""
    match = FIRST_WORD_RE.match(buffer.text, buffer.line_start(line), buffer.line_end(line))
    return match is not None and match.group(1) in buffer.config.dedenters


def _anchor_indentation(buffer: Buffer, anchor: int | None) -> int:
    assert anchor is not None
    return buffer.indentation(buffer.line_at(anchor))


def _after_backslash(buffer: Buffer, line: int, anchor: int | None) -> int:
    assert anchor is not None
    text = buffer.text
    unit = buffer.indent_unit

    # Dot continuation: align with the last code dot of the line above
    pos = buffer.indentation_end(line)
    if pos < buffer.line_end(line) and text[pos] == ".":
        prev = line - 1
        while prev > 0 and buffer.lexical_state(buffer.line_start(prev)).paren_depth:
            prev -= 1
        start, end = buffer.line_start(prev), buffer.line_end(prev)
        for match in iter_code_matches(buffer, _DOT_RE, start, end, reverse=True):
            return buffer.column(match.start())
        return buffer.indentation(prev) + unit

    # Continuation of a block header: align after the keyword
    header = block_continuation_start(buffer, line)
    if header is not None:
        header_line = buffer.line_at(header)
        match = BLOCK_KEYWORD_SPACE_RE.match(
            text, buffer.line_start(header_line), buffer.line_end(header_line)
        )
        assert match is not None
        return buffer.column(match.end())

    # Continuation of an assignment: align after the operator
    assignment = assignment_continuation_start(buffer, line)
    if assignment is not None:
        return buffer.column(assignment)

    prev = buffer.line_at(anchor)
    if prev > 0 and line_ends_backslash(buffer, prev - 1):
        # Third or later line of the continuation: keep the established indent
        return buffer.indentation(prev)
    match = ALIGNING_KEYWORD_RE.match(text, buffer.line_start(prev), buffer.line_end(prev))
    if match is not None:
        return buffer.column(match.end())
    return buffer.indentation(prev) + unit


def _inside_paren(buffer: Buffer, line: int, opener: int | None) -> int:
    assert opener is not None
    text = buffer.text
    unit = buffer.indent_unit
    opener_line = buffer.line_at(opener)

    pos = buffer.indentation_end(line)
    starts_with_closer = pos < buffer.line_end(line) and text[pos] in CLOSE_BRACKETS
    if starts_with_closer:
        depth_after = buffer.lexical_state(pos + 1).paren_depth
        opener_line_depth = buffer.lexical_state(buffer.line_start(opener_line)).paren_depth
        if depth_after <= opener_line_depth:
            return buffer.indentation(opener_line)

    # Hanging when nothing but whitespace or a comment follows the opener
    end = buffer.line_end(opener_line)
    pos = opener + 1
    while pos < end and text[pos] in " \t\f\r":
        pos += 1
    hanging = pos >= end or text[pos] == "#"
    if hanging:
        column = buffer.indentation(opener_line) + unit
    else:
        column = buffer.column(pos)

    if starts_with_closer:
        column -= unit
    elif hanging and starts_block(buffer, opener_line) is not None:
        # Hanging opener on a block header line: one extra level
        column += unit
    return column
