"""Region commands built on the indentation calculator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pymode.continuation import last_code_offset
from pymode.dedent import dedent_match
from pymode.errors import ShiftError
from pymode.indent import compute_indentation

if TYPE_CHECKING:
    from pymode.buffer import Buffer

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Shifting
# ------------------------------------------------------------------


def _line_range(buffer: Buffer, start_line: int, end_line: int) -> range:
    return range(max(0, start_line), min(end_line, buffer.last_line) + 1)


def shift_right(
    buffer: Buffer, start_line: int, end_line: int, count: int | None = None
) -> None:
    """Indent every non-blank line in the range by ``count`` columns."""
    if count is None:
        count = buffer.indent_unit
    for line in _line_range(buffer, start_line, end_line):
        if not buffer.is_blank(line):
            buffer.set_indentation(line, buffer.indentation(line) + count)


def shift_left(
    buffer: Buffer, start_line: int, end_line: int, count: int | None = None
) -> None:
    """Dedent every non-blank line in the range by ``count`` columns.

    Raises ShiftError, leaving the buffer untouched, if any non-blank line is
    indented less than ``count``.
    """
    if count is None:
        count = buffer.indent_unit
    lines = [line for line in _line_range(buffer, start_line, end_line) if not buffer.is_blank(line)]
    for line in lines:
        if buffer.indentation(line) < count:
            raise ShiftError("can't shift all lines enough", line, count, buffer.text)
    for line in lines:
        buffer.set_indentation(line, buffer.indentation(line) - count)


# ------------------------------------------------------------------
# Re-indentation
# ------------------------------------------------------------------


def indent_region(buffer: Buffer, start_line: int, end_line: int) -> list[int]:
    """Re-indent the lines in the range, top to bottom; return the lines changed.

    Blank lines and lines that start inside a string are left alone.
    """
    changed = []
    for line in _line_range(buffer, start_line, end_line):
        if buffer.is_blank(line):
            continue
        if buffer.lexical_state(buffer.line_start(line)).in_string:
            continue
        version = buffer.version
        buffer.set_indentation(line, compute_indentation(buffer, line))
        if buffer.version != version:
            changed.append(line)
    logger.debug("re-indented %d of lines %d..%d", len(changed), start_line, end_line)
    return changed


def reindent(buffer: Buffer) -> bool:
    """Re-indent the whole buffer; return True if anything changed."""
    return bool(indent_region(buffer, 0, buffer.last_line))


# ------------------------------------------------------------------
# Electric colon
# ------------------------------------------------------------------


def electric_colon_indentation(buffer: Buffer, line: int) -> int | None:
    """The column a just-typed colon should dedent the line to, if any.

    Only a line ending in a code colon (not ``::``) that is indented past its
    computed indentation, and that would then close a block, is dedented.
    """
    offset = last_code_offset(buffer, line)
    text = buffer.text
    if offset is None or text[offset] != ":":
        return None
    if offset > buffer.line_start(line) and text[offset - 1] == ":":
        return None
    if buffer.lexical_state(offset).context_type() is not None:
        return None
    column = compute_indentation(buffer, line)
    if buffer.indentation(line) <= column:
        return None
    if dedent_match(buffer, line, column) is None:
        return None
    return column


def electric_colon(buffer: Buffer, line: int) -> int | None:
    """Apply the colon dedent; return the offset of the header the line now closes."""
    column = electric_colon_indentation(buffer, line)
    if column is None:
        return None
    buffer.set_indentation(line, column)
    return dedent_match(buffer, line)
