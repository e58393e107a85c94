"""Structural navigation over statements, blocks and definitions.

Nothing here keeps a tree.  Parents are found on demand by walking up to
the nearest statement with a smaller indentation, and block ends by walking
down over the statements indented deeper than the header.  Listing every
definition is the exception: it tracks the open statements in one forward
pass.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pymode.continuation import (
    is_block_header,
    is_code_line,
    is_continuation_line,
    next_code_line,
    previous_code_line,
    starts_block,
    statement_end_line,
    statement_start_line,
)
from pymode.lexer import is_code
from pymode.tokens import DECORATOR_RE, DEFUN_RE

if TYPE_CHECKING:
    from pymode.buffer import Buffer


@dataclass(frozen=True, slots=True)
class Block:
    """A block header line and the last line of its body."""

    keyword: str
    line: int
    end_line: int


@dataclass(frozen=True, slots=True)
class Defun:
    """A function or class definition."""

    kind: str
    name: str
    path: tuple[str, ...]
    line: int
    start: int
    end: int
    name_start: int

    @property
    def qualified_name(self) -> str:
        return ".".join(self.path)


# ------------------------------------------------------------------
# Shared walks
# ------------------------------------------------------------------


def _reference_line(buffer: Buffer, offset: int) -> int | None:
    """Statement start for offset; blank and comment lines use the code above."""
    line = buffer.line_at(offset)
    if not is_code_line(buffer, line) and not is_continuation_line(buffer, line):
        prev = previous_code_line(buffer, line)
        if prev is None:
            return None
        line = prev
    return statement_start_line(buffer, line)


def _parent_line(buffer: Buffer, line: int) -> int | None:
    """Nearest statement start above ``line`` with a smaller indentation."""
    indentation = buffer.indentation(line)
    candidate = line - 1
    while candidate >= 0:
        if is_code_line(buffer, candidate):
            start = statement_start_line(buffer, candidate)
            if buffer.indentation(start) < indentation:
                return start
            candidate = start
        candidate -= 1
    return None


def _ancestors(buffer: Buffer, line: int) -> Iterator[int]:
    parent = _parent_line(buffer, line)
    while parent is not None:
        yield parent
        parent = _parent_line(buffer, parent)


def _self_and_ancestors(buffer: Buffer, line: int) -> Iterator[int]:
    yield line
    yield from _ancestors(buffer, line)


def _block_end_line(buffer: Buffer, header: int) -> int:
    indentation = buffer.indentation(header)
    last = statement_end_line(buffer, header)
    line = last + 1
    while line <= buffer.last_line:
        if not is_code_line(buffer, line):
            line += 1
            continue
        if buffer.indentation(line) <= indentation:
            break
        last = statement_end_line(buffer, line)
        line = last + 1
    return last


def _unit_end_line(buffer: Buffer, line: int) -> int:
    """Last line of a statement, or of the whole block when it is a header."""
    if is_block_header(buffer, line):
        return _block_end_line(buffer, line)
    return statement_end_line(buffer, line)


def _unit_end(buffer: Buffer, line: int) -> int:
    return buffer.line_end(_unit_end_line(buffer, line))


def _is_statement_start(buffer: Buffer, line: int) -> bool:
    return is_code_line(buffer, line) and not is_continuation_line(buffer, line)


# ------------------------------------------------------------------
# Statements
# ------------------------------------------------------------------


def statement_bounds(buffer: Buffer, offset: int) -> tuple[int, int]:
    """Start (indentation point of the first line) and end of the statement at offset."""
    line = buffer.line_at(offset)
    first = statement_start_line(buffer, line)
    last = statement_end_line(buffer, line)
    return buffer.indentation_end(first), buffer.line_end(last)


def beginning_of_statement(buffer: Buffer, offset: int) -> int:
    return statement_bounds(buffer, offset)[0]


def end_of_statement(buffer: Buffer, offset: int) -> int:
    return statement_bounds(buffer, offset)[1]


def forward_statement(buffer: Buffer, offset: int) -> int | None:
    """Start of the next statement, skipping blank and comment lines."""
    last = statement_end_line(buffer, buffer.line_at(offset))
    line = next_code_line(buffer, last + 1)
    return None if line is None else buffer.indentation_end(line)


def backward_statement(buffer: Buffer, offset: int) -> int | None:
    """Start of the previous statement."""
    first = statement_start_line(buffer, buffer.line_at(offset))
    line = previous_code_line(buffer, first)
    if line is None:
        return None
    return buffer.indentation_end(statement_start_line(buffer, line))


# ------------------------------------------------------------------
# Blocks
# ------------------------------------------------------------------


def block_bounds(buffer: Buffer, offset: int) -> tuple[int, int] | None:
    """Start of the innermost block header around offset and end of its body."""
    ref = _reference_line(buffer, offset)
    if ref is None:
        return None
    for line in _self_and_ancestors(buffer, ref):
        if not is_block_header(buffer, line):
            continue
        end = buffer.line_end(_block_end_line(buffer, line))
        if offset <= end:
            return buffer.indentation_end(line), end
    return None


def beginning_of_block(buffer: Buffer, offset: int) -> int | None:
    bounds = block_bounds(buffer, offset)
    return None if bounds is None else bounds[0]


def end_of_block(buffer: Buffer, offset: int) -> int | None:
    bounds = block_bounds(buffer, offset)
    return None if bounds is None else bounds[1]


def forward_block(buffer: Buffer, offset: int) -> int | None:
    """Start of the next statement that begins with a block keyword."""
    line = statement_end_line(buffer, buffer.line_at(offset)) + 1
    while line <= buffer.last_line:
        if _is_statement_start(buffer, line) and starts_block(buffer, line) is not None:
            return buffer.indentation_end(line)
        line += 1
    return None


def backward_block(buffer: Buffer, offset: int) -> int | None:
    """Start of the previous statement that begins with a block keyword."""
    line = statement_start_line(buffer, buffer.line_at(offset)) - 1
    while line >= 0:
        if _is_statement_start(buffer, line) and starts_block(buffer, line) is not None:
            return buffer.indentation_end(line)
        line -= 1
    return None


def up_block(buffer: Buffer, offset: int) -> int | None:
    """Start of the header of the block enclosing the statement at offset."""
    ref = _reference_line(buffer, offset)
    if ref is None:
        return None
    for line in _ancestors(buffer, ref):
        if is_block_header(buffer, line):
            return buffer.indentation_end(line)
    return None


def iter_blocks(buffer: Buffer) -> Iterator[Block]:
    """Yield every block header in the buffer, in order."""
    for line in range(buffer.line_count):
        if not _is_statement_start(buffer, line):
            continue
        match = starts_block(buffer, line)
        if match is not None and is_block_header(buffer, line):
            yield Block(match.group(1), line, _block_end_line(buffer, line))


def move_across_block(buffer: Buffer, offset: int, forward: bool = True) -> int | None:
    """Move over whole statements and blocks, treating each block as one unit.

    Forward: from inside a unit, go to its end; from the end of a unit, go to
    the end of the next sibling (or the first child, after a header); with
    no sibling left, go to the end of the nearest ancestor that ends after
    point.  Backward mirrors this with unit starts.  Returns None when there
    is nowhere to go.
    """
    if forward:
        return _forward_unit(buffer, offset)
    return _backward_unit(buffer, offset)


def _forward_unit(buffer: Buffer, offset: int) -> int | None:
    ref = _reference_line(buffer, offset)
    if ref is None:
        line = next_code_line(buffer, buffer.line_at(offset))
        return None if line is None else _unit_end(buffer, statement_start_line(buffer, line))

    ref_last = statement_end_line(buffer, ref)
    if offset < buffer.line_end(ref_last):
        return _unit_end(buffer, ref)

    following = next_code_line(buffer, ref_last + 1)
    if following is None:
        return None
    if buffer.indentation(following) >= buffer.indentation(ref):
        return _unit_end(buffer, following)
    for ancestor in _ancestors(buffer, ref):
        end = _unit_end(buffer, ancestor)
        if end > offset:
            return end
    return _unit_end(buffer, following)


def _backward_unit(buffer: Buffer, offset: int) -> int | None:
    line = buffer.line_at(offset)
    if is_code_line(buffer, line) or is_continuation_line(buffer, line):
        current = statement_start_line(buffer, line)
        if offset > buffer.indentation_end(current):
            return buffer.indentation_end(current)
    else:
        following = next_code_line(buffer, line)
        if following is None:
            prev = previous_code_line(buffer, line)
            if prev is None:
                return None
            top = statement_start_line(buffer, prev)
            parent = _parent_line(buffer, top)
            while parent is not None:
                top, parent = parent, _parent_line(buffer, parent)
            return buffer.indentation_end(top)
        current = statement_start_line(buffer, following)

    prev = previous_code_line(buffer, current)
    if prev is None:
        return None
    indentation = buffer.indentation(current)
    candidate = statement_start_line(buffer, prev)
    while buffer.indentation(candidate) > indentation:
        parent = _parent_line(buffer, candidate)
        if parent is None:
            break
        candidate = parent
    return buffer.indentation_end(candidate)


# ------------------------------------------------------------------
# Definitions
# ------------------------------------------------------------------


def _defun_header(buffer: Buffer, line: int) -> re.Match[str] | None:
    match = DEFUN_RE.match(buffer.text, buffer.line_start(line), buffer.line_end(line))
    if match is None or not is_code(buffer, buffer.indentation_end(line)):
        return None
    if is_continuation_line(buffer, line):
        return None
    return match


def _is_decorator(buffer: Buffer, line: int) -> bool:
    if DECORATOR_RE.match(buffer.text, buffer.line_start(line), buffer.line_end(line)) is None:
        return False
    return is_code(buffer, buffer.indentation_end(line))


def _first_decorator_line(buffer: Buffer, header: int) -> int:
    """First line of the decorator statements directly above a definition."""
    indentation = buffer.indentation(header)
    first = header
    line = header - 1
    while line >= 0 and not buffer.is_blank(line):
        start = statement_start_line(buffer, line)
        if buffer.indentation(start) != indentation or not _is_decorator(buffer, start):
            break
        first = start
        line = start - 1
    return first


def _decorated_line(buffer: Buffer, line: int) -> int | None:
    """The statement a run of decorators applies to."""
    while _is_decorator(buffer, line):
        following = next_code_line(buffer, statement_end_line(buffer, line) + 1)
        if following is None:
            return None
        line = following
    return line


def _defun_span(buffer: Buffer, header: int) -> tuple[int, int]:
    first = _first_decorator_line(buffer, header)
    return buffer.indentation_end(first), _unit_end(buffer, header)


def _enclosing_defun_lines(buffer: Buffer, offset: int) -> list[int]:
    """Header lines of the definitions around offset, innermost first."""
    ref = _reference_line(buffer, offset)
    if ref is None:
        return []
    ref = _decorated_line(buffer, ref)
    if ref is None:
        return []
    lines = []
    for line in _self_and_ancestors(buffer, ref):
        if _defun_header(buffer, line) is None:
            continue
        first = _first_decorator_line(buffer, line)
        if buffer.line_start(first) <= offset <= _unit_end(buffer, line):
            lines.append(line)
    return lines


def defun_bounds(buffer: Buffer, offset: int) -> tuple[int, int] | None:
    """Bounds of the innermost definition around offset, decorators included."""
    lines = _enclosing_defun_lines(buffer, offset)
    if not lines:
        return None
    return _defun_span(buffer, lines[0])


def beginning_of_defun(buffer: Buffer, offset: int) -> int | None:
    bounds = defun_bounds(buffer, offset)
    return None if bounds is None else bounds[0]


def end_of_defun(buffer: Buffer, offset: int) -> int | None:
    bounds = defun_bounds(buffer, offset)
    return None if bounds is None else bounds[1]


def enclosing_defun_path(buffer: Buffer, offset: int) -> list[str]:
    """Names of the definitions around offset, outermost first."""
    names = []
    for line in reversed(_enclosing_defun_lines(buffer, offset)):
        match = _defun_header(buffer, line)
        assert match is not None
        names.append(match.group(2))
    return names


def current_defun(buffer: Buffer, offset: int, include_type: bool = False) -> str | None:
    """Dotted name of the definition around offset, e.g. ``"Foo.bar"``.

    With ``include_type`` the innermost definition's keyword is prepended:
    ``"def Foo.bar"``.
    """
    lines = _enclosing_defun_lines(buffer, offset)
    if not lines:
        return None
    name = ".".join(enclosing_defun_path(buffer, offset))
    if include_type:
        match = _defun_header(buffer, lines[0])
        assert match is not None
        return f"{match.group(1)} {name}"
    return name


def iter_defuns(buffer: Buffer) -> Iterator[Defun]:
    """Yield every definition in the buffer, in order, with its qualified path.

    Paths come from one forward pass over statement starts: the stack holds
    the open statements with strictly increasing indentation, which are the
    ancestors of the next statement once deeper-or-equal entries are popped.
    """
    # (indentation, definition name or None)
    open_statements: list[tuple[int, str | None]] = []
    for line in range(buffer.line_count):
        if not _is_statement_start(buffer, line):
            continue
        indentation = buffer.indentation(line)
        while open_statements and open_statements[-1][0] >= indentation:
            open_statements.pop()
        match = _defun_header(buffer, line)
        name = None if match is None else match.group(2)
        if match is not None:
            path = tuple(outer for _, outer in open_statements if outer is not None) + (name,)
            start, end = _defun_span(buffer, line)
            yield Defun(match.group(1), name, path, line, start, end, match.start(2))
        open_statements.append((indentation, name))
