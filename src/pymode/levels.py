"""Indentation levels: the plausible indentation stops of a line, and cycling among them.

The cycling state is explicit.  Callers keep the ``IndentLevels`` returned by
``indent_line`` and hand it back on the next request; a request for the same
line at the same buffer version counts as a repeat and moves to the next
level instead of recomputing.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from pymode.config import validate_indent_unit
from pymode.indent import compute_indentation

if TYPE_CHECKING:
    from pymode.buffer import Buffer


@dataclass(frozen=True, slots=True)
class IndentLevels:
    """Candidate columns for a line and the index of the one applied."""

    levels: tuple[int, ...]
    index: int
    line: int | None = None
    version: int | None = None

    @property
    def current(self) -> int:
        return self.levels[self.index]

    def is_for(self, buffer: Buffer, line: int) -> bool:
        """Return True if this state was produced for ``line`` with no edit since."""
        return self.line == line and self.version == buffer.version


def calculate_levels(indentation: int, indent_unit: int) -> IndentLevels:
    """Split an indentation into unit steps, plus the remainder as a final stop."""
    validate_indent_unit(indent_unit)
    indentation = max(0, indentation)
    steps, remainder = divmod(indentation, indent_unit)
    levels = [indent_unit * step for step in range(steps + 1)]
    if remainder:
        levels.append(indent_unit * steps + remainder)
    return IndentLevels(tuple(levels), len(levels) - 1)


def cycle(levels: Sequence[int], index: int) -> int:
    """Step to the previous level, wrapping around to the last one."""
    index -= 1
    if index < 0:
        index = len(levels) - 1
    return index


def toggle(state: IndentLevels) -> IndentLevels:
    return replace(state, index=cycle(state.levels, state.index))


def indentation_levels(buffer: Buffer, line: int, indent_unit: int | None = None) -> IndentLevels:
    """Compute the levels for a line from scratch; the computed column is current."""
    unit = buffer.indent_unit if indent_unit is None else indent_unit
    state = calculate_levels(compute_indentation(buffer, line), unit)
    return replace(state, line=line, version=buffer.version)


def indent_line(
    buffer: Buffer,
    line: int,
    previous: IndentLevels | None = None,
    force_toggle: bool = False,
) -> IndentLevels:
    """Indent the line, cycling through the levels on repeated requests.

    ``force_toggle`` treats ``previous`` as a repeat even if the buffer was
    edited since it was computed, as long as it is for the same line.
    """
    repeated = previous is not None and (
        previous.is_for(buffer, line) or (force_toggle and previous.line == line)
    )
    if repeated and previous.levels != (0,):
        state = toggle(previous)
    else:
        state = indentation_levels(buffer, line)
    buffer.set_indentation(line, state.current)
    return replace(state, version=buffer.version)


def dedent_line(
    buffer: Buffer, line: int, previous: IndentLevels | None = None
) -> IndentLevels | None:
    """Move the line to the next lower level (the backspace-in-indentation command).

    Returns None without touching the buffer when the line starts inside a
    string or is not indented.
    """
    if buffer.lexical_state(buffer.line_start(line)).in_string or buffer.indentation(line) == 0:
        return None
    if previous is not None and previous.is_for(buffer, line):
        state = toggle(previous)
    else:
        state = indentation_levels(buffer, line)
        current = buffer.indentation(line)
        lower = [i for i, level in enumerate(state.levels) if level < current]
        state = replace(state, index=lower[-1] if lower else len(state.levels) - 1)
    buffer.set_indentation(line, state.current)
    return replace(state, version=buffer.version)
