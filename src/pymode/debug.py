"""--debug indentation context dump to stderr."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from pymode.continuation import continuation_kind
from pymode.indent import compute_indentation, indentation_context

if TYPE_CHECKING:
    from pymode.buffer import Buffer


def dump_contexts(buffer: Buffer, *, file: TextIO = sys.stderr) -> None:
    """Print each line's indentation context and computed column to *file*."""
    width = len(str(buffer.line_count))
    for line in range(buffer.line_count):
        _dump_line(buffer, line, width, file)


def _dump_line(buffer: Buffer, line: int, width: int, f: TextIO) -> None:
    context = indentation_context(buffer, line)
    anchor = "" if context.anchor is None else f"@{buffer.line_at(context.anchor) + 1}"
    kind = continuation_kind(buffer, line).name
    column = compute_indentation(buffer, line)
    f.write(
        f"{line + 1:>{width}} {context.status.name}{anchor} "
        f"indent={buffer.indentation(line)}->{column} continues={kind}\n"
    )
