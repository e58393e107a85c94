"""Indentation, lexical context and structural navigation for Python source."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pymode.dedent import dedent_match
from pymode.indent import compute_indentation
from pymode.lexer import classify as lexical_context
from pymode.levels import cycle, indentation_levels
from pymode.navigation import block_bounds, defun_bounds, enclosing_defun_path, statement_bounds

if TYPE_CHECKING:
    from pymode.config import IndentConfig

__version__ = "0.1.0"

__all__ = [
    "block_bounds",
    "compute_indentation",
    "cycle",
    "dedent_match",
    "defun_bounds",
    "enclosing_defun_path",
    "indentation_levels",
    "lexical_context",
    "reindent",
    "statement_bounds",
]


def reindent(source: str, config: IndentConfig | None = None) -> str:
    """Return ``source`` with every line re-indented."""
    from pymode.buffer import Buffer
    from pymode.editing import reindent as reindent_buffer

    buffer = Buffer(source, config)
    reindent_buffer(buffer)
    return buffer.text
