"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Any

import pytest

from pymode.buffer import Buffer
from pymode.config import IndentConfig
from pymode.indent import compute_indentation


@pytest.fixture
def make_buffer():
    """Return a helper that builds a Buffer from source and indentation settings."""

    def _make(source: str, **settings: Any) -> Buffer:
        return Buffer(source, IndentConfig(**settings))

    return _make


@pytest.fixture
def indent_of(make_buffer):
    """Return a helper computing the indentation of one line (default: the last)."""

    def _indent(source: str, line: int | None = None, **settings: Any) -> int:
        buffer = make_buffer(source, **settings)
        return compute_indentation(buffer, buffer.last_line if line is None else line)

    return _indent


@pytest.fixture
def at():
    """Return a helper giving the offset of the n-th occurrence of a substring."""

    def _at(buffer: Buffer, needle: str, n: int = 0) -> int:
        pos = -1
        for _ in range(n + 1):
            pos = buffer.text.index(needle, pos + 1)
        return pos

    return _at
