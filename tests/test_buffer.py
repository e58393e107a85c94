"""Tests for the source buffer: addressing, columns, edits and indent-unit guessing."""

from __future__ import annotations

import logging

import pytest

from pymode.buffer import Buffer
from pymode.config import IndentConfig
from pymode.errors import ConfigError

# ---------------------------------------------------------------------------
# Line addressing
# ---------------------------------------------------------------------------


class TestLines:
    def test_counts(self) -> None:
        buf = Buffer("ab\ncd\n")
        assert buf.line_count == 3
        assert buf.last_line == 2

    def test_empty_buffer_has_one_line(self) -> None:
        buf = Buffer("")
        assert buf.line_count == 1
        assert buf.line_end(0) == 0

    def test_starts_and_ends(self) -> None:
        buf = Buffer("ab\ncd\n")
        assert buf.line_start(1) == 3
        assert buf.line_end(0) == 2
        assert buf.line_end(2) == 6
        assert buf.line_text(1) == "cd"

    def test_line_at(self) -> None:
        buf = Buffer("ab\ncd\n")
        assert buf.line_at(0) == 0
        assert buf.line_at(2) == 0
        assert buf.line_at(3) == 1
        assert buf.line_at(100) == 2

    def test_offset_of_clamps_to_line(self) -> None:
        buf = Buffer("ab\ncd\n")
        assert buf.offset_of(1, 1) == 4
        assert buf.offset_of(1, 10) == 5


# ---------------------------------------------------------------------------
# Columns and indentation
# ---------------------------------------------------------------------------


class TestColumns:
    def test_tab_expands_to_tab_width(self) -> None:
        assert Buffer("\tx").column(1) == 8
        assert Buffer("\tx", IndentConfig(tab_width=4)).column(1) == 4

    def test_tab_after_space_goes_to_next_stop(self) -> None:
        assert Buffer(" \tx").column(2) == 8

    def test_indentation(self) -> None:
        buf = Buffer("x\n  \ty\n")
        assert buf.indentation(0) == 0
        assert buf.indentation(1) == 8
        assert buf.indentation_end(1) == 5

    def test_blank_lines(self) -> None:
        buf = Buffer("x\n   \n")
        assert not buf.is_blank(0)
        assert buf.is_blank(1)
        assert buf.is_blank(2)


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


class TestEdits:
    def test_set_indentation_writes_spaces(self) -> None:
        buf = Buffer("if x:\n\ty\n")
        buf.set_indentation(1, 4)
        assert buf.text == "if x:\n    y\n"
        assert buf.version == 1

    def test_set_indentation_noop_keeps_version(self) -> None:
        buf = Buffer("    y")
        buf.set_indentation(0, 4)
        assert buf.version == 0

    def test_set_indentation_clamps_negative(self) -> None:
        buf = Buffer("  y")
        buf.set_indentation(0, -3)
        assert buf.text == "y"

    def test_replace(self) -> None:
        buf = Buffer("abc")
        buf.replace(1, 2, "XY")
        assert buf.text == "aXYc"
        assert buf.line_count == 1

    def test_replace_updates_lines(self) -> None:
        buf = Buffer("abc")
        buf.replace(1, 1, "\n")
        assert buf.line_count == 2
        assert buf.line_text(1) == "bc"

    def test_replace_invalid_range(self) -> None:
        buf = Buffer("abc")
        with pytest.raises(IndexError):
            buf.replace(2, 1, "")
        with pytest.raises(IndexError):
            buf.replace(0, 10, "")

    def test_set_text(self) -> None:
        buf = Buffer("x = (")
        assert buf.lexical_state(5).paren_depth == 1
        buf.set_text("x = 1")
        assert buf.version == 1
        assert buf.lexical_state(5).paren_depth == 0

    def test_set_text_unchanged(self) -> None:
        buf = Buffer("x")
        buf.set_text("x")
        assert buf.version == 0


# ---------------------------------------------------------------------------
# Indent unit
# ---------------------------------------------------------------------------


class TestIndentUnit:
    def test_default_from_config(self) -> None:
        assert Buffer("", IndentConfig(indent_unit=2)).indent_unit == 2

    def test_setter_validates(self) -> None:
        buf = Buffer("")
        with pytest.raises(ConfigError):
            buf.indent_unit = 0

    def test_guess_on_construction(self) -> None:
        buf = Buffer("if x:\n  y\n", IndentConfig(guess_indent=True))
        assert buf.indent_unit == 2

    def test_guess_skips_comment_lines(self) -> None:
        buf = Buffer("def f():\n# c\n   pass\n")
        assert buf.guess_indent_unit() == 3

    def test_guess_ignores_indented_headers(self) -> None:
        buf = Buffer("  if x:\n      y\nclass A:\n  pass\n")
        assert buf.guess_indent_unit() == 2

    def test_guess_follows_multiline_header(self) -> None:
        buf = Buffer("def f(a,\n      b):\n   return a\n")
        assert buf.guess_indent_unit() == 3

    def test_failed_guess_keeps_unit_and_logs(self, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="pymode.buffer")
        buf = Buffer("x = 1\n", IndentConfig(indent_unit=3, guess_indent=True))
        assert buf.indent_unit == 3
        assert "can't guess indent unit" in caplog.text
