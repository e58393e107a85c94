"""Source buffer: line/offset addressing over mutable Python source text."""

from __future__ import annotations

import logging
from bisect import bisect_right

from pymode.config import IndentConfig, guess_indent_unit, validate_indent_unit
from pymode.lexer import ScanCache
from pymode.tokens import LexicalState

logger = logging.getLogger(__name__)


class Buffer:
    """Python source text with line addressing, edits and a lexical scan cache.

    Lines and offsets are 0-based.  Columns are visual columns with tabs
    expanded to ``config.tab_width``.  Every effective edit bumps ``version``
    and drops the scan checkpoints past the edit position.
    """

    def __init__(self, text: str = "", config: IndentConfig | None = None) -> None:
        self._text = text
        self.config = config if config is not None else IndentConfig()
        self.version = 0
        self._line_starts: list[int] | None = None
        self._scan_cache = ScanCache()
        self._indent_unit = self.config.indent_unit
        if self.config.guess_indent:
            self.guess_indent_unit()

    def __repr__(self) -> str:
        return f"Buffer(lines={self.line_count}, version={self.version})"

    @property
    def text(self) -> str:
        return self._text

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def indent_unit(self) -> int:
        return self._indent_unit

    @indent_unit.setter
    def indent_unit(self, value: int) -> None:
        self._indent_unit = validate_indent_unit(value)

    def guess_indent_unit(self) -> int:
        """Detect the indent unit from the first top-level block and adopt it."""
        guessed = guess_indent_unit(self)
        if guessed is None:
            logger.debug("can't guess indent unit, using default: %d", self._indent_unit)
        else:
            logger.debug("guessed indent unit: %d", guessed)
            self._indent_unit = guessed
        return self._indent_unit

    # ------------------------------------------------------------------
    # Line addressing
    # ------------------------------------------------------------------

    def _starts(self) -> list[int]:
        if self._line_starts is None:
            starts = [0]
            find = self._text.find
            pos = find("\n")
            while pos != -1:
                starts.append(pos + 1)
                pos = find("\n", pos + 1)
            self._line_starts = starts
        return self._line_starts

    @property
    def line_count(self) -> int:
        return len(self._starts())

    @property
    def last_line(self) -> int:
        return len(self._starts()) - 1

    def line_start(self, line: int) -> int:
        return self._starts()[line]

    def line_end(self, line: int) -> int:
        """Offset of the line's newline character, or the end of text."""
        starts = self._starts()
        if line + 1 < len(starts):
            return starts[line + 1] - 1
        return len(self._text)

    def line_text(self, line: int) -> str:
        return self._text[self.line_start(line) : self.line_end(line)]

    def line_at(self, offset: int) -> int:
        offset = max(0, min(offset, len(self._text)))
        return bisect_right(self._starts(), offset) - 1

    def offset_of(self, line: int, character: int) -> int:
        """Offset of a (line, character index) pair, clamped to the line."""
        start = self.line_start(line)
        return start + max(0, min(character, self.line_end(line) - start))

    def column(self, offset: int) -> int:
        """Visual column of offset, with tabs expanded."""
        start = self.line_start(self.line_at(offset))
        col = 0
        tab_width = self.config.tab_width
        for ch in self._text[start:offset]:
            if ch == "\t":
                col = (col // tab_width + 1) * tab_width
            else:
                col += 1
        return col

    # ------------------------------------------------------------------
    # Indentation
    # ------------------------------------------------------------------

    def indentation_end(self, line: int) -> int:
        """Offset of the first non-whitespace character (the indentation point)."""
        pos = self.line_start(line)
        end = self.line_end(line)
        text = self._text
        while pos < end and text[pos] in " \t\f":
            pos += 1
        return pos

    def indentation(self, line: int) -> int:
        return self.column(self.indentation_end(line))

    def is_blank(self, line: int) -> bool:
        return not self.line_text(line).strip()

    def set_indentation(self, line: int, column: int) -> None:
        """Replace the line's leading whitespace with ``column`` spaces."""
        column = max(0, column)
        start = self.line_start(line)
        end = self.indentation_end(line)
        new = " " * column
        if self._text[start:end] != new:
            self.replace(start, end, new)

    # ------------------------------------------------------------------
    # Lexical state
    # ------------------------------------------------------------------

    def lexical_state(self, offset: int) -> LexicalState:
        return self._scan_cache.state_at(self._text, offset)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def replace(self, start: int, end: int, text: str) -> None:
        """Replace text[start:end] with ``text``."""
        if not 0 <= start <= end <= len(self._text):
            raise IndexError(f"invalid range {start}..{end} for buffer of length {len(self._text)}")
        if self._text[start:end] == text:
            return
        self._text = self._text[:start] + text + self._text[end:]
        self._edited(start)

    def set_text(self, text: str) -> None:
        """Replace the whole text, keeping cached state before the first change."""
        if text == self._text:
            return
        old = self._text
        limit = min(len(old), len(text))
        common = 0
        while common < limit and old[common] == text[common]:
            common += 1
        self._text = text
        self._edited(common)

    def _edited(self, offset: int) -> None:
        self.version += 1
        self._line_starts = None
        self._scan_cache.invalidate(offset)
