"""Lexical classifier: string/comment/bracket context for any buffer offset."""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterator
from typing import TYPE_CHECKING

from pymode.tokens import (
    CLOSE_BRACKETS,
    OPEN_BRACKETS,
    QUOTES,
    LexicalState,
    StringFence,
    is_string_prefix,
    is_word_char,
)

if TYPE_CHECKING:
    from pymode.buffer import Buffer

# Minimum distance between two cached line-start checkpoints.
CHECKPOINT_SPACING = 1024


class Scanner:
    """Resumable forward scanner over Python source text.

    The scanner only tracks what indentation and navigation need: the open
    string (if any), the open comment (if any) and the stack of open bracket
    offsets.  It never fails; unterminated constructs simply persist.
    """

    def __init__(self, text: str, state: LexicalState | None = None) -> None:
        self._text = text
        if state is None:
            state = LexicalState(0)
        self._pos = state.offset
        self._string = state.string
        self._comment_start = state.comment_start
        self._parens = list(state.paren_starts)

    def scan_to(self, limit: int) -> LexicalState:
        """Advance to ``limit`` and return the state just before that offset."""
        limit = min(limit, len(self._text))
        if limit < self._pos:
            raise ValueError(f"cannot scan backwards from {self._pos} to {limit}")
        while self._pos < limit:
            if self._string is not None:
                self._scan_string(limit)
            elif self._comment_start is not None:
                self._scan_comment(limit)
            else:
                self._scan_code(limit)
        return self.state(limit)

    def state(self, offset: int | None = None) -> LexicalState:
        return LexicalState(
            self._pos if offset is None else offset,
            self._string,
            self._comment_start,
            tuple(self._parens),
        )

    # ------------------------------------------------------------------
    # Code
    # ------------------------------------------------------------------

    def _scan_code(self, limit: int) -> None:
        text = self._text
        ch = text[self._pos]

        if ch == "#":
            self._comment_start = self._pos
            self._pos += 1
            return

        if ch in QUOTES:
            self._open_string(self._pos, self._pos)
            return

        if ch in OPEN_BRACKETS:
            self._parens.append(self._pos)
            self._pos += 1
            return

        if ch in CLOSE_BRACKETS:
            # Surplus closers are ignored, mismatched kinds are not validated
            if self._parens:
                self._parens.pop()
            self._pos += 1
            return

        if is_word_char(ch):
            start = self._pos
            end = start
            while end < len(text) and is_word_char(text[end]):
                end += 1
            if end < len(text) and text[end] in QUOTES and is_string_prefix(text[start:end]):
                if limit <= end:
                    self._pos = limit
                    return
                self._open_string(start, end)
                return
            self._pos = min(end, limit)
            return

        self._pos += 1

    def _open_string(self, start: int, quote_pos: int) -> None:
        quote = self._text[quote_pos]
        length = 3 if self._text.startswith(quote * 3, quote_pos) else 1
        self._string = StringFence(quote, length, start)
        self._pos = quote_pos + length

    # ------------------------------------------------------------------
    # Strings
    # ------------------------------------------------------------------

    def _scan_string(self, limit: int) -> None:
        text = self._text
        fence = self._string
        assert fence is not None
        while self._pos < limit:
            ch = text[self._pos]
            if ch == "\\":
                self._pos = min(self._pos + 2, len(text))
                continue
            if ch == fence.quote:
                if fence.length == 1:
                    self._pos += 1
                    self._string = None
                    return
                if text.startswith(fence.quote * 3, self._pos):
                    if self._pos + 3 > limit:
                        # Limit falls inside the closing fence: still in the string
                        self._pos = limit
                        return
                    self._pos += 3
                    self._string = None
                    return
            elif ch == "\n" and fence.length == 1:
                # Unescaped newline ends an unterminated single-quoted string
                self._string = None
                return
            self._pos += 1

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def _scan_comment(self, limit: int) -> None:
        newline = self._text.find("\n", self._pos, limit)
        if newline == -1:
            self._pos = limit
            return
        self._pos = newline
        self._comment_start = None


class ScanCache:
    """Line-start checkpoints of lexical state for one buffer.

    Queries resume from the nearest checkpoint at or before the query's line
    start, so repeated per-keystroke queries do not rescan the whole prefix.
    Checkpoints past an edit position must be dropped with ``invalidate``.
    """

    def __init__(self) -> None:
        self._offsets: list[int] = [0]
        self._states: list[LexicalState] = [LexicalState(0)]

    def __len__(self) -> int:
        return len(self._offsets)

    @property
    def checkpoints(self) -> tuple[int, ...]:
        return tuple(self._offsets)

    def state_at(self, text: str, offset: int) -> LexicalState:
        offset = max(0, min(offset, len(text)))
        line_start = text.rfind("\n", 0, offset) + 1
        idx = bisect_right(self._offsets, line_start) - 1
        scanner = Scanner(text, self._states[idx])

        # Checkpoint every line start at least CHECKPOINT_SPACING past the
        # previous one on the way, so later queries above this one resume nearby
        last = self._offsets[idx]
        while line_start - last >= CHECKPOINT_SPACING:
            newline = text.find("\n", last + CHECKPOINT_SPACING - 1, line_start)
            if newline == -1:
                break
            last = newline + 1
            idx += 1
            self._offsets.insert(idx, last)
            self._states.insert(idx, scanner.scan_to(last))
        return scanner.scan_to(offset)

    def invalidate(self, offset: int) -> None:
        """Forget every checkpoint that depends on text at or after ``offset``."""
        idx = bisect_right(self._offsets, offset)
        del self._offsets[idx:]
        del self._states[idx:]


def classify(buffer: Buffer, offset: int) -> LexicalState:
    """Return the lexical state of ``buffer`` just before ``offset``."""
    return buffer.lexical_state(offset)


def is_code(buffer: Buffer, offset: int) -> bool:
    """Return True if offset is outside any string, comment or bracket."""
    return buffer.lexical_state(offset).context_type() is None


def iter_code_matches(
    buffer: Buffer,
    pattern: re.Pattern[str],
    start: int,
    end: int,
    *,
    reverse: bool = False,
) -> Iterator[re.Match[str]]:
    """Yield matches of pattern in [start, end) that begin in plain code.

    Matches starting inside a string, a comment or any bracket are skipped.
    With ``reverse`` the matches are yielded last first.
    """
    matches = pattern.finditer(buffer.text, start, end)
    if reverse:
        matches = reversed(list(matches))
    for match in matches:
        if is_code(buffer, match.start()):
            yield match
