"""Dedent matching: the block header a dedenting keyword line closes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pymode.continuation import is_code_line, is_continuation_line, starts_block
from pymode.tokens import DEDENT_CLOSES, FIRST_WORD_RE

if TYPE_CHECKING:
    from pymode.buffer import Buffer


def dedent_match(buffer: Buffer, line: int, indentation: int | None = None) -> int | None:
    """Return the offset of the header closed by the line's dedent keyword.

    The keyword line at indentation ``k`` matches the first statement above it
    indented to ``k`` or less; blank, comment and continuation lines are
    skipped.  It matches only when that statement sits exactly at ``k`` and
    starts with a keyword the dedenter may close.  Pass ``indentation`` to ask
    what the line would match if it were indented to that column.
    """
    text = buffer.text
    start = buffer.line_start(line)
    word = FIRST_WORD_RE.match(text, start, buffer.line_end(line))
    if word is None or word.group(1) not in buffer.config.dedenters:
        return None
    closes = DEDENT_CLOSES.get(word.group(1))
    if closes is None or buffer.lexical_state(start).context_type() is not None:
        return None

    if indentation is None:
        indentation = buffer.indentation(line)
    candidate = line - 1
    while candidate >= 0:
        if (
            is_code_line(buffer, candidate)
            and not is_continuation_line(buffer, candidate)
            and buffer.indentation(candidate) <= indentation
        ):
            break
        candidate -= 1
    if candidate < 0 or buffer.indentation(candidate) != indentation:
        return None

    header = starts_block(buffer, candidate)
    if header is None or header.group(1) not in closes:
        return None
    return buffer.indentation_end(candidate)


def closing_block_message(buffer: Buffer, line: int) -> str | None:
    """Describe the block the line closes, e.g. ``"Closes if x > 0:"``."""
    header = dedent_match(buffer, line)
    if header is None:
        return None
    header_end = buffer.line_end(buffer.line_at(header))
    return f"Closes {buffer.text[header:header_end].rstrip()}"
