"""Lexical state types, character classification helpers, and keyword grammars."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto


class ContextType(Enum):
    STRING = auto()
    COMMENT = auto()
    PAREN = auto()


@dataclass(frozen=True, slots=True)
class StringFence:
    """An open string literal: quote character, fence length (1 or 3), start offset."""

    quote: str
    length: int
    start: int


@dataclass(frozen=True, slots=True)
class LexicalState:
    """Snapshot of the lexical context just before the character at ``offset``."""

    offset: int
    string: StringFence | None = None
    comment_start: int | None = None
    paren_starts: tuple[int, ...] = field(default=())

    @property
    def in_string(self) -> bool:
        return self.string is not None

    @property
    def in_comment(self) -> bool:
        return self.comment_start is not None

    @property
    def paren_depth(self) -> int:
        return len(self.paren_starts)

    @property
    def innermost_paren(self) -> int | None:
        return self.paren_starts[-1] if self.paren_starts else None

    @property
    def string_start(self) -> int | None:
        return self.string.start if self.string is not None else None

    def context_type(self) -> ContextType | None:
        """Return the innermost syntactic context, strings and comments first."""
        if self.string is not None:
            return ContextType.STRING
        if self.comment_start is not None:
            return ContextType.COMMENT
        if self.paren_starts:
            return ContextType.PAREN
        return None

    def context_start(self, kind: ContextType | None = None) -> int | None:
        """Start offset of the context of the given kind (default: innermost)."""
        if kind is None:
            kind = self.context_type()
        if kind is ContextType.STRING:
            return self.string_start
        if kind is ContextType.COMMENT:
            return self.comment_start
        if kind is ContextType.PAREN:
            return self.innermost_paren
        return None

    def in_string_or_comment(self) -> bool:
        return self.string is not None or self.comment_start is not None


OPEN_BRACKETS = frozenset("([{")
CLOSE_BRACKETS = frozenset(")]}")
QUOTES = frozenset("'\"")

# Legal string prefixes, compared lowercased
_STRING_PREFIXES = frozenset({"r", "u", "b", "f", "br", "rb", "fr", "rf"})

BLOCK_KEYWORDS = (
    "def",
    "class",
    "if",
    "elif",
    "else",
    "try",
    "except",
    "finally",
    "for",
    "while",
    "with",
)

DEFAULT_DEDENTERS = ("else", "elif", "except", "finally")

# Header keywords each dedenter may close.
DEDENT_CLOSES: dict[str, tuple[str, ...]] = {
    "elif": ("if", "elif"),
    "else": ("if", "elif", "except", "for", "while"),
    "except": ("try",),
    "finally": ("except", "else"),
}

BLOCK_START_RE = re.compile(
    r"[ \t]*(?:async[ \t]+(?=def\b|for\b|with\b))?(" + "|".join(BLOCK_KEYWORDS) + r")\b"
)
DEFUN_RE = re.compile(r"[ \t]*(?:async[ \t]+)?(def|class)[ \t]+([^\W\d]\w*)")
DECORATOR_RE = re.compile(r"[ \t]*@[ \t]*[^\W\d][\w.]*")
FIRST_WORD_RE = re.compile(r"[ \t]*(\w+)")

# Continuation alignment: keyword + whitespace after a block keyword.
BLOCK_KEYWORD_SPACE_RE = re.compile(BLOCK_START_RE.pattern + r"[ \t]*")
ALIGNING_KEYWORD_RE = re.compile(r"[ \t]*(?:return|from|import)[ \t]+")

ASSIGNMENT_RE = re.compile(
    r"(?<![-+/&^~|*<>=%!:@])"
    r"(?://|\*\*|>>|<<|[-+*/%&^|@])?="
    r"(?![-+/&^~|*<>=%])"
)


def is_word_char(ch: str) -> bool:
    """Return True if ch can appear in an identifier or number."""
    return ch.isalnum() or ch == "_"


def is_string_prefix(word: str) -> bool:
    """Return True if word is a legal string prefix, in any letter case."""
    return word.lower() in _STRING_PREFIXES


def is_blank(text: str) -> bool:
    """Return True if text contains only whitespace (or is empty)."""
    return not text.strip()
