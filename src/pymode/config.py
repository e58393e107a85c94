"""Buffer-scoped indentation settings and indent-unit detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pymode.continuation import (
    is_continuation_line,
    next_code_line,
    statement_end_line,
    statement_ends_with_colon,
)
from pymode.errors import ConfigError
from pymode.tokens import BLOCK_START_RE, DEFAULT_DEDENTERS

if TYPE_CHECKING:
    from pymode.buffer import Buffer


def validate_indent_unit(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"indent unit must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigError(f"indent unit must be positive, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class IndentConfig:
    """Indentation settings owned by one buffer."""

    indent_unit: int = 4
    tab_width: int = 8
    dedenters: tuple[str, ...] = DEFAULT_DEDENTERS
    guess_indent: bool = False

    def __post_init__(self) -> None:
        validate_indent_unit(self.indent_unit)
        if isinstance(self.tab_width, bool) or not isinstance(self.tab_width, int):
            raise ConfigError(f"tab width must be an integer, got {self.tab_width!r}")
        if self.tab_width <= 0:
            raise ConfigError(f"tab width must be positive, got {self.tab_width}")
        if isinstance(self.dedenters, str) or not all(
            isinstance(word, str) and word.isidentifier() for word in self.dedenters
        ):
            raise ConfigError(f"dedenters must be a list of keywords, got {self.dedenters!r}")
        object.__setattr__(self, "dedenters", tuple(self.dedenters))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndentConfig:
        """Build a config from an ``[indent]`` TOML table.

        Recognized keys: unit, tab_width, dedenters, guess.  Unknown keys are
        rejected so typos do not pass silently.
        """
        known = {
            "unit": "indent_unit",
            "tab_width": "tab_width",
            "dedenters": "dedenters",
            "guess": "guess_indent",
        }
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"unknown indent setting(s): {', '.join(unknown)}")
        kwargs: dict[str, Any] = {known[key]: value for key, value in data.items()}
        if "dedenters" in kwargs:
            if not isinstance(kwargs["dedenters"], (list, tuple)):
                raise ConfigError(f"dedenters must be a list of keywords, got {kwargs['dedenters']!r}")
            kwargs["dedenters"] = tuple(kwargs["dedenters"])
        if "guess_indent" in kwargs and not isinstance(kwargs["guess_indent"], bool):
            raise ConfigError(f"guess must be true or false, got {kwargs['guess_indent']!r}")
        return cls(**kwargs)


def guess_indent_unit(buffer: Buffer) -> int | None:
    """Return the body indentation of the first top-level block, if any.

    Only headers starting at column 0 are considered, and the header's
    statement must end in a colon (multi-line headers are followed to their
    last line).  Returns None when no such block has an indented body.
    """
    text = buffer.text
    line = 0
    while line <= buffer.last_line:
        start = buffer.line_start(line)
        if (
            start < len(text)
            and text[start] not in " \t"
            and BLOCK_START_RE.match(text, start, buffer.line_end(line))
            and not is_continuation_line(buffer, line)
        ):
            end_line = statement_end_line(buffer, line)
            if statement_ends_with_colon(buffer, end_line):
                body = next_code_line(buffer, end_line + 1)
                if body is not None and buffer.indentation(body) > 0:
                    return buffer.indentation(body)
            line = end_line
        line += 1
    return None
