"""Error types with formatted source context."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when indentation settings are invalid (caller configuration error)."""


class ShiftError(Exception):
    """Raised when a region cannot be shifted left by the requested amount.

    Nothing in the region is modified when this is raised.
    """

    def __init__(self, message: str, line: int, count: int, source: str) -> None:
        self.message = message
        self.line = line
        self.count = count
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "<buffer>") -> str:
        lines = self.source.splitlines()
        if 0 <= self.line < len(lines):
            source_line = lines[self.line].rstrip("\r")
        else:
            source_line = ""

        # Underline the indentation that is too short to remove
        indent = len(source_line) - len(source_line.lstrip())
        carets = "^" * max(1, indent)

        line_num = str(self.line + 1)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.line + 1}:1\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {carets}"
        )
