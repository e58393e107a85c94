"""Command-line interface for pymode."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pymode.config import IndentConfig
from pymode.errors import ConfigError


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    config: IndentConfig
    check: bool
    outline: bool
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="pymode",
        description="Re-indent and outline Python source",
    )
    p.add_argument("input", help="Input .py file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover pymode.toml)",
    )
    p.add_argument(
        "--indent-unit",
        type=int,
        default=None,
        metavar="N",
        help="Columns per indentation level (default: 4)",
    )
    p.add_argument(
        "--tab-width",
        type=int,
        default=None,
        metavar="N",
        help="Tab stop width for column computation (default: 8)",
    )
    p.add_argument(
        "--guess-indent",
        action="store_true",
        default=None,
        help="Detect the indent unit from the file",
    )
    p.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 if the file would be re-indented",
    )
    p.add_argument("--outline", action="store_true", help="List definitions instead")
    p.add_argument("--debug", action="store_true", help="Dump indentation contexts to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "pymode.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    raw = load_config(config_path, input_dir)

    table = raw.get("indent", {})
    if not isinstance(table, dict):
        raise ConfigError("[indent] must be a table")
    config = IndentConfig.from_dict(table)

    overrides: dict[str, Any] = {}
    if args.indent_unit is not None:
        overrides["indent_unit"] = args.indent_unit
    if args.tab_width is not None:
        overrides["tab_width"] = args.tab_width
    if args.guess_indent is not None:
        overrides["guess_indent"] = args.guess_indent
    if overrides:
        config = dataclasses.replace(config, **overrides)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        config=config,
        check=args.check,
        outline=args.outline,
        debug=args.debug,
        verbose=args.verbose,
    )


def outline(source: str, config: IndentConfig) -> str:
    """One ``line: kind qualified.name`` row per definition."""
    from pymode.buffer import Buffer
    from pymode.navigation import iter_defuns

    buffer = Buffer(source, config)
    return "".join(
        f"{defun.line + 1}: {defun.kind} {defun.qualified_name}\n" for defun in iter_defuns(buffer)
    )


def process_file(options: CliOptions) -> tuple[str, bool]:
    """Read and re-indent a file; return the new text and whether it changed."""
    from pymode.buffer import Buffer
    from pymode.debug import dump_contexts
    from pymode.editing import reindent

    source = options.input_file.read_text(encoding="utf-8")
    buffer = Buffer(source, options.config)

    if options.debug:
        dump_contexts(buffer, file=sys.stderr)

    changed = reindent(buffer)
    return buffer.text, changed


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        options = resolve_options(args)
    except (ConfigError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        if options.outline:
            result = outline(options.input_file.read_text(encoding="utf-8"), options.config)
            changed = False
        else:
            result, changed = process_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.check:
        if changed:
            print(f"would reindent {options.input_file}", file=sys.stderr)
            return 1
        return 0

    if options.output_file:
        options.output_file.write_text(result, encoding="utf-8")
    else:
        sys.stdout.write(result)

    return 0


def run() -> None:
    sys.exit(main())
