"""Tests for the CLI module: arg parsing, exit codes, end-to-end."""

from __future__ import annotations

from pathlib import Path

from pymode.cli import CliOptions, build_parser, main, outline, process_file
from pymode.config import IndentConfig

MESSY = "def f(x):\n  if x:\n   y = [1,\n 2]\n  return y\n"
CLEAN = "def f(x):\n    if x:\n        y = [1,\n             2]\n        return y\n"

# ---------------------------------------------------------------------------
# Arg parsing via build_parser
# ---------------------------------------------------------------------------


class TestArgParsing:
    def test_input_only(self) -> None:
        ns = build_parser().parse_args(["mod.py"])
        assert ns.input == "mod.py"
        assert ns.output is None
        assert ns.indent_unit is None
        assert ns.guess_indent is None

    def test_output_flag(self) -> None:
        ns = build_parser().parse_args(["mod.py", "-o", "out.py"])
        assert ns.output == "out.py"

    def test_indent_flags(self) -> None:
        ns = build_parser().parse_args(
            ["mod.py", "--indent-unit", "2", "--tab-width", "4", "--guess-indent"]
        )
        assert ns.indent_unit == 2
        assert ns.tab_width == 4
        assert ns.guess_indent is True

    def test_mode_flags(self) -> None:
        ns = build_parser().parse_args(["mod.py", "--check", "--outline", "--debug", "-v"])
        assert ns.check is True
        assert ns.outline is True
        assert ns.debug is True
        assert ns.verbose is True


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class TestExitCodes:
    def test_success(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text(MESSY)
        assert main([str(doc)]) == 0
        assert capsys.readouterr().out == CLEAN

    def test_check_clean_file(self, tmp_path: Path) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text(CLEAN)
        assert main([str(doc), "--check"]) == 0

    def test_check_messy_file_returns_1(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text(MESSY)
        assert main([str(doc), "--check"]) == 1
        captured = capsys.readouterr()
        assert "would reindent" in captured.err
        assert captured.out == ""
        assert doc.read_text() == MESSY

    def test_missing_file_returns_2(self, tmp_path: Path, capsys) -> None:
        assert main([str(tmp_path / "nope.py")]) == 2
        assert capsys.readouterr().err.startswith("error:")

    def test_bad_config_returns_2(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "pymode.toml").write_text("[indent]\nunit = 0\n")
        doc = tmp_path / "mod.py"
        doc.write_text(CLEAN)
        assert main([str(doc)]) == 2
        assert "indent unit" in capsys.readouterr().err

    def test_malformed_toml_returns_2(self, tmp_path: Path) -> None:
        (tmp_path / "pymode.toml").write_text("[indent\n")
        doc = tmp_path / "mod.py"
        doc.write_text(CLEAN)
        assert main([str(doc)]) == 2


# ---------------------------------------------------------------------------
# Output modes
# ---------------------------------------------------------------------------


class TestOutput:
    def test_output_file(self, tmp_path: Path) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text(MESSY)
        out = tmp_path / "out.py"
        assert main([str(doc), "-o", str(out)]) == 0
        assert out.read_text() == CLEAN

    def test_indent_unit_flag(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text("if x:\ny\n")
        assert main([str(doc), "--indent-unit", "2"]) == 0
        assert capsys.readouterr().out == "if x:\n  y\n"

    def test_guess_indent_flag(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text("if x:\n  if y:\nz\n")
        assert main([str(doc), "--guess-indent"]) == 0
        assert capsys.readouterr().out == "if x:\n  if y:\n    z\n"

    def test_outline(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text("class A:\n    def m(self):\n        pass\n\ndef f():\n    pass\n")
        assert main([str(doc), "--outline"]) == 0
        assert capsys.readouterr().out == "1: class A\n2: def A.m\n5: def f\n"

    def test_debug_dumps_to_stderr(self, tmp_path: Path, capsys) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text("if x:\n    y\n")
        assert main([str(doc), "--debug"]) == 0
        err = capsys.readouterr().err
        assert "AFTER_BEGINNING_OF_BLOCK" in err


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_process_file(self, tmp_path: Path) -> None:
        doc = tmp_path / "mod.py"
        doc.write_text(MESSY)
        opts = CliOptions(
            input_file=doc,
            output_file=None,
            config=IndentConfig(),
            check=False,
            outline=False,
            debug=False,
            verbose=False,
        )
        assert process_file(opts) == (CLEAN, True)

    def test_outline_empty(self) -> None:
        assert outline("x = 1\n", IndentConfig()) == ""
