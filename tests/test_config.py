"""Tests for indentation settings and TOML config file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from pymode.cli import build_parser, load_config, resolve_options
from pymode.config import IndentConfig
from pymode.errors import ConfigError


class TestIndentConfig:
    def test_defaults(self) -> None:
        config = IndentConfig()
        assert config.indent_unit == 4
        assert config.tab_width == 8
        assert config.dedenters == ("else", "elif", "except", "finally")
        assert config.guess_indent is False

    def test_dedenters_become_tuple(self) -> None:
        assert IndentConfig(dedenters=["else"]).dedenters == ("else",)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"indent_unit": 0},
            {"indent_unit": -2},
            {"indent_unit": True},
            {"tab_width": 0},
            {"tab_width": "8"},
            {"dedenters": "else"},
            {"dedenters": ("else", 3)},
        ],
    )
    def test_invalid(self, kwargs) -> None:
        with pytest.raises(ConfigError):
            IndentConfig(**kwargs)

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            IndentConfig(indent_unit=0)

    def test_from_dict(self) -> None:
        config = IndentConfig.from_dict(
            {"unit": 2, "tab_width": 4, "guess": True, "dedenters": ["else", "case"]}
        )
        assert config == IndentConfig(2, 4, ("else", "case"), True)

    def test_from_dict_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="widht"):
            IndentConfig.from_dict({"widht": 2})

    def test_from_dict_guess_must_be_bool(self) -> None:
        with pytest.raises(ConfigError):
            IndentConfig.from_dict({"guess": "yes"})


class TestLoadConfig:
    def test_missing_config_returns_empty(self, tmp_path: Path) -> None:
        assert load_config(None, tmp_path) == {}

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text("[indent]\nunit = 2\n")
        result = load_config(cfg, tmp_path)
        assert result["indent"] == {"unit": 2}

    def test_auto_discover_pymode_toml(self, tmp_path: Path) -> None:
        cfg = tmp_path / "pymode.toml"
        cfg.write_text("[indent]\ntab_width = 4\n")
        result = load_config(None, tmp_path)
        assert result["indent"] == {"tab_width": 4}


class TestConfigMerge:
    def _options(self, tmp_path: Path, *flags: str):
        doc = tmp_path / "mod.py"
        doc.write_text("")
        ns = build_parser().parse_args([str(doc), *flags])
        return resolve_options(ns)

    def test_defaults_without_config(self, tmp_path: Path) -> None:
        assert self._options(tmp_path).config == IndentConfig()

    def test_config_file_values(self, tmp_path: Path) -> None:
        (tmp_path / "pymode.toml").write_text(
            '[indent]\nunit = 2\nguess = true\ndedenters = ["else"]\n'
        )
        config = self._options(tmp_path).config
        assert config.indent_unit == 2
        assert config.guess_indent is True
        assert config.dedenters == ("else",)

    def test_cli_overrides_config(self, tmp_path: Path) -> None:
        (tmp_path / "pymode.toml").write_text("[indent]\nunit = 2\ntab_width = 4\n")
        config = self._options(tmp_path, "--indent-unit", "3").config
        assert config.indent_unit == 3
        assert config.tab_width == 4

    def test_explicit_config_flag(self, tmp_path: Path) -> None:
        cfg = tmp_path / "alt.toml"
        cfg.write_text("[indent]\nunit = 8\n")
        assert self._options(tmp_path, "--config", str(cfg)).config.indent_unit == 8

    def test_indent_must_be_table(self, tmp_path: Path) -> None:
        (tmp_path / "pymode.toml").write_text("indent = 2\n")
        with pytest.raises(ConfigError):
            self._options(tmp_path)

    def test_invalid_cli_value(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            self._options(tmp_path, "--tab-width", "0")
