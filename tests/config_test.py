"""Tests for promptline.config module."""
from __future__ import annotations

import os
import pathlib

import pytest

from promptline.config import (
    OSConfig,
    load_config,
    load_document,
    load_os_config,
    os_config_schema,
    parse_document,
    platform_config_default,
    resolve_config_path,
)
from promptline.errors import ConfigurationError
from promptline.symbols import default_symbols


@pytest.mark.unit
class TestOSConfigDefaults:
    def test_defaults(self):
        cfg = OSConfig()

        assert cfg.format == "[$symbol]($style)"
        assert cfg.style == "bold white"
        assert cfg.disabled is True
        assert cfg.symbols == dict(default_symbols())

    def test_empty_document(self):
        assert load_os_config({}) == OSConfig()
        assert load_os_config(None) == OSConfig()

    def test_default_symbols_are_copied(self):
        cfg = OSConfig()
        cfg.symbols["arch"] = "changed"

        assert default_symbols()["arch"] == "🎗️ "


@pytest.mark.unit
class TestSymbolsSection:
    def test_keys_lowercased_on_load(self, config_from_toml):
        cfg = config_from_toml(
            """
            [os.symbols]
            "Arch" = "A"
            "NixOS" = "N"
            """
        )

        assert cfg.symbols == {"arch": "A", "nixos": "N"}

    def test_get_symbol_any_casing(self, config_from_toml):
        cfg = config_from_toml('[os.symbols]\n"Arch" = "A"\n')

        assert cfg.get_symbol("ARCH") == "A"
        assert cfg.get_symbol("arch") == "A"
        assert cfg.get_symbol("Debian") is None

    def test_colliding_keys_last_one_wins(self, config_from_toml):
        cfg = config_from_toml('[os.symbols]\n"Arch" = "upper"\n"arch" = "lower"\n')

        assert cfg.symbols == {"arch": "lower"}

    def test_colliding_keys_reverse_order(self, config_from_toml):
        cfg = config_from_toml('[os.symbols]\n"arch" = "lower"\n"Arch" = "upper"\n')

        assert cfg.symbols == {"arch": "upper"}

    def test_configured_symbols(self, config_from_toml):
        cfg = config_from_toml('[os.symbols]\n"Arch" = "🎗️ "\n')

        assert cfg.configured_symbols() == {"arch": "🎗️ "}
        assert config_from_toml("[os]\n").configured_symbols() == {}

    def test_effective_symbols_overlay_defaults(self, config_from_toml):
        cfg = config_from_toml('[os.symbols]\n"Arch" = "A"\n"Unknown" = ""\n')
        effective = cfg.effective_symbols()

        assert effective["arch"] == "A"
        assert effective["unknown"] == ""
        assert effective["debian"] == "🌀 "
        assert list(effective)[:4] == ["alpine", "amazon", "android", "arch"]


@pytest.mark.unit
class TestValidation:
    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError, match="Invalid \\[os\\]"):
            load_os_config({"os": {"disabled": False, "colour": "red"}})

    @pytest.mark.parametrize(
        "section",
        [
            {"disabled": "false"},
            {"format": 3},
            {"style": ["bold"]},
            {"symbols": {"Arch": 1}},
            {"symbols": "Arch"},
        ],
    )
    def test_wrong_types_rejected(self, section):
        with pytest.raises(ConfigurationError):
            load_os_config({"os": section})

    def test_section_must_be_a_table(self):
        with pytest.raises(ConfigurationError, match="must be a table"):
            load_os_config({"os": "enabled"})

    def test_overrides_applied(self):
        cfg = load_os_config({"os": {"style": "red"}}, format="$name", disabled=False, style=None)

        assert cfg.format == "$name"
        assert cfg.disabled is False
        assert cfg.style == "red"

    def test_invalid_toml(self):
        with pytest.raises(ConfigurationError, match="TOML"):
            parse_document("[os\nformat =")


@pytest.mark.unit
class TestPlatformConfigDefault:
    def test_xdg_config_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert platform_config_default() == tmp_path / "promptline" / "config.toml"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX layout")
    def test_linux_config_path(self, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", "/home/testuser")

        result = platform_config_default()

        assert isinstance(result, pathlib.Path)
        assert ".config/promptline/config.toml" in result.as_posix()


class TestLoadDocument:
    def test_resolve_precedence(self, monkeypatch, tmp_path):
        env_path = tmp_path / "env.toml"
        monkeypatch.setenv("PROMPTLINE_CONFIG", str(env_path))

        assert resolve_config_path(tmp_path / "cli.toml") == (tmp_path / "cli.toml", True)
        assert resolve_config_path(None) == (env_path, True)

        monkeypatch.delenv("PROMPTLINE_CONFIG")
        assert resolve_config_path(None) == (platform_config_default(), False)

    def test_missing_default_file_is_empty(self):
        assert load_document() == {}

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_document(tmp_path / "nope.toml")

    def test_missing_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PROMPTLINE_CONFIG", str(tmp_path / "nope.toml"))

        with pytest.raises(ConfigurationError):
            load_document()

    def test_load_config_from_file(self, temp_config_file):
        temp_config_file.write_text(
            '[os]\ndisabled = false\nstyle = "bold blue"\n\n[os.symbols]\nUbuntu = "U "\n',
            encoding="utf-8",
        )

        cfg = load_config(temp_config_file)

        assert cfg.disabled is False
        assert cfg.style == "bold blue"
        assert cfg.symbols == {"ubuntu": "U "}

    def test_broken_file(self, temp_config_file):
        temp_config_file.write_text("[os]\ndisabled = \n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Error parsing TOML"):
            load_config(temp_config_file)

    def test_invalid_utf8_file(self, temp_config_file):
        temp_config_file.write_bytes(b'[os]\nstyle = "\xff\xfe"\n')

        with pytest.raises(ConfigurationError, match="not valid UTF-8"):
            load_document(temp_config_file)

    def test_other_sections_ignored(self):
        doc = parse_document('[character]\nsymbol = ">"\n[os]\ndisabled = false\n')

        assert load_os_config(doc).disabled is False


@pytest.mark.unit
def test_schema_forbids_extra_keys():
    schema = os_config_schema()

    assert schema["additionalProperties"] is False
    assert set(schema["properties"]) == {"format", "style", "symbols", "disabled"}
