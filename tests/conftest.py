"""Pytest fixtures and configuration for promptline tests."""
from __future__ import annotations

import pytest
from rich.style import Style

from promptline.config import load_os_config, parse_document
from promptline.osinfo import OSDescriptor


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without filesystem or OS access")
    config.addinivalue_line("markers", "e2e: full segment renders from TOML to styled output")


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch, tmp_path):
    """Keep the user's real config out of the tests."""
    monkeypatch.delenv("PROMPTLINE_CONFIG", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))


@pytest.fixture
def unknown_os():
    return OSDescriptor.unknown()


@pytest.fixture
def reader_for():
    """Build a zero-arg OS reader returning the given descriptor."""

    def _make(descriptor: OSDescriptor):
        return lambda: descriptor

    return _make


@pytest.fixture
def config_from_toml():
    """Parse a TOML snippet and validate its [os] table."""

    def _load(text: str, **overrides):
        return load_os_config(parse_document(text), **overrides)

    return _load


@pytest.fixture
def bold_white():
    """Render text the way the default style does."""
    style = Style.parse("bold white")
    return lambda text: style.render(text)


@pytest.fixture
def temp_config_file(tmp_path):
    return tmp_path / "config.toml"
