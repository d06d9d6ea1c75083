from __future__ import annotations

import json
import logging
import os
import pathlib
import typing as t
from collections import abc

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .symbols import build_symbol_table, default_symbols, normalize_key

logger = logging.getLogger(__name__)

PathLikeStr = t.Union[str, "os.PathLike[str]"]
Document = t.Dict[str, t.Any]

CONFIG_ENV_VAR = "PROMPTLINE_CONFIG"
OS_SECTION = "os"


def _default_symbol_table() -> dict[str, str]:
    return dict(default_symbols())


class OSConfig(BaseModel):
    """Settings of the `[os]` table."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    format: str = "[$symbol]($style)"
    style: str = "bold white"
    # lowercase identifier -> symbol
    symbols: dict[str, str] = Field(default_factory=_default_symbol_table)
    disabled: bool = True

    @field_validator("symbols", mode="after")
    @classmethod
    def _lowercase_symbol_keys(cls, value: dict[str, str]) -> dict[str, str]:
        return build_symbol_table(value)

    def get_symbol(self, key: str) -> str | None:
        return self.symbols.get(normalize_key(key))

    def configured_symbols(self) -> dict[str, str]:
        """Symbols from the user's `[os.symbols]` table; empty when none was given."""
        return dict(self.symbols) if "symbols" in self.model_fields_set else {}

    def effective_symbols(self) -> dict[str, str]:
        """Built-in table overlaid with the configured symbols, in default order."""
        merged = dict(default_symbols())
        merged.update(self.symbols)
        return merged


def platform_config_default() -> pathlib.Path:
    """
    Determine the default config path by OS:
      - Windows: %APPDATA%/promptline/config.toml
      - Others:  $XDG_CONFIG_HOME/promptline/config.toml or ~/.config/promptline/config.toml
    """
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or os.path.expanduser("~\\AppData\\Roaming")
        return pathlib.Path(appdata) / "promptline" / "config.toml"
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return pathlib.Path(config_home) / "promptline" / "config.toml"
    return pathlib.Path.home() / ".config" / "promptline" / "config.toml"


def resolve_config_path(path: PathLikeStr | None) -> tuple[pathlib.Path, bool]:
    """
    Resolve the config file location (explicit path -> PROMPTLINE_CONFIG -> platform default).

    Returns the path and whether it was requested explicitly.
    """
    if path:
        return pathlib.Path(os.path.expanduser(os.fspath(path))), True
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return pathlib.Path(os.path.expanduser(env)), True
    return platform_config_default(), False


def load_document(path: PathLikeStr | None = None) -> Document:
    """
    Read the TOML configuration document.

    A missing file at the platform default location is not an error and yields
    an empty document; a missing explicitly requested file is.
    """
    candidate, explicit = resolve_config_path(path)
    if not candidate.exists():
        if explicit:
            raise ConfigurationError(f"Config file not found: {candidate}")
        logger.debug("No config file at %s; using defaults", candidate)
        return {}

    try:
        with candidate.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Error parsing TOML file at {candidate}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Config file {candidate} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {candidate}: {e}") from e


def parse_document(text: str) -> Document:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Error parsing TOML: {e}") from e


def load_os_config(document: t.Mapping[str, t.Any] | None = None, **overrides: t.Any) -> OSConfig:
    """
    Validate the `[os]` table of a configuration document.

    Keyword overrides replace individual keys after the document is read.
    Nothing is partially applied: either the whole table validates or
    ConfigurationError is raised.
    """
    section: t.Any = (document or {}).get(OS_SECTION, {})
    if not isinstance(section, abc.Mapping):
        raise ConfigurationError(f"[{OS_SECTION}] must be a table, got {type(section).__name__}")
    data = dict(section)
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return OSConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid [{OS_SECTION}] configuration: {e}") from e


def load_config(path: PathLikeStr | None = None, **overrides: t.Any) -> OSConfig:
    return load_os_config(load_document(path), **overrides)


def os_config_schema() -> dict[str, t.Any]:
    """JSON schema describing the `[os]` table."""
    return OSConfig.model_json_schema()


def os_config_schema_json(indent: int = 2) -> str:
    return json.dumps(os_config_schema(), indent=indent, ensure_ascii=False)
