"""
Symbol tables for the os segment.

A symbol table maps an OS identifier to the string shown in the prompt for it.
Keys are always stored lowercase, so `"Arch"`, `"ARCH"` and `"arch"` all name
the same entry. Resolution walks an ordered list of sources (user overrides
first, built-in defaults last) and stops at the first hit.
"""

from __future__ import annotations

import functools
from collections import abc
import types
import typing as t
from enum import Enum

SymbolTable = t.Dict[str, str]
SymbolSource = t.Union[t.Mapping[str, str], t.Callable[[str], t.Optional[str]]]

# Capitalization kept for legibility; keys are lowercased when the table is built.
_DEFAULT_SYMBOL_DATA: tuple[tuple[str, str], ...] = (
    ("Alpine", "🏔️ "),
    ("Amazon", "🙂 "),
    ("Android", "🤖 "),
    ("Arch", "🎗️ "),
    ("CentOS", "💠 "),
    ("Debian", "🌀 "),
    ("DragonFly", "🐉 "),
    ("Emscripten", "🔗 "),
    ("EndeavourOS", "🚀 "),
    ("Fedora", "🎩 "),
    ("FreeBSD", "😈 "),
    ("Garuda", "🦅 "),
    ("Gentoo", "🗜️ "),
    ("HardenedBSD", "🛡️ "),
    ("Illumos", "🐦 "),
    ("Linux", "🐧 "),
    ("Macos", "🍎 "),
    ("Manjaro", "🥭 "),
    ("Mariner", "🌊 "),
    ("MidnightBSD", "🌘 "),
    ("Mint", "🌿 "),
    ("NetBSD", "🚩 "),
    ("NixOS", "❄️ "),
    ("OpenBSD", "🐡 "),
    ("openSUSE", "🦎 "),
    ("OracleLinux", "🦴 "),
    ("Pop", "🍭 "),
    ("Raspbian", "🍓 "),
    ("Redhat", "🎩 "),
    ("RedHatEnterprise", "🎩 "),
    ("Redox", "🧪 "),
    ("Solus", "⛵ "),
    ("SUSE", "🦎 "),
    ("Ubuntu", "🎯 "),
    ("Unknown", "❓ "),
    ("Windows", "🪟 "),
)


def normalize_key(key: str | Enum) -> str:
    """Return the canonical (lowercase) form of an OS identifier."""
    if isinstance(key, Enum):
        key = key.value
    return str(key).lower()


def build_symbol_table(
    raw: t.Mapping[str, str] | t.Iterable[tuple[str, str]] | None,
) -> SymbolTable:
    """
    Build a normalized symbol table from author-supplied entries.

    Keys are lowercased, values are kept as given. When two keys normalize to
    the same identifier the later one in iteration order wins.
    """
    if raw is None:
        return {}
    items = raw.items() if isinstance(raw, abc.Mapping) else raw
    table: SymbolTable = {}
    for key, symbol in items:
        table[normalize_key(key)] = symbol
    return table


@functools.lru_cache(maxsize=None)
def default_symbols() -> t.Mapping[str, str]:
    """The built-in symbol table, created on first use and read-only."""
    return types.MappingProxyType(build_symbol_table(_DEFAULT_SYMBOL_DATA))


def _as_lookup(source: SymbolSource) -> t.Callable[[str], t.Optional[str]]:
    if isinstance(source, abc.Mapping):
        return source.get
    if callable(source):
        return source
    raise TypeError(f"Unsupported symbol source: {type(source).__name__}")


class SymbolResolver:
    """
    Resolve OS identifiers against an ordered list of symbol sources.

    Each source is either a mapping keyed by normalized identifier or a
    callable taking the normalized identifier and returning the symbol or
    None. An empty string is a valid symbol and stops the search.
    """

    def __init__(self, *sources: SymbolSource):
        self._lookups = [_as_lookup(s) for s in sources if s is not None]

    def resolve(self, identifier: str | Enum) -> str | None:
        key = normalize_key(identifier)
        for lookup in self._lookups:
            symbol = lookup(key)
            if symbol is not None:
                return symbol
        return None

    __call__ = resolve


def resolve_symbol(
    identifier: str | Enum,
    effective: t.Mapping[str, str] | None,
    default: t.Mapping[str, str] | None = None,
) -> str | None:
    """User table first, then the built-in defaults, then None."""
    if default is None:
        default = default_symbols()
    return SymbolResolver(effective or {}, default).resolve(identifier)
