"""
Operating system detection.

Produces an `OSDescriptor`: the OS family plus optional bitness, codename,
edition and version. "Unknown" bitness or version never leaves this module;
they are reported as None.

Linux distributions are identified from os-release data via `distro`.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import distro

logger = logging.getLogger(__name__)


class OSType(Enum):
    """OS families the prompt knows about. Values are the identifier spelling."""

    ALPINE = "Alpine"
    AMAZON = "Amazon"
    ANDROID = "Android"
    ARCH = "Arch"
    CENTOS = "CentOS"
    DEBIAN = "Debian"
    DRAGONFLY = "DragonFly"
    EMSCRIPTEN = "Emscripten"
    ENDEAVOUROS = "EndeavourOS"
    FEDORA = "Fedora"
    FREEBSD = "FreeBSD"
    GARUDA = "Garuda"
    GENTOO = "Gentoo"
    HARDENEDBSD = "HardenedBSD"
    ILLUMOS = "Illumos"
    LINUX = "Linux"
    MACOS = "Macos"
    MANJARO = "Manjaro"
    MARINER = "Mariner"
    MIDNIGHTBSD = "MidnightBSD"
    MINT = "Mint"
    NETBSD = "NetBSD"
    NIXOS = "NixOS"
    OPENBSD = "OpenBSD"
    OPENSUSE = "openSUSE"
    ORACLELINUX = "OracleLinux"
    POP = "Pop"
    RASPBIAN = "Raspbian"
    REDHAT = "Redhat"
    REDHATENTERPRISE = "RedHatEnterprise"
    REDOX = "Redox"
    SOLUS = "Solus"
    SUSE = "SUSE"
    UBUNTU = "Ubuntu"
    UNKNOWN = "Unknown"
    WINDOWS = "Windows"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value)

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    OSType.ALPINE: "Alpine Linux",
    OSType.AMAZON: "Amazon Linux AMI",
    OSType.ARCH: "Arch Linux",
    OSType.DRAGONFLY: "DragonFly BSD",
    OSType.GARUDA: "Garuda Linux",
    OSType.GENTOO: "Gentoo Linux",
    OSType.ILLUMOS: "illumos",
    OSType.MACOS: "Mac OS",
    OSType.MIDNIGHTBSD: "Midnight BSD",
    OSType.MINT: "Linux Mint",
    OSType.ORACLELINUX: "Oracle Linux",
    OSType.POP: "Pop!_OS",
    OSType.RASPBIAN: "Raspberry Pi OS",
    OSType.REDHAT: "Red Hat Linux",
    OSType.REDHATENTERPRISE: "Red Hat Enterprise Linux",
    OSType.SUSE: "SUSE Linux Enterprise Server",
}


class Bitness(Enum):
    X32 = "32-bit"
    X64 = "64-bit"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_machine(cls, machine: str | None) -> Optional["Bitness"]:
        """Map a `platform.machine()` string to a bitness, None when unrecognized."""
        if not machine:
            return None
        m = machine.lower()
        if m in _MACHINES_64:
            return cls.X64
        if m in _MACHINES_32 or (m.startswith("i") and m.endswith("86")):
            return cls.X32
        return None


_MACHINES_64 = {
    "x86_64", "amd64", "arm64", "aarch64", "aarch64_be", "ppc64", "ppc64le",
    "s390x", "riscv64", "mips64", "loongarch64", "sparc64", "ia64",
}
_MACHINES_32 = {"x86", "arm", "armv6l", "armv7l", "armv8l", "ppc", "mips", "riscv32", "wasm32"}

# os-release ID -> OS family
_DISTRO_IDS = {
    "alpine": OSType.ALPINE,
    "amzn": OSType.AMAZON,
    "arch": OSType.ARCH,
    "archarm": OSType.ARCH,
    "centos": OSType.CENTOS,
    "debian": OSType.DEBIAN,
    "endeavouros": OSType.ENDEAVOUROS,
    "fedora": OSType.FEDORA,
    "garuda": OSType.GARUDA,
    "gentoo": OSType.GENTOO,
    "linuxmint": OSType.MINT,
    "manjaro": OSType.MANJARO,
    "manjaro-arm": OSType.MANJARO,
    "mariner": OSType.MARINER,
    "nixos": OSType.NIXOS,
    "ol": OSType.ORACLELINUX,
    "opensuse": OSType.OPENSUSE,
    "opensuse-leap": OSType.OPENSUSE,
    "opensuse-tumbleweed": OSType.OPENSUSE,
    "pop": OSType.POP,
    "raspbian": OSType.RASPBIAN,
    "redhat": OSType.REDHAT,
    "rhel": OSType.REDHATENTERPRISE,
    "sles": OSType.SUSE,
    "sles_sap": OSType.SUSE,
    "suse": OSType.SUSE,
    "solus": OSType.SOLUS,
    "ubuntu": OSType.UBUNTU,
}

# sys.platform prefix -> OS family, for everything that is not linux/darwin/win32
_PLATFORM_PREFIXES = (
    ("freebsd", OSType.FREEBSD),
    ("openbsd", OSType.OPENBSD),
    ("netbsd", OSType.NETBSD),
    ("dragonfly", OSType.DRAGONFLY),
    ("midnightbsd", OSType.MIDNIGHTBSD),
    ("sunos", OSType.ILLUMOS),
    ("illumos", OSType.ILLUMOS),
    ("emscripten", OSType.EMSCRIPTEN),
    ("redox", OSType.REDOX),
)

_MACOS_CODENAMES = {
    "10.13": "High Sierra",
    "10.14": "Mojave",
    "10.15": "Catalina",
    "11": "Big Sur",
    "12": "Monterey",
    "13": "Ventura",
    "14": "Sonoma",
    "15": "Sequoia",
}

_UNKNOWN_VERSIONS = {"", "unknown", "n/a", "none"}


def normalize_version(raw: str | None) -> str | None:
    """Version string, or None for missing/unknown values."""
    if raw is None:
        return None
    value = str(raw).strip()
    if value.lower() in _UNKNOWN_VERSIONS:
        return None
    return value


def _non_empty(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class OSDescriptor:
    os_type: OSType = OSType.UNKNOWN
    bitness: Optional[Bitness] = None
    codename: Optional[str] = None
    edition: Optional[str] = None
    version: Optional[str] = None

    @classmethod
    def unknown(cls) -> "OSDescriptor":
        return cls()

    @classmethod
    def with_type(cls, os_type: OSType) -> "OSDescriptor":
        return cls(os_type=os_type)

    def to_dict(self) -> dict[str, str | None]:
        return {
            "type": self.os_type.value,
            "name": self.os_type.display_name,
            "bitness": str(self.bitness) if self.bitness else None,
            "codename": self.codename,
            "edition": self.edition,
            "version": self.version,
        }


OSReader = Callable[[], OSDescriptor]


def _linux_type(distro_id: str) -> OSType:
    if distro_id in _DISTRO_IDS:
        return _DISTRO_IDS[distro_id]
    if distro_id.startswith("opensuse"):
        return OSType.OPENSUSE
    return OSType.LINUX


def _detect_linux(bitness: Optional[Bitness]) -> OSDescriptor:
    if "ANDROID_ROOT" in os.environ and "ANDROID_DATA" in os.environ:
        return OSDescriptor(
            os_type=OSType.ANDROID,
            bitness=bitness,
            version=normalize_version(os.environ.get("ANDROID_VERSION")),
        )
    distro_id = (distro.id() or "").lower()
    os_type = _linux_type(distro_id)
    logger.debug("os-release ID %r classified as %s", distro_id, os_type.value)
    return OSDescriptor(
        os_type=os_type,
        bitness=bitness,
        codename=_non_empty(distro.codename()),
        edition=_non_empty(distro.os_release_attr("variant")),
        version=normalize_version(distro.version(best=True)),
    )


def _detect_macos(bitness: Optional[Bitness]) -> OSDescriptor:
    version = normalize_version(platform.mac_ver()[0])
    codename = None
    if version:
        parts = version.split(".")
        major = parts[0]
        codename = _MACOS_CODENAMES.get(major) or _MACOS_CODENAMES.get(".".join(parts[:2]))
    return OSDescriptor(os_type=OSType.MACOS, bitness=bitness, codename=codename, version=version)


def _detect_windows(bitness: Optional[Bitness]) -> OSDescriptor:
    edition = None
    win32_edition = getattr(platform, "win32_edition", None)
    if win32_edition is not None:
        edition = _non_empty(win32_edition())
    return OSDescriptor(
        os_type=OSType.WINDOWS,
        bitness=bitness,
        edition=edition,
        version=normalize_version(platform.version()),
    )


def detect_os() -> OSDescriptor:
    """Query the running system once and describe it."""
    bitness = Bitness.from_machine(platform.machine())
    plat = sys.platform

    if plat.startswith("linux"):
        return _detect_linux(bitness)
    if plat == "darwin":
        return _detect_macos(bitness)
    if plat in ("win32", "cygwin"):
        return _detect_windows(bitness)

    for prefix, os_type in _PLATFORM_PREFIXES:
        if plat.startswith(prefix):
            return OSDescriptor(
                os_type=os_type,
                bitness=bitness,
                version=normalize_version(platform.release()),
            )

    logger.debug("Unrecognized platform %r", plat)
    return OSDescriptor(os_type=OSType.UNKNOWN, bitness=bitness)
