"""
The `os` prompt segment.

Shows a symbol for the current operating system and, depending on the format
string, its bitness, codename, edition, name, type and version.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from rich.color import ColorSystem

from .config import OSConfig
from .errors import TemplateError
from .formatter import Segment, StringFormatter, merge_segments
from .osinfo import OSDescriptor, OSReader, detect_os
from .symbols import SymbolResolver, default_symbols

logger = logging.getLogger(__name__)

MODULE_NAME = "os"


class SegmentState(Enum):
    PENDING = "pending"
    DISABLED = "disabled"
    RENDERING = "rendering"
    RENDERED = "rendered"
    FAILED = "failed"


def get_symbol(config: OSConfig, os: OSDescriptor) -> Optional[str]:
    return SymbolResolver(config.symbols, default_symbols()).resolve(os.os_type)


def get_bitness(os: OSDescriptor) -> Optional[str]:
    return str(os.bitness) if os.bitness is not None else None


def get_codename(os: OSDescriptor) -> Optional[str]:
    return os.codename


def get_edition(os: OSDescriptor) -> Optional[str]:
    return os.edition


def get_name(os: OSDescriptor) -> Optional[str]:
    return os.os_type.display_name


def get_type(os: OSDescriptor) -> Optional[str]:
    return os.os_type.value


def get_version(os: OSDescriptor) -> Optional[str]:
    return os.version


class OSSegment:
    """
    Renders the os segment for one prompt.

    `reader` is only called when the segment is enabled, once per render.
    A broken format string is logged and the segment renders nothing.
    """

    def __init__(self, config: OSConfig, reader: Optional[OSReader] = None):
        self.config = config
        self.reader = reader or detect_os
        self.state = SegmentState.PENDING
        self.segments: List[Segment] = []
        self.error: Optional[TemplateError] = None

    def _formatter(self, os: OSDescriptor) -> StringFormatter:
        config = self.config
        return (
            StringFormatter(config.format)
            .map_meta({"symbol": lambda: get_symbol(config, os)})
            .map_style({"style": lambda: config.style})
            .map(
                {
                    "bitness": lambda: get_bitness(os),
                    "codename": lambda: get_codename(os),
                    "edition": lambda: get_edition(os),
                    "name": lambda: get_name(os),
                    "type": lambda: get_type(os),
                    "version": lambda: get_version(os),
                }
            )
        )

    def render(self, color_system: Optional[ColorSystem] = ColorSystem.TRUECOLOR) -> Optional[str]:
        if self.config.disabled:
            self.state = SegmentState.DISABLED
            return None

        self.state = SegmentState.RENDERING
        os = self.reader()
        try:
            self.segments = merge_segments(self._formatter(os).parse())
        except TemplateError as error:
            logger.warning("Error in module `%s`:\n%s", MODULE_NAME, error)
            self.error = error
            self.segments = []
            self.state = SegmentState.FAILED
            return None

        self.state = SegmentState.RENDERED
        return "".join(seg.render(color_system) for seg in self.segments)


def render_os_segment(
    config: OSConfig,
    reader: Optional[OSReader] = None,
    color_system: Optional[ColorSystem] = ColorSystem.TRUECOLOR,
) -> Optional[str]:
    """Render the os segment; None when disabled or the format string is broken."""
    return OSSegment(config, reader).render(color_system)
