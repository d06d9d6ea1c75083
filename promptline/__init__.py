"""promptline - the os segment of a shell prompt: OS detection, symbol lookup and styled rendering."""

__version__ = "0.1.0"

from .config import OSConfig, load_config, load_os_config
from .errors import ConfigurationError, PromptlineError, TemplateError
from .formatter import Segment, StringFormatter
from .osinfo import Bitness, OSDescriptor, OSType, detect_os
from .segment import OSSegment, SegmentState, render_os_segment
from .symbols import SymbolResolver, build_symbol_table, default_symbols, resolve_symbol

__all__ = [
    "OSConfig",
    "load_config",
    "load_os_config",
    "ConfigurationError",
    "PromptlineError",
    "TemplateError",
    "Segment",
    "StringFormatter",
    "Bitness",
    "OSDescriptor",
    "OSType",
    "detect_os",
    "OSSegment",
    "SegmentState",
    "render_os_segment",
    "SymbolResolver",
    "build_symbol_table",
    "default_symbols",
    "resolve_symbol",
    "__version__",
]
