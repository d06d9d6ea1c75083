from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Sequence

from rich.color import ColorSystem
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import OSConfig, load_config, os_config_schema_json, platform_config_default
from .errors import ConfigurationError
from .osinfo import detect_os
from .segment import render_os_segment

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _epilog() -> str:
    return (
        "Examples:\n"
        "  promptline os --enable\n"
        "  promptline -c ~/.config/promptline/config.toml symbols --json\n"
        "  promptline os --enable --format '[$symbol$name]($style)'\n"
        "\n"
        f"Default config path: {platform_config_default()}\n"
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="promptline",
        description="Render the os segment of a shell prompt",
        epilog=_epilog(),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    p.add_argument("--version", "-V", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--config", "-c", help="Path to config TOML (overrides PROMPTLINE_CONFIG & defaults)")
    p.add_argument(
        "--log-level", "-l",
        choices=sorted(LOG_LEVELS),
        default="warning",
        help="Logging level written to stderr (default: warning)",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("os", help="Render the os segment.")
    sp.add_argument("--format", "-f", help="Override the configured format string")
    sp.add_argument("--style", "-s", help="Override the configured style")
    sp.add_argument("--enable", "-e", action="store_true", help="Render even if the segment is disabled in config")
    sp.add_argument("--no-color", "-n", action="store_true", help="Emit plain text without ANSI styles")
    sp.set_defaults(func=cmd_os)

    sp = sub.add_parser("symbols", help="Show the effective symbol table.")
    sp.add_argument("--json", "-j", action="store_true", help="Print as JSON")
    sp.set_defaults(func=cmd_symbols)

    sp = sub.add_parser("detect", help="Show what was detected about this OS.")
    sp.add_argument("--json", "-j", action="store_true", help="Print as JSON")
    sp.set_defaults(func=cmd_detect)

    sp = sub.add_parser("schema", help="Print the JSON schema of the [os] table.")
    sp.set_defaults(func=cmd_schema)

    return p


def _load_cfg_from_args(args: argparse.Namespace, **overrides) -> OSConfig:
    return load_config(args.config, **overrides)


def cmd_os(args: argparse.Namespace) -> int:
    cfg = _load_cfg_from_args(
        args,
        format=args.format,
        style=args.style,
        disabled=False if args.enable else None,
    )
    color_system = None if (args.no_color or os.environ.get("NO_COLOR")) else ColorSystem.TRUECOLOR
    rendered = render_os_segment(cfg, color_system=color_system)
    if rendered:
        sys.stdout.write(rendered)
    return 0


def cmd_symbols(args: argparse.Namespace) -> int:
    cfg = _load_cfg_from_args(args)
    table = cfg.effective_symbols()
    if args.json:
        print(json.dumps(table, indent=2, ensure_ascii=False))
        return 0
    view = Table(title="os symbols")
    view.add_column("identifier")
    view.add_column("symbol")
    view.add_column("source", style="dim")
    configured = cfg.configured_symbols()
    for key, symbol in table.items():
        source = "config" if key in configured else "default"
        view.add_row(key, escape(repr(symbol)), source)
    Console().print(view)
    return 0


def cmd_detect(args: argparse.Namespace) -> int:
    info = detect_os().to_dict()
    if args.json:
        print(json.dumps(info, indent=2, ensure_ascii=False))
        return 0
    view = Table(title="detected os")
    view.add_column("attribute")
    view.add_column("value")
    for key, value in info.items():
        view.add_row(key, escape(value) if value is not None else "[dim]-[/]")
    Console().print(view)
    return 0


def cmd_schema(args: argparse.Namespace) -> int:
    print(os_config_schema_json())
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=LOG_LEVELS[args.log_level],
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    try:
        return args.func(args)
    except ConfigurationError as e:
        print(f"[promptline] {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
