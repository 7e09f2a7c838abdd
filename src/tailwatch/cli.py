"""Command-line interface for tailwatch."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rich.console import Console

from tailwatch import __version__
from tailwatch.config import ConfigError, dict_to_config, load_config
from tailwatch.config.schema import DEFAULT_LINES_NUMBER
from tailwatch.engine import Engine
from tailwatch.logging import get_logger, setup_logging
from tailwatch.render import StatusRenderer
from tailwatch.watching.notifier import NOTIFIER_KINDS

log = get_logger("cli")

err_console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="tailwatch",
        description="Show the last matching lines of files and follow them as they grow",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=None,
        help="Increase log verbosity (can be repeated, up to -vvvv)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Config file with watchers (YAML)",
    )
    parser.add_argument(
        "--notifier",
        choices=NOTIFIER_KINDS,
        help="How modifications are detected (default: watchdog)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        help="Seconds between checks with --notifier=poll",
    )
    parser.add_argument(
        "-n", "--lines",
        type=int,
        default=DEFAULT_LINES_NUMBER,
        help="Number of lines to keep per file given on the command line",
    )
    parser.add_argument(
        "--include",
        help="Only keep lines matching this regular expression",
    )
    parser.add_argument(
        "--exclude",
        help="Drop lines matching this regular expression",
    )
    parser.add_argument(
        "-i", "--ignore-case",
        action="store_true",
        help="Match --include/--exclude case-insensitively",
    )
    parser.add_argument(
        "--reverse",
        action="store_true",
        help="Newest line first",
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Files to watch, in addition to those in the config",
    )
    return parser


def build_overrides(parsed: argparse.Namespace) -> dict[str, Any]:
    """Turn command-line options into a config dict layered over the files."""
    overrides: dict[str, Any] = {}

    if parsed.verbose is not None:
        overrides["logging"] = {"verbose": min(parsed.verbose + 2, 4)}

    notifier: dict[str, Any] = {}
    if parsed.notifier:
        notifier["kind"] = parsed.notifier
    if parsed.poll_interval is not None:
        notifier["poll_interval"] = parsed.poll_interval
    if notifier:
        overrides["notifier"] = notifier

    return overrides


def cli_watchers(parsed: argparse.Namespace) -> list[dict[str, Any]]:
    """Watcher entries for the FILE arguments."""
    return [
        {
            "file": str(path),
            "lines_number": parsed.lines,
            "include": parsed.include,
            "exclude": parsed.exclude,
            "ignore_case": parsed.ignore_case,
            "reverse": parsed.reverse,
        }
        for path in parsed.files
    ]


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        config = load_config(parsed.config, overrides=build_overrides(parsed))
        config.watchers.extend(dict_to_config({"watchers": cli_watchers(parsed)}).watchers)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        return 2

    if not config.watchers:
        parser.print_usage()
        err_console.print("[red]No files to watch[/red]: pass FILE arguments or --config")
        return 1

    setup_logging(config.logging)
    engine = Engine(config, on_status=StatusRenderer())
    try:
        asyncio.run(engine.run_forever())
    except KeyboardInterrupt:
        log.info("Interrupted")
    return 0
