# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LaunchBar action script entry point for Swift Evolution proposal search."""

import argparse
import json
import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

from evolution.config import ActionSettings, debug_enabled
from evolution.errors import EvolutionError
from evolution.http import RequestsFetcher
from evolution.model import LaunchBarItem
from evolution.resolver import Resolver
from evolution.stores import JsonFileCacheStore

logger = logging.getLogger(__name__)

PACKAGE_LOGGER_NAME = "evolution"
DEBUG_FLAGS: frozenset[str] = frozenset({"--debug", "-d"})
HELP_FLAGS: frozenset[str] = frozenset({"--help", "-h"})


@dataclass(frozen=True)
class CommandLineOptions:
    """Represent parsed command line options."""

    query: str
    debug: bool
    help: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser used for flags and usage text.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(
        prog="swift-evolution",
        description="Search Swift Evolution proposals and print LaunchBar items.",
        usage="%(prog)s [--debug|-d] [--help|-h] [query...]",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--debug", "-d", action="store_true", help="Enable verbose logging."
    )
    parser.add_argument(
        "--help", "-h", action="store_true", help="Show this help message."
    )
    parser.add_argument(
        "query",
        nargs="*",
        metavar="query",
        help="Free text or a proposal number. Unknown options are query text.",
    )
    return parser


def parse_command_line(argv: list[str]) -> CommandLineOptions:
    """Split arguments into recognized flags and query text.

    Args:
        argv: CLI arguments without the program name.

    Returns:
        Parsed options. Tokens other than the recognized flags are joined
        into the query, in order.
    """
    flags = [arg for arg in argv if arg in DEBUG_FLAGS or arg in HELP_FLAGS]
    query_parts = [arg for arg in argv if arg not in DEBUG_FLAGS and arg not in HELP_FLAGS]
    args = build_parser().parse_args(flags)
    return CommandLineOptions(
        query=" ".join(query_parts), debug=args.debug, help=args.help
    )


def configure_logging(debug: bool, stderr: TextIO) -> logging.Logger:
    """Configure Rich logging on the diagnostic stream.

    Args:
        debug: Whether verbose diagnostics are enabled.
        stderr: Diagnostic output stream.

    Returns:
        Package logger handed to the resolver.
    """
    handler = RichHandler(
        console=Console(file=stderr, force_terminal=False),
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if isinstance(h, RichHandler)]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    return package_logger


def build_resolver(
    settings: ActionSettings, package_logger: logging.Logger
) -> Resolver:
    """Create the resolver wired to the JSON cache and HTTP fetcher.

    Args:
        settings: Runtime settings.
        package_logger: Diagnostic logger.

    Returns:
        Configured resolver.
    """
    return Resolver(
        store=JsonFileCacheStore(cache_file=settings.cache_file),
        fetcher=RequestsFetcher(url=settings.catalog_url, timeout=settings.fetch_timeout),
        logger=package_logger,
    )


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    environ: Mapping[str, str] | None = None,
    resolver: Resolver | None = None,
) -> int:
    """Run the action.

    Args:
        argv: CLI arguments.
        stdout: Structured output stream; receives exactly one item list.
        stderr: Diagnostic output stream.
        environ: Environment mapping; defaults to ``os.environ``.
        resolver: Resolver override used instead of the default wiring.

    Returns:
        Exit code.
    """
    options = parse_command_line(argv)
    if options.help:
        stdout.write(build_parser().format_help())
        return 0

    env = os.environ if environ is None else environ
    package_logger = configure_logging(
        debug=debug_enabled(env, debug_flag=options.debug), stderr=stderr
    )
    package_logger.debug(
        f"Debug logging enabled (source={'flag' if options.debug else 'environment'})"
    )

    try:
        if resolver is None:
            settings = ActionSettings.from_environ(env)
            package_logger.debug(f"Using cache file (path={settings.cache_file})")
            resolver = build_resolver(settings, package_logger)
        items = resolver.resolve(options.query)
    except EvolutionError as exc:
        package_logger.debug(f"Returning error item (error={exc})")
        items = [LaunchBarItem.from_error(exc)]
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected failure while resolving query")
        items = [LaunchBarItem.from_error(exc)]

    write_items(items, stdout=stdout)
    return 0


def render_items(items: list[LaunchBarItem]) -> str:
    """Serialize items as pretty-printed JSON with sorted keys.

    Args:
        items: Result rows.

    Returns:
        JSON array text.
    """
    return json.dumps(
        [item.to_json() for item in items],
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
    )


def write_items(items: list[LaunchBarItem], stdout: TextIO) -> None:
    """Write the item list to the structured output stream.

    Args:
        items: Result rows.
        stdout: Structured output stream.
    """
    try:
        text = render_items(items)
        text.encode("utf-8")
    except (TypeError, ValueError) as exc:
        logger.warning(f"Failed to encode items (count={len(items)} error={exc})")
        text = render_items([LaunchBarItem.from_error(exc)])
    console = Console(file=stdout, force_terminal=False, color_system=None)
    console.print(
        text,
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


def main() -> None:
    """Run the action and exit."""
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
