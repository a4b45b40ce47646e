"""
Auto-discovery CLI dispatcher for modctl.

Every ``cli/commands/<name>.py`` module exposing ``SUMMARY``,
``register_args(parser)`` and ``main(args) -> int`` becomes ``modctl <name>``.
Adding a command = adding a file.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def discover_root_commands() -> dict[str, dict[str, Any]]:
    """Discover commands under cli/commands."""
    commands_dir = Path(__file__).parent / "commands"
    commands: dict[str, dict[str, Any]] = {}

    if not commands_dir.exists():
        return commands

    for item in sorted(commands_dir.glob("*.py")):
        if item.name.startswith("_"):
            continue

        cmd_name = item.stem
        try:
            module = importlib.import_module(f"modctl.cli.commands.{cmd_name}")
        except ImportError as e:
            print(f"Warning: Could not import command {cmd_name}: {e}", file=sys.stderr)
            continue
        commands[cmd_name] = {
            "module": module,
            "summary": getattr(module, "SUMMARY", cmd_name),
            "register_args": getattr(module, "register_args", None),
            "main": getattr(module, "main", None),
        }

    return commands


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with auto-discovered commands."""
    parser = argparse.ArgumentParser(
        prog="modctl",
        description="Manage optional backend modules and their generated build artifacts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Module lifecycle:\n"
            "  AVAILABLE  - present under modules/ but not installed\n"
            "  INSTALLED  - copied into the integration tree\n"
            "  ENABLED    - installed and compiled in via its feature flag\n\n"
            "After installing or uninstalling modules, rebuild the backend."
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    for cmd_name, cmd_info in sorted(discover_root_commands().items()):
        cmd_parser = subparsers.add_parser(cmd_name, help=cmd_info["summary"], description=cmd_info["summary"])
        if cmd_info["register_args"]:
            cmd_info["register_args"](cmd_parser)
        if cmd_info["main"]:
            cmd_parser.set_defaults(_func=cmd_info["main"])

    return parser


def _get_version() -> str:
    from modctl import __version__

    return __version__


def _configure_logging(args: argparse.Namespace) -> None:
    """Apply the project's logging config; ``-v`` forces DEBUG.

    Config problems are not reported here: the command itself loads the same
    configuration and reports them.
    """
    from modctl.core.stdlib_logging import configure_logging

    level: Optional[str] = "DEBUG" if getattr(args, "verbose", False) else None
    log_path = None
    problem: Optional[Exception] = None
    try:
        from modctl.cli._utils import get_repo_root
        from modctl.core.config import LoggingConfig

        cfg = LoggingConfig(repo_root=get_repo_root(args))
        level = level or cfg.level
        log_path = cfg.file_path
    except (ValueError, OSError, RuntimeError, yaml.YAMLError) as exc:
        problem = exc
    configure_logging(level=level or "WARNING", log_path=log_path)
    if problem is not None:
        logger.debug("Logging configuration unavailable, using defaults: %s", problem)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for modctl CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    _configure_logging(args)

    func: Callable[[argparse.Namespace], int] | None = getattr(args, "_func", None)
    if func is None:
        parser.print_help()
        return 1

    try:
        return int(func(args))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
