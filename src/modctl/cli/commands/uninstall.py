"""
modctl uninstall command.

SUMMARY: Uninstall and disable a module
"""

from __future__ import annotations

import argparse
import sys

from modctl.cli import (
    OutputFormatter,
    add_module_id_arg,
    add_standard_flags,
    build_service,
    error_code_for,
    hints_for,
    print_info,
)

SUMMARY = "Uninstall and disable a module"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_module_id_arg(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        outcome = build_service(args).uninstall(args.module_id)
    except Exception as exc:
        formatter.error(exc, error_code=error_code_for(exc), hints=hints_for(exc))
        return 1

    if formatter.json_mode:
        formatter.json_output(outcome.to_dict())
    elif not outcome.changed:
        formatter.warning(outcome.message)
    else:
        formatter.success({}, outcome.message)
        print_info("Rebuild the backend to compile without the module.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
