"""
modctl sync command.

SUMMARY: Regenerate build artifacts from the module store
"""

from __future__ import annotations

import argparse
import sys

from modctl.cli import OutputFormatter, add_standard_flags, build_service, error_code_for

SUMMARY = "Regenerate build artifacts from the module store"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report stale artifacts without writing; exit 1 when any are stale",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    check = bool(getattr(args, "check", False))
    try:
        outcome = build_service(args).sync(check=check)
    except Exception as exc:
        formatter.error(exc, error_code=error_code_for(exc))
        return 1

    if formatter.json_mode:
        formatter.json_output(outcome.to_dict())
    else:
        if check and outcome.changed:
            formatter.warning(outcome.message)
        else:
            formatter.success({}, outcome.message)
        for change in outcome.artifacts:
            formatter.text(f"  {change.action}: {change.path}")

    return 1 if check and outcome.changed else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
