"""
modctl config command.

SUMMARY: Set a configuration value for a module
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
)

SUMMARY = "Set a configuration value for a module"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_module_id_arg(parser)
    parser.add_argument("key", help="Configuration key declared in the module's config_schema")
    parser.add_argument("value", help="Raw value; coerced to the key's declared type")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        outcome = build_service(args).set_config(args.module_id, args.key, args.value)
    except Exception as exc:
        formatter.error(exc, error_code=error_code_for(exc), hints=hints_for(exc))
        return 1

    if formatter.json_mode:
        formatter.json_output({**outcome.to_dict(), "key": args.key})
    else:
        formatter.success({}, outcome.message)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
