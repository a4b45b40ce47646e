"""
modctl validate command.

SUMMARY: Validate every module manifest in the registry
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import asdict

from modctl.cli import OutputFormatter, add_standard_flags, build_service, error_code_for

SUMMARY = "Validate every module manifest in the registry"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        result = build_service(args).registry.validate_all()
    except Exception as exc:
        formatter.error(exc, error_code=error_code_for(exc))
        return 1

    if formatter.json_mode:
        formatter.json_output({"ok": result.ok, "issues": [asdict(i) for i in result.issues]})
    elif not result.issues:
        formatter.success({}, "All module manifests are valid")
    else:
        for issue in result.issues:
            formatter.text(f"{issue.severity.upper()} {issue.module_id}: {issue.message}")
    return 0 if result.ok else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
