"""
modctl list command.

SUMMARY: List all available modules and their status
"""

from __future__ import annotations

import argparse
import sys

from modctl.cli import OutputFormatter, add_standard_flags, build_service, error_code_for, print_info
from modctl.core.exceptions import ModctlError

SUMMARY = "List all available modules and their status"

_BULLETS = {"ENABLED": "●", "INSTALLED": "◐", "AVAILABLE": "○", "ORPHANED": "✗"}


def register_args(parser: argparse.ArgumentParser) -> None:
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        svc = build_service(args)
        statuses = svc.status()
    except Exception as exc:
        # Listing is informational: problems are reported, never a failing exit.
        formatter.error(exc, error_code=error_code_for(exc))
        return 0

    if formatter.json_mode:
        try:
            flags = svc.generator.read_feature_flags()
        except ModctlError:
            flags = None
        formatter.json_output(
            {
                "modules": [s.to_dict() for s in statuses],
                "featureFlags": flags,
                "modulesDir": str(svc.registry.modules_dir),
            }
        )
        return 0

    print_info("Available modules:")
    formatter.text()
    if not statuses:
        formatter.warning(f"No modules found in {svc.registry.modules_dir}.")
        return 0

    for status in statuses:
        bullet = _BULLETS.get(status.status, "●")
        if status.manifest is None:
            formatter.text(f"{bullet} ({status.module_id}) - {status.status}")
            formatter.text("  Store entry with no manifest in the registry.")
            formatter.text()
            continue

        manifest = status.manifest
        formatter.text(f"{bullet} {manifest.name} ({status.module_id}) - {status.status}")
        formatter.text(f"  {manifest.description}")
        formatter.text(f"  Version: {manifest.version} | Category: {manifest.category or '-'}")
        if manifest.dependencies:
            deps = ", ".join(
                dep.module_id + (" (optional)" if dep.optional else "") for dep in manifest.dependencies
            )
            formatter.text(f"  Dependencies: {deps}")
        formatter.text()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
