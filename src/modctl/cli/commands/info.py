"""
modctl info command.

SUMMARY: Show detailed information about a module
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import cast

from modctl.cli import OutputFormatter, add_module_id_arg, add_standard_flags, build_service, error_code_for
from modctl.core.modules import ModuleManifest

SUMMARY = "Show detailed information about a module"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_module_id_arg(parser)
    add_standard_flags(parser)


def _value(value: object) -> str:
    return json.dumps(value) if not isinstance(value, str) else value


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        status = build_service(args).describe(args.module_id)
    except Exception as exc:
        formatter.error(exc, error_code=error_code_for(exc))
        return 1

    if formatter.json_mode:
        formatter.json_output(status.to_dict())
        return 0

    # describe() raises for ids without a usable manifest.
    manifest = cast(ModuleManifest, status.manifest)
    formatter.text(f"{manifest.name} ({status.module_id})")
    formatter.text_kv("Description", manifest.description)
    formatter.text_kv("Version", manifest.version)
    formatter.text_kv("Category", manifest.category or "-")
    formatter.text_kv("Authors", ", ".join(manifest.authors) or "-")
    formatter.text_kv("License", manifest.license or "-")
    formatter.text_kv("Can disable", "Yes" if manifest.can_disable else "No")
    formatter.text_kv("Status", status.status)

    if manifest.dependencies:
        formatter.text("\nDependencies:")
        for dep in manifest.dependencies:
            optional = " (optional)" if dep.optional else ""
            formatter.text(f"  - {dep.module_id} {dep.version_req}{optional}")

    if manifest.commands:
        formatter.text("\nProvided commands:")
        for name in manifest.commands:
            formatter.text(f"  - {name}")

    if manifest.config_schema:
        formatter.text("\nConfiguration schema:")
        stored = status.state.config if status.state else {}
        for key, field in manifest.config_schema.items():
            required = " (required)" if field.required else ""
            default = f" [default: {_value(field.default)}]" if field.has_default else ""
            formatter.text(f"  - {key}: {field.field_type}{required}{default}")
            if field.description:
                formatter.text(f"    {field.description}")
            if key in stored:
                formatter.text(f"    Current value: {_value(stored[key])}")

    if manifest.tags:
        formatter.text(f"\nTags: {', '.join(manifest.tags)}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
