"""Module manifest model.

A manifest (``modules/<id>/module.json``) is the declarative, read-only truth
about a module: identity, dependencies, configuration schema and the backend
commands it provides.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from modctl.core.schemas import schema_errors

FIELD_TYPES = ("boolean", "number", "string")
MODULE_ID_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_NO_DEFAULT = object()


@dataclass(frozen=True)
class ModuleDependency:
    module_id: str
    version_req: str = "*"
    optional: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"module_id": self.module_id, "version_req": self.version_req, "optional": self.optional}


@dataclass(frozen=True)
class ConfigField:
    field_type: str
    required: bool = False
    default: Any = _NO_DEFAULT
    description: str = ""

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "field_type": self.field_type,
            "required": self.required,
            "description": self.description,
        }
        if self.has_default:
            data["default"] = self.default
        return data


@dataclass(frozen=True)
class ModuleManifest:
    id: str
    name: str
    description: str
    version: str
    category: str = ""
    authors: Tuple[str, ...] = ()
    license: str = ""
    tags: Tuple[str, ...] = ()
    # Modules must opt in to removal; an absent flag means protected.
    can_disable: bool = False
    dependencies: Tuple[ModuleDependency, ...] = ()
    config_schema: Mapping[str, ConfigField] = field(default_factory=dict)
    commands: Tuple[str, ...] = ()

    def required_dependencies(self) -> List[ModuleDependency]:
        return [dep for dep in self.dependencies if not dep.optional]

    def requires(self, module_id: str) -> bool:
        """True when ``module_id`` is a non-optional dependency of this module."""
        return any(dep.module_id == module_id for dep in self.required_dependencies())

    def config_field(self, key: str) -> Optional[ConfigField]:
        return self.config_schema.get(key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "category": self.category,
            "authors": list(self.authors),
            "license": self.license,
            "tags": list(self.tags),
            "can_disable": self.can_disable,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "config_schema": {key: f.to_dict() for key, f in self.config_schema.items()},
            "commands": list(self.commands),
        }


def manifest_errors(module_id: str, data: Any) -> List[str]:
    """Validate raw manifest data for the module directory ``module_id``."""
    if not isinstance(data, dict):
        return ["<root>: manifest must be a JSON object"]

    errors = schema_errors(data, "module-manifest.schema")
    declared = data.get("id")
    if declared is not None and declared != module_id:
        errors.append(f"id: '{declared}' does not match module directory '{module_id}'")
    if not MODULE_ID_RE.fullmatch(module_id):
        # The id becomes a `pub mod <id>;` declaration in the aggregator.
        errors.append(f"<directory>: '{module_id}' is not a valid module identifier")
    return errors


def parse_manifest(module_id: str, data: Dict[str, Any]) -> ModuleManifest:
    """Build a :class:`ModuleManifest` from already-validated manifest data."""
    dependencies = tuple(
        ModuleDependency(
            module_id=str(dep["module_id"]),
            version_req=str(dep.get("version_req") or "*"),
            optional=bool(dep.get("optional", False)),
        )
        for dep in data.get("dependencies") or []
    )
    config_schema = {
        str(key): ConfigField(
            field_type=str(spec["field_type"]),
            required=bool(spec.get("required", False)),
            default=spec["default"] if "default" in spec else _NO_DEFAULT,
            description=str(spec.get("description") or ""),
        )
        for key, spec in (data.get("config_schema") or {}).items()
    }
    return ModuleManifest(
        id=module_id,
        name=str(data["name"]),
        description=str(data.get("description") or ""),
        version=str(data["version"]),
        category=str(data.get("category") or ""),
        authors=tuple(str(a) for a in data.get("authors") or []),
        license=str(data.get("license") or ""),
        tags=tuple(str(t) for t in data.get("tags") or []),
        can_disable=bool(data.get("can_disable", False)),
        dependencies=dependencies,
        config_schema=config_schema,
        commands=tuple(str(c) for c in data.get("commands") or []),
    )


__all__ = [
    "FIELD_TYPES",
    "MODULE_ID_RE",
    "ModuleDependency",
    "ConfigField",
    "ModuleManifest",
    "manifest_errors",
    "parse_manifest",
]
