"""Module registry, enablement state, dependency rules and lifecycle service."""
from __future__ import annotations

from .coercion import coerce_value
from .installer import FileInstaller
from .manifest import ConfigField, ModuleDependency, ModuleManifest, parse_manifest
from .registry import ManifestLookup, ManifestRegistry
from .service import CommandOutcome, ModuleService, ModuleStatus
from .store import EnablementStore, ModuleState, enabled_ids
from .validator import DependencyValidator

__all__ = [
    "ConfigField",
    "ModuleDependency",
    "ModuleManifest",
    "parse_manifest",
    "ManifestLookup",
    "ManifestRegistry",
    "EnablementStore",
    "ModuleState",
    "enabled_ids",
    "DependencyValidator",
    "FileInstaller",
    "coerce_value",
    "CommandOutcome",
    "ModuleService",
    "ModuleStatus",
]
