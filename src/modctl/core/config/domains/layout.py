"""Domain-specific configuration for the project file layout.

All paths are configured project-relative and resolved against repo_root.
"""
from __future__ import annotations

from functools import cached_property
from pathlib import Path

from ..base import BaseDomainConfig


class LayoutConfig(BaseDomainConfig):
    """Resolved locations of the registry, store, build inputs and integration tree.

    Usage:
        layout = LayoutConfig(repo_root=Path("/path/to/project"))
        layout.store_path  # /path/to/project/module_config.json
    """

    def _config_section(self) -> str:
        return "layout"

    def _resolve(self, key: str) -> Path:
        return (self.repo_root / str(self.section[key])).resolve()

    @cached_property
    def modules_dir(self) -> Path:
        return self._resolve("modulesDir")

    @cached_property
    def manifest_file(self) -> str:
        return str(self.section["manifestFile"])

    @cached_property
    def store_path(self) -> Path:
        return self._resolve("storeFile")

    @cached_property
    def build_manifest_path(self) -> Path:
        return self._resolve("buildManifest")

    @cached_property
    def entry_file_path(self) -> Path:
        return self._resolve("entryFile")

    @cached_property
    def integration_dir(self) -> Path:
        return self._resolve("integrationDir")

    @cached_property
    def aggregator_path(self) -> Path:
        return self.integration_dir / str(self.section["aggregatorFile"])

    @cached_property
    def staging_dir(self) -> Path:
        return self._resolve("stagingDir")


__all__ = ["LayoutConfig"]
