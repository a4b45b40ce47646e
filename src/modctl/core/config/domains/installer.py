"""Domain-specific configuration for the file installer."""
from __future__ import annotations

from functools import cached_property
from typing import List

from ..base import BaseDomainConfig


class InstallerConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "installer"

    @cached_property
    def source_dir(self) -> str:
        """Per-module subdirectory copied recursively (e.g. ``src``)."""
        return str(self.section.get("sourceDir", "src"))

    @cached_property
    def implementation_files(self) -> List[str]:
        """Top-level module files copied when present."""
        return [str(name) for name in self.section.get("implementationFiles") or []]


__all__ = ["InstallerConfig"]
