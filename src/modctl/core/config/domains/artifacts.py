"""Domain-specific configuration for generated build artifacts."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class ArtifactsConfig(BaseDomainConfig):
    """Feature-flag naming and the anchors used to patch backend files."""

    def _config_section(self) -> str:
        return "artifacts"

    @cached_property
    def feature_prefix(self) -> str:
        return str(self.section.get("featurePrefix", "module-"))

    @cached_property
    def features_table(self) -> str:
        return str(self.section.get("featuresTable", "features"))

    @cached_property
    def features_key(self) -> str:
        return str(self.section.get("featuresKey", "default"))

    @cached_property
    def entry_declaration(self) -> str:
        return str(self.section.get("entryDeclaration", "mod modules;"))

    @cached_property
    def entry_anchor(self) -> str:
        return str(self.section.get("entryAnchor") or "")


__all__ = ["ArtifactsConfig"]
