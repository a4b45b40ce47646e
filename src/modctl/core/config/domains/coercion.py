"""Domain-specific configuration for module config value coercion."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class CoercionConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "coercion"

    @cached_property
    def strict_booleans(self) -> bool:
        """Reject boolean text other than ``true``/``false`` instead of reading it as false."""
        return bool(self.section.get("strictBooleans", False))


__all__ = ["CoercionConfig"]
