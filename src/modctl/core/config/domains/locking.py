"""Domain-specific configuration for the per-command exclusive lock."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class LockingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "locking"

    @cached_property
    def enabled(self) -> bool:
        return bool(self.section.get("enabled", True))

    @cached_property
    def timeout_seconds(self) -> float:
        return float(self.section.get("timeoutSeconds", 10))

    @cached_property
    def poll_interval_seconds(self) -> float:
        return float(self.section.get("pollIntervalSeconds", 0.1))


__all__ = ["LockingConfig"]
