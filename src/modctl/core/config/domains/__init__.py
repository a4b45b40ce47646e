"""Domain-specific configuration accessors."""
from __future__ import annotations

from .artifacts import ArtifactsConfig
from .coercion import CoercionConfig
from .installer import InstallerConfig
from .layout import LayoutConfig
from .locking import LockingConfig
from .logging import LoggingConfig

__all__ = [
    "ArtifactsConfig",
    "CoercionConfig",
    "InstallerConfig",
    "LayoutConfig",
    "LockingConfig",
    "LoggingConfig",
]
