"""modctl configuration system.

Usage:
    from modctl.core.config import ConfigManager
    from modctl.core.config.domains import LayoutConfig

    manager = ConfigManager(repo_root=Path("/path/to/project"))
    config = manager.load_config()

    layout = LayoutConfig(repo_root=Path("/path/to/project"))
    layout.store_path
"""
from __future__ import annotations

from .base import BaseDomainConfig
from .cache import clear_all_caches, get_cached_config, is_cached
from .domains import (
    ArtifactsConfig,
    CoercionConfig,
    InstallerConfig,
    LayoutConfig,
    LockingConfig,
    LoggingConfig,
)
from .manager import ConfigManager

__all__ = [
    "ConfigManager",
    "BaseDomainConfig",
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
    "ArtifactsConfig",
    "CoercionConfig",
    "InstallerConfig",
    "LayoutConfig",
    "LockingConfig",
    "LoggingConfig",
]
