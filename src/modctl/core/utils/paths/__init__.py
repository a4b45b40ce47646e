"""Path utilities for modctl."""
from __future__ import annotations

from .errors import ModctlPathError
from .resolver import (
    PROJECT_CONFIG_DIR,
    PROJECT_ROOT_ENV,
    get_project_config_dir,
    reset_project_root_cache,
    resolve_project_root,
)

__all__ = [
    "ModctlPathError",
    "PROJECT_CONFIG_DIR",
    "PROJECT_ROOT_ENV",
    "get_project_config_dir",
    "reset_project_root_cache",
    "resolve_project_root",
]
