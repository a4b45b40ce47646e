"""Centralized configuration caching.

All domain configs read through :func:`get_cached_config` so one command
invocation loads and validates the YAML layers once.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, Optional

_config_cache: Dict[str, Dict[str, Any]] = {}


def _normalize_repo_root(repo_root: Optional[Path]) -> Path:
    if repo_root is None:
        from modctl.core.utils.paths import resolve_project_root

        return resolve_project_root()
    return Path(repo_root).expanduser().resolve()


def _cache_key(repo_root: Path) -> str:
    """Cache key from repo_root, MODCTL_* environment and project config mtimes.

    Tests and long-running processes may mutate env vars or rewrite project
    config files after an initial load; both must invalidate the cache.
    """
    env_items = sorted(
        (k, os.environ.get(k, "")) for k in os.environ.keys() if k.startswith("MODCTL_")
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    from modctl.core.utils.io import iter_yaml_files
    from modctl.core.utils.paths import get_project_config_dir

    files = []
    for p in iter_yaml_files(get_project_config_dir(repo_root) / "config"):
        st = p.stat()
        files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))
    cfg_fp = hashlib.sha256(repr(files).encode("utf-8")).hexdigest()[:12]

    return f"{repo_root}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(repo_root: Optional[Path] = None) -> Dict[str, Any]:
    """Get validated configuration with caching.

    Returns the same config dict instance for the same repo_root (treat as
    immutable).
    """
    normalized_root = _normalize_repo_root(repo_root)
    key = _cache_key(normalized_root)
    if key not in _config_cache:
        from .manager import ConfigManager

        _config_cache[key] = ConfigManager(repo_root=normalized_root).load_config(validate=True)
    return _config_cache[key]


def clear_all_caches() -> None:
    """Clear all configuration caches."""
    _config_cache.clear()


def is_cached(repo_root: Optional[Path] = None) -> bool:
    return _cache_key(_normalize_repo_root(repo_root)) in _config_cache


__all__ = ["get_cached_config", "clear_all_caches", "is_cached"]
