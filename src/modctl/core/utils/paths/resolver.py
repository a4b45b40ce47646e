"""Centralized project root resolution for modctl.

Resolution priority:
1. ``MODCTL_PROJECT_ROOT`` environment variable
2. Nearest ancestor of the CWD that looks like a modctl project
   (contains ``.modctl/``, or both ``modules/`` and ``src-tauri/``)
3. Git repository root via ``git rev-parse --show-toplevel``
"""
from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional

from .errors import ModctlPathError

PROJECT_ROOT_ENV = "MODCTL_PROJECT_ROOT"
PROJECT_CONFIG_DIR = ".modctl"

# Cache for project root to avoid repeated filesystem/git calls
_PROJECT_ROOT_CACHE: Optional[Path] = None


def _looks_like_project(path: Path) -> bool:
    if (path / PROJECT_CONFIG_DIR).is_dir():
        return True
    return (path / "modules").is_dir() and (path / "src-tauri").is_dir()


def _find_marked_ancestor(start: Path) -> Optional[Path]:
    for candidate in (start, *start.parents):
        if _looks_like_project(candidate):
            return candidate
    return None


def resolve_project_root() -> Path:
    """Resolve project root with fail-fast validation.

    Returns:
        Path: Absolute path to project root

    Raises:
        ModctlPathError: If the root cannot be resolved
    """
    global _PROJECT_ROOT_CACHE

    # Environment override has absolute priority, even over a populated cache.
    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.is_dir():
            raise ModctlPathError(f"{PROJECT_ROOT_ENV} points at missing directory: {env_path}")
        if env_path.name == PROJECT_CONFIG_DIR:
            raise ModctlPathError(
                f"{PROJECT_ROOT_ENV} points to the {PROJECT_CONFIG_DIR} directory: {env_path}. "
                "It must point to the project root."
            )
        _PROJECT_ROOT_CACHE = env_path
        return env_path

    cwd = Path.cwd().resolve()

    # Reuse the cached value only while the caller is still inside that root.
    if _PROJECT_ROOT_CACHE is not None:
        if cwd == _PROJECT_ROOT_CACHE or _PROJECT_ROOT_CACHE in cwd.parents:
            return _PROJECT_ROOT_CACHE
        _PROJECT_ROOT_CACHE = None

    marked = _find_marked_ancestor(cwd)
    if marked is not None:
        _PROJECT_ROOT_CACHE = marked
        return marked

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=str(cwd),
            text=True,
            capture_output=True,
            check=True,
            timeout=5,
        )
    except FileNotFoundError as exc:
        raise ModctlPathError(
            f"git executable not found on PATH; set {PROJECT_ROOT_ENV} or pass --repo-root."
        ) from exc
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as exc:
        raise ModctlPathError(
            f"Unable to resolve project root. Set {PROJECT_ROOT_ENV}, pass --repo-root, "
            "or run inside the project repository."
        ) from exc

    root_str = (result.stdout or "").strip()
    if not root_str:
        raise ModctlPathError("git rev-parse --show-toplevel returned empty output")

    path = Path(root_str).expanduser().resolve()
    _PROJECT_ROOT_CACHE = path
    return path


def get_project_config_dir(repo_root: Path) -> Path:
    """Return ``<repo_root>/.modctl`` (not created)."""
    return Path(repo_root) / PROJECT_CONFIG_DIR


def reset_project_root_cache() -> None:
    global _PROJECT_ROOT_CACHE
    _PROJECT_ROOT_CACHE = None


__all__ = [
    "PROJECT_ROOT_ENV",
    "PROJECT_CONFIG_DIR",
    "resolve_project_root",
    "get_project_config_dir",
    "reset_project_root_cache",
]
