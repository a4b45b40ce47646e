"""I/O utilities for modctl.

This package provides safe, atomic file operations:
- Core: atomic writes, directory management, text I/O
- JSON: read/write with locking
- YAML: locked reads and config-layer discovery
- Locking: file locking primitives
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    read_text,
    remove_tree,
    write_text,
)
from .json import (
    read_json,
    write_json_atomic,
)
from .locking import (
    LockTimeoutError,
    acquire_file_lock,
    is_locked,
)
from .yaml import (
    iter_yaml_files,
    read_yaml,
)

__all__ = [
    # core
    "PathLike",
    "ensure_directory",
    "atomic_write",
    "read_text",
    "write_text",
    "remove_tree",
    # json
    "read_json",
    "write_json_atomic",
    # yaml
    "read_yaml",
    "iter_yaml_files",
    # locking
    "acquire_file_lock",
    "is_locked",
    "LockTimeoutError",
]
