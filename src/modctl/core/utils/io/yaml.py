"""YAML reading for the bundled defaults, project config layers and schemas."""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any, Iterator

import yaml


def read_yaml(path: Path, default: Any = None) -> Any:
    """Load one YAML document under a shared lock.

    An empty document yields ``default``.

    Raises:
        FileNotFoundError: ``path`` does not exist.
        yaml.YAMLError: The document is not valid YAML.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_SH)
        try:
            data = yaml.safe_load(f)
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    return data if data is not None else default


def iter_yaml_files(directory: Path) -> Iterator[Path]:
    """Yield ``*.yaml``/``*.yml`` files in ``directory`` in alphabetical order."""
    if not directory.is_dir():
        return
    files = [p for p in directory.iterdir() if p.is_file() and p.suffix in {".yaml", ".yml"}]
    yield from sorted(files, key=lambda p: p.name)


__all__ = ["read_yaml", "iter_yaml_files"]
