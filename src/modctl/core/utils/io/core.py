"""File primitives shared by the store, the installer and the artifact writers.

Generated artifacts and ``module_config.json`` are always replaced through
:func:`atomic_write`, so a crash leaves either the old or the new file and
never a truncated one. Text is read and written with ``newline=""``: the
files modctl patches belong to the project and keep whatever line endings
the checkout uses.
"""
from __future__ import annotations

import fcntl
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

PathLike = Union[str, Path]


def ensure_directory(path: PathLike) -> Path:
    """Create ``path`` (and parents) when missing and return it.

    Raises:
        NotADirectoryError: ``path`` exists but is a file.
    """
    path = Path(path)
    if path.exists() and not path.is_dir():
        raise NotADirectoryError(f"Path exists but is not a directory: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: PathLike, write_fn: Callable[[TextIO], None], *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with whatever ``write_fn`` writes.

    The content goes to a hidden sibling temp file which is flock'd, fsync'd
    and then renamed over the target. The temp file never outlives the call.
    """
    path = Path(path)
    ensure_directory(path.parent)

    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=str(path.parent),
            prefix=f".{path.name}.",
            delete=False,
            newline="",
        ) as f:
            tmp_path = Path(f.name)
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(tmp_path, path)
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def read_text(path: PathLike) -> str:
    """Read UTF-8 text exactly as stored (``\\r\\n`` is not folded).

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Text file not found: {path}")
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: PathLike, content: str) -> None:
    atomic_write(path, lambda f: f.write(content))


def remove_tree(path: PathLike) -> bool:
    """Recursively remove ``path`` if it exists.

    Returns:
        True when something was removed, False when ``path`` was already absent.
    """
    target = Path(path)
    if not target.exists() and not target.is_symlink():
        return False
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    else:
        target.unlink()
    return True


__all__ = [
    "PathLike",
    "ensure_directory",
    "atomic_write",
    "read_text",
    "write_text",
    "remove_tree",
]
