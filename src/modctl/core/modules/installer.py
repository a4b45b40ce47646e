"""File installer: copies module implementation files into the integration tree.

Presence of ``<integration_dir>/<id>/`` is what "installed" means. The
aggregator file (``mod.rs`` by default) lives in the same directory but is a
file, so only subdirectories count as installed modules.
"""
from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from modctl.core.utils.io import ensure_directory, remove_tree

logger = logging.getLogger(__name__)


class FileInstaller:
    def __init__(
        self,
        modules_dir: Path,
        integration_dir: Path,
        staging_dir: Path,
        *,
        source_dir: str = "src",
        implementation_files: Sequence[str] = ("mod.rs", "lib.rs", "handlers.rs", "models.rs"),
    ) -> None:
        self.modules_dir = Path(modules_dir)
        self.integration_dir = Path(integration_dir)
        self.staging_dir = Path(staging_dir)
        self.source_dir = source_dir
        self.implementation_files = tuple(implementation_files)

    def target_dir(self, module_id: str) -> Path:
        return self.integration_dir / module_id

    def is_installed(self, module_id: str) -> bool:
        return self.target_dir(module_id).is_dir()

    def installed_ids(self) -> List[str]:
        if not self.integration_dir.is_dir():
            return []
        return sorted(p.name for p in self.integration_dir.iterdir() if p.is_dir())

    def install(self, module_id: str) -> Path:
        """Copy the module's files into the integration tree and return the target dir.

        A module without implementation files still gets an empty directory.
        """
        source = self.modules_dir / module_id
        target = self.target_dir(module_id)
        ensure_directory(target)

        src_tree = source / self.source_dir
        if src_tree.is_dir():
            shutil.copytree(src_tree, target / self.source_dir, dirs_exist_ok=True)
            logger.debug("Copied %s -> %s", src_tree, target / self.source_dir)

        copied = 0
        for name in self.implementation_files:
            candidate = source / name
            if candidate.is_file():
                shutil.copy2(candidate, target / name)
                copied += 1
                logger.debug("Copied %s -> %s", candidate, target / name)

        logger.info("Installed files for module '%s' into %s (%d top-level file(s))", module_id, target, copied)
        return target

    def uninstall(self, module_id: str) -> bool:
        """Remove the module's integration directory; absent is a no-op."""
        removed = remove_tree(self.target_dir(module_id))
        if removed:
            logger.info("Removed %s", self.target_dir(module_id))
        return removed

    # Rollback support: uninstall detaches into staging and only discards on commit.

    def detach(self, module_id: str) -> Optional[Path]:
        """Move the module's integration directory into staging; return the stash path."""
        target = self.target_dir(module_id)
        if not target.is_dir():
            return None
        ensure_directory(self.staging_dir)
        stash = self.staging_dir / f"{module_id}.{uuid.uuid4().hex[:8]}"
        shutil.move(str(target), str(stash))
        logger.debug("Detached %s -> %s", target, stash)
        return stash

    def restore(self, module_id: str, stash: Optional[Path]) -> None:
        """Put a detached directory back in place."""
        if stash is None:
            return
        target = self.target_dir(module_id)
        remove_tree(target)
        ensure_directory(target.parent)
        shutil.move(str(stash), str(target))
        logger.warning("Restored %s after a failed command", target)

    def discard(self, stash: Optional[Path]) -> None:
        if stash is None:
            return
        remove_tree(stash)
        try:
            self.staging_dir.rmdir()
        except OSError:
            # Other stashes are still present.
            pass


__all__ = ["FileInstaller"]
