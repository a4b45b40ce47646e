"""Artifact generator: derive backend build inputs from the enabled-module set.

Regeneration is planned entirely in memory before anything is written, so a
missing anchor in any artifact aborts the whole run with every file untouched.
Equal input yields byte-identical output; unchanged files are not rewritten.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from modctl.core.exceptions import ArtifactAnchorMissing, PersistenceFailure
from modctl.core.utils.io import read_text, write_text

from .aggregator import render_aggregator
from .entry import render_entry
from .feature_flags import read_feature_flags, render_feature_flags

logger = logging.getLogger(__name__)

KIND_BUILD_MANIFEST = "build-manifest"
KIND_AGGREGATOR = "aggregator"
KIND_ENTRY = "entry"


@dataclass(frozen=True)
class ArtifactChange:
    """Planned state of one artifact. ``content`` is None when the file should not exist."""

    kind: str
    path: Path
    content: Optional[str]
    previous: Optional[str]

    @property
    def changed(self) -> bool:
        return self.content != self.previous

    @property
    def action(self) -> str:
        if not self.changed:
            return "unchanged"
        if self.content is None:
            return "delete"
        return "create" if self.previous is None else "update"

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "path": str(self.path), "action": self.action}


@dataclass(frozen=True)
class ArtifactSnapshot:
    """Pre-command contents of every managed artifact, used for rollback."""

    files: Dict[Path, Optional[str]]
    integration_dir_existed: bool


def _read_optional(path: Path) -> Optional[str]:
    try:
        return read_text(path)
    except FileNotFoundError:
        return None


class ArtifactGenerator:
    def __init__(
        self,
        *,
        build_manifest_path: Path,
        entry_file_path: Path,
        aggregator_path: Path,
        feature_prefix: str = "module-",
        features_table: str = "features",
        features_key: str = "default",
        entry_declaration: str = "mod modules;",
        entry_anchor: str = "",
    ) -> None:
        self.build_manifest_path = Path(build_manifest_path)
        self.entry_file_path = Path(entry_file_path)
        self.aggregator_path = Path(aggregator_path)
        self.feature_prefix = feature_prefix
        self.features_table = features_table
        self.features_key = features_key
        self.entry_declaration = entry_declaration
        self.entry_anchor = entry_anchor

    @property
    def integration_dir(self) -> Path:
        return self.aggregator_path.parent

    def _require(self, path: Path, anchor: str) -> str:
        text = _read_optional(path)
        if text is None:
            raise ArtifactAnchorMissing(str(path), anchor, detail="file not found")
        return text

    def plan(self, enabled_ids: Iterable[str]) -> List[ArtifactChange]:
        """Compute every artifact's target content without writing.

        Raises:
            ArtifactAnchorMissing: An artifact's patch point cannot be located.
        """
        ids = sorted(set(enabled_ids))

        manifest_text = self._require(
            self.build_manifest_path, f"[{self.features_table}] {self.features_key} = [...]"
        )
        manifest_new = render_feature_flags(
            manifest_text,
            ids,
            prefix=self.feature_prefix,
            table=self.features_table,
            key=self.features_key,
            path=str(self.build_manifest_path),
        )

        entry_text = self._require(self.entry_file_path, self.entry_anchor or self.entry_declaration)
        entry_new = render_entry(
            entry_text,
            enabled=bool(ids),
            declaration=self.entry_declaration,
            anchor=self.entry_anchor,
        )

        aggregator_new = render_aggregator(ids, feature_prefix=self.feature_prefix) if ids else None

        return [
            ArtifactChange(KIND_BUILD_MANIFEST, self.build_manifest_path, manifest_new, manifest_text),
            ArtifactChange(KIND_AGGREGATOR, self.aggregator_path, aggregator_new, _read_optional(self.aggregator_path)),
            ArtifactChange(KIND_ENTRY, self.entry_file_path, entry_new, entry_text),
        ]

    def _remove_integration_dir_if_empty(self) -> None:
        directory = self.integration_dir
        if not directory.is_dir():
            return
        leftovers = sorted(p.name for p in directory.iterdir())
        if leftovers:
            logger.warning(
                "Leaving %s in place: it still holds %s", directory, ", ".join(leftovers)
            )
            return
        directory.rmdir()
        logger.debug("Removed empty integration directory %s", directory)

    def apply(self, changes: Iterable[ArtifactChange]) -> List[ArtifactChange]:
        """Write planned changes; return the ones that modified disk.

        Raises:
            PersistenceFailure: A write or delete failed.
        """
        applied: List[ArtifactChange] = []
        for change in changes:
            if change.kind == KIND_AGGREGATOR and change.content is None:
                # Nothing enabled: the aggregator and its directory go away.
                try:
                    if change.previous is not None:
                        change.path.unlink(missing_ok=True)
                    self._remove_integration_dir_if_empty()
                except OSError as exc:
                    raise PersistenceFailure(f"Failed to remove {change.path}: {exc}", path=str(change.path)) from exc
                if change.changed:
                    logger.info("Deleted %s", change.path)
                    applied.append(change)
                continue

            if not change.changed or change.content is None:
                continue
            try:
                write_text(change.path, change.content)
            except OSError as exc:
                raise PersistenceFailure(f"Failed to write {change.path}: {exc}", path=str(change.path)) from exc
            logger.info("Wrote %s (%s)", change.path, change.kind)
            applied.append(change)
        return applied

    def regenerate(self, enabled_ids: Iterable[str]) -> List[ArtifactChange]:
        """Plan then write all artifacts for ``enabled_ids``."""
        return self.apply(self.plan(enabled_ids))

    def snapshot(self) -> ArtifactSnapshot:
        paths = (self.build_manifest_path, self.aggregator_path, self.entry_file_path)
        return ArtifactSnapshot(
            files={path: _read_optional(path) for path in paths},
            integration_dir_existed=self.integration_dir.is_dir(),
        )

    def restore(self, snapshot: ArtifactSnapshot) -> None:
        """Put every managed artifact back as captured by :meth:`snapshot`."""
        for path, content in snapshot.files.items():
            current = _read_optional(path)
            if current == content:
                continue
            if content is None:
                path.unlink(missing_ok=True)
            else:
                write_text(path, content)
            logger.warning("Restored %s after a failed command", path)
        if not snapshot.integration_dir_existed:
            self._remove_integration_dir_if_empty()

    def read_feature_flags(self) -> List[str]:
        text = self._require(
            self.build_manifest_path, f"[{self.features_table}] {self.features_key} = [...]"
        )
        return read_feature_flags(
            text,
            prefix=self.feature_prefix,
            table=self.features_table,
            key=self.features_key,
            path=str(self.build_manifest_path),
        )


__all__ = [
    "KIND_BUILD_MANIFEST",
    "KIND_AGGREGATOR",
    "KIND_ENTRY",
    "ArtifactChange",
    "ArtifactSnapshot",
    "ArtifactGenerator",
]
