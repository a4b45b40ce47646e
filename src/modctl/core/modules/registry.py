"""Manifest registry: read-only view over the module source tree.

Each subdirectory of the modules root is one module; its manifest lives at a
fixed relative path inside it (``module.json`` by default). A broken manifest
never aborts a scan: the module is skipped and a warning is logged.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from modctl.core.exceptions import ManifestParseError, ModuleNotFound
from modctl.core.utils.io import read_json

from .manifest import MODULE_ID_RE, ModuleManifest, manifest_errors, parse_manifest

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_NOT_FOUND = "not-found"
STATUS_INVALID = "invalid"


@dataclass(frozen=True)
class ManifestLookup:
    """Outcome of loading one manifest; ``status`` tells not-found from invalid."""

    module_id: str
    status: str
    manifest: Optional[ModuleManifest] = None
    errors: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def found(self) -> bool:
        return self.status != STATUS_NOT_FOUND

    @property
    def error(self) -> str:
        return "; ".join(self.errors)


@dataclass
class ValidationIssue:
    module_id: str
    code: str
    message: str
    severity: str = "error"


@dataclass
class RegistryValidation:
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(issue.severity == "error" for issue in self.issues)


class ManifestRegistry:
    """Registry of available modules rooted at ``modules_dir``."""

    def __init__(self, modules_dir: Path, manifest_file: str = "module.json") -> None:
        self.modules_dir = Path(modules_dir)
        self.manifest_file = manifest_file

    def manifest_path(self, module_id: str) -> Path:
        return self.modules_dir / module_id / self.manifest_file

    def module_dir(self, module_id: str) -> Path:
        return self.modules_dir / module_id

    def _module_dirs(self) -> List[Path]:
        if not self.modules_dir.is_dir():
            return []
        return sorted(
            (p for p in self.modules_dir.iterdir() if p.is_dir() and not p.name.startswith(".")),
            key=lambda p: p.name,
        )

    def load(self, module_id: str) -> ManifestLookup:
        """Load one manifest. Never raises for missing or malformed files."""
        # Ids are directory names; anything path-like cannot name a module.
        if not module_id or "/" in module_id or "\\" in module_id or module_id in {".", ".."}:
            return ManifestLookup(module_id, STATUS_NOT_FOUND)

        path = self.manifest_path(module_id)
        if not path.is_file():
            return ManifestLookup(module_id, STATUS_NOT_FOUND)

        try:
            data = read_json(path)
        except (OSError, UnicodeDecodeError) as exc:
            return ManifestLookup(module_id, STATUS_INVALID, errors=(f"cannot read {path}: {exc}",))
        except json.JSONDecodeError as exc:
            return ManifestLookup(module_id, STATUS_INVALID, errors=(f"malformed JSON in {path}: {exc}",))

        errors = manifest_errors(module_id, data)
        if errors:
            return ManifestLookup(module_id, STATUS_INVALID, errors=tuple(errors))
        return ManifestLookup(module_id, STATUS_OK, manifest=parse_manifest(module_id, data))

    def get(self, module_id: str) -> ModuleManifest:
        """Return the manifest or raise.

        Raises:
            ModuleNotFound: No manifest exists for ``module_id``.
            ManifestParseError: The manifest exists but is unusable.
        """
        lookup = self.load(module_id)
        if lookup.manifest is not None:
            return lookup.manifest
        if lookup.status == STATUS_INVALID:
            raise ManifestParseError(module_id, lookup.error)
        raise ModuleNotFound(module_id)

    def find(self, module_id: str) -> Optional[ModuleManifest]:
        """Return the manifest, or None when it is missing or unusable."""
        return self.load(module_id).manifest

    def list_available(self) -> Iterator[Tuple[str, ModuleManifest]]:
        """Yield ``(id, manifest)`` for every loadable module, sorted by id.

        Each call returns a fresh generator, so the sequence can be restarted.
        """
        for module_dir in self._module_dirs():
            lookup = self.load(module_dir.name)
            if lookup.manifest is not None:
                yield module_dir.name, lookup.manifest
            elif lookup.status == STATUS_INVALID:
                logger.warning("Skipping module '%s': %s", module_dir.name, lookup.error)
            else:
                logger.warning("Skipping module '%s': no %s found", module_dir.name, self.manifest_file)

    def validate_all(self) -> RegistryValidation:
        """Check every module directory, including dangling dependency references."""
        result = RegistryValidation()
        lookups = [self.load(d.name) for d in self._module_dirs()]
        known = {lookup.module_id for lookup in lookups if lookup.ok}

        for lookup in lookups:
            if lookup.status == STATUS_NOT_FOUND:
                result.issues.append(
                    ValidationIssue(lookup.module_id, "missing", f"{self.manifest_file} not found")
                )
                continue
            if lookup.manifest is None:
                for message in lookup.errors:
                    result.issues.append(ValidationIssue(lookup.module_id, "invalid", message))
                continue

            for dep in lookup.manifest.dependencies:
                if dep.module_id in known:
                    continue
                result.issues.append(
                    ValidationIssue(
                        lookup.module_id,
                        "dangling-dependency",
                        f"dependency '{dep.module_id}' is not in the registry"
                        + (" (optional)" if dep.optional else ""),
                        severity="warning",
                    )
                )
        return result


__all__ = [
    "MODULE_ID_RE",
    "STATUS_OK",
    "STATUS_NOT_FOUND",
    "STATUS_INVALID",
    "ManifestLookup",
    "ValidationIssue",
    "RegistryValidation",
    "ManifestRegistry",
]
