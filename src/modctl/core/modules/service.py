"""Module lifecycle orchestration.

``ModuleService`` sequences the registry, store, validator, installer and
artifact generator for each command. State-changing commands run inside an
exclusive file lock and are all-or-nothing: the write order is integration
tree, then artifacts, then store, and a failure at any step undoes the steps
before it before the error propagates.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from modctl.core.artifacts import ArtifactChange, ArtifactGenerator
from modctl.core.exceptions import AlreadyInstalled, ModuleNotFound, NotInstalled, UnknownKey
from modctl.core.utils.io import acquire_file_lock

from .coercion import coerce_value
from .installer import FileInstaller
from .manifest import ModuleManifest
from .registry import ManifestRegistry
from .store import EnablementStore, ModuleState, enabled_ids
from .validator import DependencyValidator

logger = logging.getLogger(__name__)

STATUS_ENABLED = "ENABLED"
STATUS_INSTALLED = "INSTALLED"
STATUS_AVAILABLE = "AVAILABLE"
STATUS_ORPHANED = "ORPHANED"


@dataclass(frozen=True)
class CommandOutcome:
    """What a state-changing command did. ``changed`` is False for no-ops."""

    action: str
    module_id: str = ""
    changed: bool = True
    message: str = ""
    manifest: Optional[ModuleManifest] = None
    artifacts: Tuple[ArtifactChange, ...] = ()
    enabled: Tuple[str, ...] = ()
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "action": self.action,
            "changed": self.changed,
            "message": self.message,
            "enabled": list(self.enabled),
            "artifacts": [change.to_dict() for change in self.artifacts],
        }
        if self.module_id:
            data["module_id"] = self.module_id
        if self.action == "configure":
            data["value"] = self.value
        return data


@dataclass(frozen=True)
class ModuleStatus:
    module_id: str
    status: str
    installed: bool
    manifest: Optional[ModuleManifest] = None
    state: Optional[ModuleState] = None
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return self.state is not None and self.state.enabled

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.module_id,
            "status": self.status,
            "installed": self.installed,
            "enabled": self.enabled,
            "manifest": self.manifest.to_dict() if self.manifest else None,
            "state": self.state.to_dict() if self.state else None,
            "config": dict(self.config),
        }


def _status_for(installed: bool, state: Optional[ModuleState], has_manifest: bool) -> str:
    if not has_manifest:
        return STATUS_ORPHANED
    if installed and state is not None and state.enabled:
        return STATUS_ENABLED
    if installed:
        return STATUS_INSTALLED
    return STATUS_AVAILABLE


class ModuleService:
    def __init__(
        self,
        *,
        registry: ManifestRegistry,
        store: EnablementStore,
        installer: FileInstaller,
        generator: ArtifactGenerator,
        lock_path: Optional[Path] = None,
        lock_timeout: float = 10.0,
        lock_poll_interval: float = 0.1,
        strict_booleans: bool = False,
    ) -> None:
        self.registry = registry
        self.store = store
        self.installer = installer
        self.generator = generator
        self.validator = DependencyValidator(registry, installer)
        self.lock_path = lock_path
        self.lock_timeout = lock_timeout
        self.lock_poll_interval = lock_poll_interval
        self.strict_booleans = strict_booleans

    @classmethod
    def from_config(cls, repo_root: Optional[Path] = None) -> "ModuleService":
        """Build a service wired from the layered configuration of ``repo_root``."""
        from modctl.core.config import (
            ArtifactsConfig,
            CoercionConfig,
            InstallerConfig,
            LayoutConfig,
            LockingConfig,
        )

        layout = LayoutConfig(repo_root=repo_root)
        artifacts = ArtifactsConfig(repo_root=repo_root)
        installer_cfg = InstallerConfig(repo_root=repo_root)
        locking = LockingConfig(repo_root=repo_root)

        return cls(
            registry=ManifestRegistry(layout.modules_dir, layout.manifest_file),
            store=EnablementStore(layout.store_path),
            installer=FileInstaller(
                layout.modules_dir,
                layout.integration_dir,
                layout.staging_dir,
                source_dir=installer_cfg.source_dir,
                implementation_files=installer_cfg.implementation_files,
            ),
            generator=ArtifactGenerator(
                build_manifest_path=layout.build_manifest_path,
                entry_file_path=layout.entry_file_path,
                aggregator_path=layout.aggregator_path,
                feature_prefix=artifacts.feature_prefix,
                features_table=artifacts.features_table,
                features_key=artifacts.features_key,
                entry_declaration=artifacts.entry_declaration,
                entry_anchor=artifacts.entry_anchor,
            ),
            lock_path=layout.store_path if locking.enabled else None,
            lock_timeout=locking.timeout_seconds,
            lock_poll_interval=locking.poll_interval_seconds,
            strict_booleans=CoercionConfig(repo_root=repo_root).strict_booleans,
        )

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the project-wide command lock, when locking is enabled."""
        if self.lock_path is None:
            yield
            return
        with acquire_file_lock(self.lock_path, timeout=self.lock_timeout, poll_interval=self.lock_poll_interval):
            logger.debug("Acquired command lock for %s", self.lock_path)
            yield

    # ------------------------------------------------------------------
    # State-changing commands
    # ------------------------------------------------------------------
    def install(self, module_id: str) -> CommandOutcome:
        """Copy files, enable the module and regenerate artifacts.

        Raises:
            ModuleNotFound, UnsatisfiedDependency, ArtifactAnchorMissing, PersistenceFailure
        """
        with self.exclusive():
            states = self.store.load()
            try:
                manifest = self.validator.check_install(module_id, states)
            except AlreadyInstalled as exc:
                logger.info("%s", exc)
                return CommandOutcome(
                    action="install",
                    module_id=module_id,
                    changed=False,
                    message=str(exc),
                    manifest=self.registry.find(module_id),
                    enabled=tuple(enabled_ids(states)),
                )

            snapshot = self.generator.snapshot()
            try:
                self.installer.install(module_id)
                state = states.get(module_id) or ModuleState(module_id=module_id)
                state.enabled = True
                states[module_id] = state
                enabled = enabled_ids(states)
                changes = self.generator.regenerate(enabled)
                self.store.save(states)
            except Exception:
                logger.warning("Install of '%s' failed; rolling back", module_id)
                self.installer.uninstall(module_id)
                self.generator.restore(snapshot)
                raise

        return CommandOutcome(
            action="install",
            module_id=module_id,
            message=f"Installed and enabled module '{manifest.name}' ({module_id})",
            manifest=manifest,
            artifacts=tuple(changes),
            enabled=tuple(enabled),
        )

    def uninstall(self, module_id: str) -> CommandOutcome:
        """Remove files and state, then regenerate artifacts.

        Raises:
            ModuleNotFound, ProtectedModuleError, DependentExists,
            ArtifactAnchorMissing, PersistenceFailure
        """
        with self.exclusive():
            states = self.store.load()
            try:
                manifest = self.validator.check_uninstall(module_id, states)
            except NotInstalled as exc:
                logger.info("%s", exc)
                return CommandOutcome(
                    action="uninstall",
                    module_id=module_id,
                    changed=False,
                    message=str(exc),
                    manifest=self.registry.find(module_id),
                    enabled=tuple(enabled_ids(states)),
                )

            snapshot = self.generator.snapshot()
            stash = self.installer.detach(module_id)
            try:
                states.pop(module_id, None)
                enabled = enabled_ids(states)
                changes = self.generator.regenerate(enabled)
                self.store.save(states)
            except Exception:
                logger.warning("Uninstall of '%s' failed; rolling back", module_id)
                self.generator.restore(snapshot)
                self.installer.restore(module_id, stash)
                raise
            self.installer.discard(stash)

        return CommandOutcome(
            action="uninstall",
            module_id=module_id,
            message=f"Uninstalled module '{manifest.name}' ({module_id})",
            manifest=manifest,
            artifacts=tuple(changes),
            enabled=tuple(enabled),
        )

    def set_config(self, module_id: str, key: str, raw_value: str) -> CommandOutcome:
        """Coerce ``raw_value`` per the module's schema and persist it.

        Raises:
            ModuleNotFound, UnknownKey, InvalidValue, PersistenceFailure
        """
        with self.exclusive():
            manifest = self.registry.find(module_id)
            if manifest is None:
                lookup = self.registry.load(module_id)
                raise ModuleNotFound(module_id, reason=lookup.error or None)

            config_field = manifest.config_field(key)
            if config_field is None:
                raise UnknownKey(module_id, key, available=list(manifest.config_schema))

            value = coerce_value(
                config_field,
                raw_value,
                key=key,
                module_id=module_id,
                strict_booleans=self.strict_booleans,
            )

            states = self.store.load()
            state = states.get(module_id) or ModuleState(module_id=module_id, enabled=False)
            state.config[key] = value
            states[module_id] = state
            self.store.save(states)

        return CommandOutcome(
            action="configure",
            module_id=module_id,
            message=f"Set {module_id}.{key} = {_display(value)}",
            manifest=manifest,
            enabled=tuple(enabled_ids(states)),
            value=value,
        )

    def sync(self, *, check: bool = False) -> CommandOutcome:
        """Regenerate artifacts from the store alone. ``check`` plans without writing."""
        with self.exclusive():
            enabled = enabled_ids(self.store.load())
            if check:
                stale = [change for change in self.generator.plan(enabled) if change.changed]
                return CommandOutcome(
                    action="check",
                    changed=bool(stale),
                    message="Artifacts are stale" if stale else "Artifacts are up to date",
                    artifacts=tuple(stale),
                    enabled=tuple(enabled),
                )
            changes = self.generator.regenerate(enabled)

        return CommandOutcome(
            action="sync",
            changed=bool(changes),
            message=f"Synced artifacts for {len(enabled)} enabled module(s)",
            artifacts=tuple(changes),
            enabled=tuple(enabled),
        )

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------
    def status(self) -> List[ModuleStatus]:
        """Status of every registry module plus store entries with no manifest."""
        states = self.store.load()
        installed = set(self.installer.installed_ids())
        statuses: List[ModuleStatus] = []
        seen = set()
        for module_id, manifest in self.registry.list_available():
            seen.add(module_id)
            state = states.get(module_id)
            statuses.append(
                ModuleStatus(
                    module_id=module_id,
                    status=_status_for(module_id in installed, state, True),
                    installed=module_id in installed,
                    manifest=manifest,
                    state=state,
                    config=_effective_config(manifest, state),
                )
            )
        for module_id in sorted(set(states) - seen):
            state = states[module_id]
            statuses.append(
                ModuleStatus(
                    module_id=module_id,
                    status=STATUS_ORPHANED,
                    installed=module_id in installed,
                    state=state,
                    config=dict(state.config),
                )
            )
        return statuses

    def describe(self, module_id: str) -> ModuleStatus:
        """Manifest plus current state for one module.

        Raises:
            ModuleNotFound: No usable manifest for ``module_id``.
        """
        lookup = self.registry.load(module_id)
        if lookup.manifest is None:
            raise ModuleNotFound(module_id, reason=lookup.error or None)
        state = self.store.load().get(module_id)
        installed = self.installer.is_installed(module_id)
        return ModuleStatus(
            module_id=module_id,
            status=_status_for(installed, state, True),
            installed=installed,
            manifest=lookup.manifest,
            state=state,
            config=_effective_config(lookup.manifest, state),
        )


def _effective_config(manifest: ModuleManifest, state: Optional[ModuleState]) -> Dict[str, Any]:
    """Schema defaults overlaid with stored values."""
    config = {key: f.default for key, f in manifest.config_schema.items() if f.has_default}
    if state is not None:
        config.update(state.config)
    return config


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = [
    "STATUS_ENABLED",
    "STATUS_INSTALLED",
    "STATUS_AVAILABLE",
    "STATUS_ORPHANED",
    "CommandOutcome",
    "ModuleStatus",
    "ModuleService",
]
