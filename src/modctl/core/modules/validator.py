"""Dependency validator for install/uninstall transitions.

Checks are one hop only: install needs every non-optional upstream dependency
installed and enabled, uninstall needs no installed, enabled module to
require the target. There is no transitive solve and no cycle guard.
``version_req`` is carried on manifests but never evaluated here.
"""
from __future__ import annotations

from typing import List, Mapping, Protocol

from modctl.core.exceptions import (
    AlreadyInstalled,
    DependentExists,
    ModuleNotFound,
    NotInstalled,
    ProtectedModuleError,
    UnsatisfiedDependency,
)

from .manifest import ModuleManifest
from .registry import STATUS_INVALID, ManifestRegistry
from .store import ModuleState


class IntegrationTree(Protocol):
    def is_installed(self, module_id: str) -> bool: ...

    def installed_ids(self) -> List[str]: ...


class DependencyValidator:
    def __init__(self, registry: ManifestRegistry, tree: IntegrationTree) -> None:
        self.registry = registry
        self.tree = tree

    def _manifest(self, module_id: str) -> ModuleManifest:
        lookup = self.registry.load(module_id)
        if lookup.manifest is not None:
            return lookup.manifest
        if lookup.status == STATUS_INVALID:
            raise ModuleNotFound(module_id, reason=lookup.error)
        raise ModuleNotFound(module_id)

    def _active(self, module_id: str, states: Mapping[str, ModuleState]) -> bool:
        state = states.get(module_id)
        return self.tree.is_installed(module_id) and state is not None and state.enabled

    def check_install(self, module_id: str, states: Mapping[str, ModuleState]) -> ModuleManifest:
        """Return the manifest when ``module_id`` may be installed.

        Raises:
            ModuleNotFound: No usable manifest.
            AlreadyInstalled: The integration tree already holds the module.
            UnsatisfiedDependency: A non-optional dependency is not installed and enabled.
        """
        manifest = self._manifest(module_id)
        if self.tree.is_installed(module_id):
            raise AlreadyInstalled(module_id)

        missing = [
            dep.module_id
            for dep in manifest.required_dependencies()
            if not self._active(dep.module_id, states)
        ]
        if missing:
            raise UnsatisfiedDependency(module_id, missing[0], missing=missing)
        return manifest

    def dependents_of(self, module_id: str, states: Mapping[str, ModuleState]) -> List[str]:
        """Installed, enabled modules that list ``module_id`` as a non-optional dependency."""
        dependents: List[str] = []
        for other_id in sorted(set(self.tree.installed_ids()) | set(states)):
            if other_id == module_id or not self._active(other_id, states):
                continue
            other = self.registry.find(other_id)
            if other is not None and other.requires(module_id):
                dependents.append(other_id)
        return dependents

    def check_uninstall(self, module_id: str, states: Mapping[str, ModuleState]) -> ModuleManifest:
        """Return the manifest when ``module_id`` may be uninstalled.

        Raises:
            NotInstalled: The integration tree does not hold the module.
            ModuleNotFound: No usable manifest.
            ProtectedModuleError: The manifest sets ``can_disable`` to false.
            DependentExists: Another active module requires it.
        """
        if not self.tree.is_installed(module_id):
            raise NotInstalled(module_id)
        manifest = self._manifest(module_id)
        if not manifest.can_disable:
            raise ProtectedModuleError(module_id)

        dependents = self.dependents_of(module_id, states)
        if dependents:
            raise DependentExists(module_id, dependents[0], dependents=dependents)
        return manifest


__all__ = ["DependencyValidator", "IntegrationTree"]
