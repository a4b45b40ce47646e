from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable

import pytest

from helpers.project import dependency, write_manifest
from modctl.core.exceptions import (
    AlreadyInstalled,
    DependentExists,
    ModuleNotFound,
    NotInstalled,
    ProtectedModuleError,
    UnsatisfiedDependency,
)
from modctl.core.modules.registry import ManifestRegistry
from modctl.core.modules.store import ModuleState
from modctl.core.modules.validator import DependencyValidator


class FakeTree:
    def __init__(self, installed: Iterable[str] = ()) -> None:
        self.installed = set(installed)

    def is_installed(self, module_id: str) -> bool:
        return module_id in self.installed

    def installed_ids(self):
        return sorted(self.installed)


def _states(*enabled: str, disabled: Iterable[str] = ()) -> Dict[str, ModuleState]:
    states = {module_id: ModuleState(module_id, enabled=True) for module_id in enabled}
    states.update({module_id: ModuleState(module_id, enabled=False) for module_id in disabled})
    return states


@pytest.fixture
def registry(tmp_path: Path) -> ManifestRegistry:
    write_manifest(tmp_path, "core", can_disable=False)
    write_manifest(tmp_path, "auth", dependencies=[dependency("core")])
    write_manifest(tmp_path, "billing", dependencies=[dependency("auth"), dependency("cache", optional=True)])
    write_manifest(tmp_path, "reports", dependencies=[dependency("auth"), dependency("billing")])
    write_manifest(tmp_path, "audit", dependencies=[dependency("auth", optional=True)])
    return ManifestRegistry(tmp_path / "modules")


def test_install_with_no_dependencies(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree())
    assert validator.check_install("core", {}).id == "core"


def test_install_unknown_module(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree())
    with pytest.raises(ModuleNotFound):
        validator.check_install("ghost", {})


def test_install_invalid_manifest_is_not_found_with_reason(tmp_path: Path, registry: ManifestRegistry) -> None:
    (tmp_path / "modules" / "broken").mkdir()
    (tmp_path / "modules" / "broken" / "module.json").write_text("{", encoding="utf-8")
    validator = DependencyValidator(registry, FakeTree())

    with pytest.raises(ModuleNotFound) as excinfo:
        validator.check_install("broken", {})
    assert "malformed JSON" in excinfo.value.context["reason"]


def test_install_already_installed(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree(["core"]))
    with pytest.raises(AlreadyInstalled):
        validator.check_install("core", _states("core"))


def test_install_ignores_optional_dependencies(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree(["core", "auth"]))
    assert validator.check_install("billing", _states("core", "auth")).id == "billing"


def test_install_requires_dependency_installed_and_enabled(registry: ManifestRegistry) -> None:
    # Enabled in the store but absent from the integration tree.
    validator = DependencyValidator(registry, FakeTree(["core"]))
    with pytest.raises(UnsatisfiedDependency) as excinfo:
        validator.check_install("billing", _states("core", "auth"))
    assert excinfo.value.dependency == "auth"

    # Installed but disabled.
    validator = DependencyValidator(registry, FakeTree(["core", "auth"]))
    with pytest.raises(UnsatisfiedDependency):
        validator.check_install("billing", _states("core", disabled=["auth"]))


def test_install_reports_first_missing_and_all_missing(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree())
    with pytest.raises(UnsatisfiedDependency) as excinfo:
        validator.check_install("reports", {})
    assert excinfo.value.dependency == "auth"
    assert excinfo.value.context["missing"] == ["auth", "billing"]


def test_install_with_dependency_missing_from_registry(tmp_path: Path, registry: ManifestRegistry) -> None:
    write_manifest(tmp_path, "orphan", dependencies=[dependency("nowhere")])
    validator = DependencyValidator(registry, FakeTree())
    with pytest.raises(UnsatisfiedDependency) as excinfo:
        validator.check_install("orphan", {})
    assert excinfo.value.dependency == "nowhere"


def test_uninstall_not_installed_wins_over_not_found(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree())
    with pytest.raises(NotInstalled):
        validator.check_uninstall("ghost", {})


def test_uninstall_installed_without_manifest(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree(["ghost"]))
    with pytest.raises(ModuleNotFound):
        validator.check_uninstall("ghost", _states("ghost"))


def test_uninstall_protected_module(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree(["core"]))
    with pytest.raises(ProtectedModuleError):
        validator.check_uninstall("core", _states("core"))


def test_uninstall_blocked_by_enabled_dependents(registry: ManifestRegistry) -> None:
    tree = FakeTree(["core", "auth", "billing", "reports", "audit"])
    validator = DependencyValidator(registry, tree)
    states = _states("core", "auth", "billing", "reports", "audit")

    with pytest.raises(DependentExists) as excinfo:
        validator.check_uninstall("auth", states)

    assert excinfo.value.dependent == "billing"
    assert excinfo.value.context["dependents"] == ["billing", "reports"]


def test_uninstall_ignores_optional_and_disabled_dependents(registry: ManifestRegistry) -> None:
    tree = FakeTree(["core", "auth", "billing", "audit"])
    validator = DependencyValidator(registry, tree)
    states = _states("core", "auth", "audit", disabled=["billing"])

    assert validator.check_uninstall("auth", states).id == "auth"
    assert validator.dependents_of("auth", states) == []


def test_dependents_enabled_in_store_but_not_installed_do_not_block(registry: ManifestRegistry) -> None:
    validator = DependencyValidator(registry, FakeTree(["core", "auth"]))
    assert validator.dependents_of("auth", _states("core", "auth", "billing")) == []
