from __future__ import annotations

from pathlib import Path

import pytest

from modctl.core.utils.paths import (
    ModctlPathError,
    get_project_config_dir,
    resolve_project_root,
)


def test_environment_variable_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    other = tmp_path / "elsewhere"
    other.mkdir()
    monkeypatch.setenv("MODCTL_PROJECT_ROOT", str(other))
    assert resolve_project_root() == other.resolve()


def test_environment_variable_must_exist(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODCTL_PROJECT_ROOT", str(tmp_path / "missing"))
    with pytest.raises(ModctlPathError):
        resolve_project_root()


def test_environment_variable_cannot_point_at_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_dir = tmp_path / ".modctl"
    config_dir.mkdir()
    monkeypatch.setenv("MODCTL_PROJECT_ROOT", str(config_dir))
    with pytest.raises(ModctlPathError, match="project root"):
        resolve_project_root()


@pytest.mark.parametrize("markers", [(".modctl",), ("modules", "src-tauri")])
def test_marked_ancestor_is_found_from_subdirectory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, markers
) -> None:
    root = tmp_path / "app"
    for marker in markers:
        (root / marker).mkdir(parents=True)
    nested = root / "src-tauri" / "src"
    nested.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(nested)

    assert resolve_project_root() == root.resolve()


def test_cache_is_dropped_when_leaving_the_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    for root in (first, second):
        (root / ".modctl").mkdir(parents=True)

    monkeypatch.chdir(first)
    assert resolve_project_root() == first.resolve()
    monkeypatch.chdir(second)
    assert resolve_project_root() == second.resolve()


def test_project_config_dir(tmp_path: Path) -> None:
    assert get_project_config_dir(tmp_path) == tmp_path / ".modctl"
