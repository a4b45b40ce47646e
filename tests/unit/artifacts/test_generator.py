from __future__ import annotations

from pathlib import Path

import pytest

from helpers.project import (
    CARGO_TOML,
    LIB_RS,
    aggregator_path,
    cargo_text,
    feature_flags,
    integration_dir,
    lib_rs_text,
    make_project,
)
from modctl.core.artifacts import ArtifactGenerator
from modctl.core.exceptions import ArtifactAnchorMissing


@pytest.fixture
def project(tmp_path: Path) -> Path:
    return make_project(tmp_path / "project")


@pytest.fixture
def generator(project: Path) -> ArtifactGenerator:
    return ArtifactGenerator(
        build_manifest_path=project / "src-tauri" / "Cargo.toml",
        entry_file_path=project / "src-tauri" / "src" / "lib.rs",
        aggregator_path=aggregator_path(project),
        entry_anchor="use config::AppConfig;",
    )


def test_plan_does_not_write(project: Path, generator: ArtifactGenerator) -> None:
    changes = generator.plan(["auth"])

    assert [c.kind for c in changes] == ["build-manifest", "aggregator", "entry"]
    assert [c.action for c in changes] == ["update", "create", "update"]
    assert cargo_text(project) == CARGO_TOML
    assert lib_rs_text(project) == LIB_RS
    assert not integration_dir(project).exists()


def test_regenerate_writes_all_artifacts(project: Path, generator: ArtifactGenerator) -> None:
    applied = generator.regenerate(["billing", "auth"])

    assert {c.kind for c in applied} == {"build-manifest", "aggregator", "entry"}
    assert feature_flags(project) == ["auth", "billing"]
    assert generator.read_feature_flags() == ["auth", "billing"]
    assert "pub mod auth;" in aggregator_path(project).read_text(encoding="utf-8")
    assert "mod modules;\nuse config::AppConfig;" in lib_rs_text(project)


def test_regenerate_is_idempotent(project: Path, generator: ArtifactGenerator) -> None:
    generator.regenerate(["auth", "billing"])
    before = {p: p.read_bytes() for p in (project / "src-tauri").rglob("*") if p.is_file()}

    assert generator.regenerate(["billing", "auth"]) == []
    assert all(not c.changed for c in generator.plan(["auth", "billing"]))

    after = {p: p.read_bytes() for p in (project / "src-tauri").rglob("*") if p.is_file()}
    assert after == before


def test_empty_set_removes_aggregator_and_empty_directory(project: Path, generator: ArtifactGenerator) -> None:
    generator.regenerate(["auth"])
    applied = generator.regenerate([])

    assert any(c.kind == "aggregator" and c.action == "delete" for c in applied)
    assert not integration_dir(project).exists()
    assert cargo_text(project) == CARGO_TOML
    assert lib_rs_text(project) == LIB_RS


def test_empty_set_keeps_directory_holding_module_files(project: Path, generator: ArtifactGenerator) -> None:
    generator.regenerate(["auth"])
    (integration_dir(project) / "auth").mkdir()

    generator.regenerate([])

    assert not aggregator_path(project).exists()
    assert (integration_dir(project) / "auth").is_dir()


def test_missing_anchor_aborts_without_writing(project: Path, generator: ArtifactGenerator) -> None:
    broken = CARGO_TOML.replace("[features]\ndefault = []\n", "")
    (project / "src-tauri" / "Cargo.toml").write_text(broken, encoding="utf-8")

    with pytest.raises(ArtifactAnchorMissing):
        generator.regenerate(["auth"])

    assert cargo_text(project) == broken
    assert lib_rs_text(project) == LIB_RS
    assert not aggregator_path(project).exists()


def test_missing_entry_file_is_an_anchor_failure(project: Path, generator: ArtifactGenerator) -> None:
    (project / "src-tauri" / "src" / "lib.rs").unlink()

    with pytest.raises(ArtifactAnchorMissing) as excinfo:
        generator.regenerate(["auth"])

    assert excinfo.value.context["detail"] == "file not found"
    assert cargo_text(project) == CARGO_TOML


def test_snapshot_restore(project: Path, generator: ArtifactGenerator) -> None:
    snapshot = generator.snapshot()
    generator.regenerate(["auth"])

    generator.restore(snapshot)

    assert cargo_text(project) == CARGO_TOML
    assert lib_rs_text(project) == LIB_RS
    assert not integration_dir(project).exists()


def test_change_to_dict(project: Path, generator: ArtifactGenerator) -> None:
    change = generator.plan(["auth"])[1]
    assert change.to_dict() == {
        "kind": "aggregator",
        "path": str(aggregator_path(project)),
        "action": "create",
    }
