from __future__ import annotations

from pathlib import Path

import pytest

from helpers.project import write_config
from modctl.core.config import ConfigManager, get_cached_config, is_cached
from modctl.core.schemas import SchemaValidationError


def test_bundled_defaults(tmp_path: Path) -> None:
    cfg = ConfigManager(repo_root=tmp_path).load_config()

    assert cfg["layout"]["modulesDir"] == "modules"
    assert cfg["layout"]["storeFile"] == "module_config.json"
    assert cfg["artifacts"]["featurePrefix"] == "module-"
    assert cfg["coercion"]["strictBooleans"] is False
    assert cfg["locking"]["enabled"] is True


def test_project_files_merge_in_alphabetical_order(tmp_path: Path) -> None:
    write_config(tmp_path, "10-layout.yaml", {"layout": {"storeFile": "state/modules.json"}})
    write_config(tmp_path, "20-override.yml", {"layout": {"storeFile": "final.json"}, "coercion": {"strictBooleans": True}})

    manager = ConfigManager(repo_root=tmp_path)
    cfg = manager.load_config()

    assert cfg["layout"]["storeFile"] == "final.json"
    # Untouched siblings survive the deep merge.
    assert cfg["layout"]["modulesDir"] == "modules"
    assert cfg["coercion"]["strictBooleans"] is True
    assert manager.get("layout.storeFile") == "final.json"
    assert manager.get("layout.nope", "fallback") == "fallback"


def test_environment_overrides_win(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    write_config(tmp_path, "layout.yaml", {"layout": {"storeFile": "from-file.json"}})
    monkeypatch.setenv("MODCTL_layout__storeFile", "from-env.json")
    monkeypatch.setenv("MODCTL_LOCKING__TIMEOUTSECONDS", "2.5")
    monkeypatch.setenv("MODCTL_coercion__strictBooleans", "TRUE")

    cfg = ConfigManager(repo_root=tmp_path).load_config()

    assert cfg["layout"]["storeFile"] == "from-env.json"
    assert cfg["locking"]["timeoutSeconds"] == 2.5
    assert cfg["coercion"]["strictBooleans"] is True


def test_project_root_variable_is_not_an_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODCTL_PROJECT_ROOT", str(tmp_path))
    cfg = ConfigManager(repo_root=tmp_path).load_config()
    assert "PROJECT_ROOT" not in cfg


def test_invalid_configuration_fails_closed(tmp_path: Path) -> None:
    write_config(tmp_path, "bad.yaml", {"locking": {"timeoutSeconds": -1}})
    with pytest.raises(SchemaValidationError) as excinfo:
        ConfigManager(repo_root=tmp_path).load_config()
    assert "locking/timeoutSeconds" in str(excinfo.value)


def test_non_mapping_project_file_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / ".modctl" / "config" / "list.yaml"
    path.parent.mkdir(parents=True)
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must contain a mapping"):
        ConfigManager(repo_root=tmp_path).load_config()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("true", True),
        ("False", False),
        ("42", 42),
        ("-3", -3),
        ("0.5", 0.5),
        ("null", None),
        ('["a", "b"]', ["a", "b"]),
        ('{"k": 1}', {"k": 1}),
        (" text ", "text"),
        ("[not json", "[not json"),
    ],
)
def test_coerce_env_values(tmp_path: Path, raw: str, expected) -> None:
    assert ConfigManager(repo_root=tmp_path)._coerce_type(raw) == expected


def test_cached_config_tracks_project_file_changes(tmp_path: Path) -> None:
    assert not is_cached(tmp_path)
    first = get_cached_config(tmp_path)
    assert is_cached(tmp_path)
    assert get_cached_config(tmp_path) is first

    write_config(tmp_path, "layout.yaml", {"layout": {"storeFile": "other.json"}})
    assert get_cached_config(tmp_path)["layout"]["storeFile"] == "other.json"
