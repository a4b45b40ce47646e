from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from modctl.core.exceptions import PersistenceFailure
from modctl.core.modules.store import EnablementStore, ModuleState, enabled_ids


def test_missing_store_is_empty(tmp_path: Path) -> None:
    store = EnablementStore(tmp_path / "module_config.json")
    assert not store.exists()
    assert store.load() == {}


def test_save_then_load_preserves_state(tmp_path: Path) -> None:
    store = EnablementStore(tmp_path / "module_config.json")
    store.save(
        {
            "billing": ModuleState("billing", enabled=False),
            "auth": ModuleState(
                "auth",
                enabled=True,
                config={"jwt_expiry_hours": 48},
                dependency_overrides={"core": {"pinned": True}},
            ),
        }
    )

    raw = json.loads((tmp_path / "module_config.json").read_text(encoding="utf-8"))
    assert list(raw) == ["auth", "billing"]
    assert raw["auth"] == {
        "module_id": "auth",
        "enabled": True,
        "config": {"jwt_expiry_hours": 48},
        "dependency_overrides": {"core": {"pinned": True}},
    }

    states = store.load()
    assert states["auth"].config == {"jwt_expiry_hours": 48}
    assert states["auth"].dependency_overrides == {"core": {"pinned": True}}
    assert enabled_ids(states) == ["auth"]


@pytest.mark.parametrize("content", ["{broken", "[1, 2, 3]", '"just a string"'])
def test_unusable_store_is_treated_as_empty_with_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, content: str
) -> None:
    path = tmp_path / "module_config.json"
    path.write_text(content, encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="modctl"):
        assert EnablementStore(path).load() == {}
    assert any("treating it as empty" in r.getMessage() for r in caplog.records)


def test_malformed_entries_are_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "module_config.json"
    path.write_text(
        json.dumps(
            {
                "auth": {"module_id": "auth", "enabled": True, "config": {}},
                "weird": "enabled",
                "bad_config": {"enabled": True, "config": [1]},
            }
        ),
        encoding="utf-8",
    )

    with caplog.at_level(logging.WARNING, logger="modctl"):
        states = EnablementStore(path).load()

    assert list(states) == ["auth"]
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "weird" in messages and "bad_config" in messages


def test_enabled_requires_a_real_boolean(tmp_path: Path) -> None:
    state = ModuleState.from_dict("auth", {"enabled": "true"})
    assert state.enabled is False
    assert state.module_id == "auth"


def test_save_failure_raises_persistence_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*_args, **_kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("modctl.core.modules.store.write_json_atomic", _boom)
    store = EnablementStore(tmp_path / "module_config.json")

    with pytest.raises(PersistenceFailure) as excinfo:
        store.save({"auth": ModuleState("auth", enabled=True)})

    assert "disk full" in str(excinfo.value)
    assert excinfo.value.context["path"] == str(tmp_path / "module_config.json")
    assert not store.exists()
