from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from modctl.core.utils.io import (
    ensure_directory,
    iter_yaml_files,
    read_json,
    read_text,
    read_yaml,
    remove_tree,
    write_json_atomic,
    write_text,
)
from modctl.core.utils.merge import deep_merge


def test_write_text_creates_parents_and_preserves_newlines(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "file.rs"
    write_text(target, "line one\r\nline two\n")
    assert target.read_bytes() == b"line one\r\nline two\n"
    assert read_text(target) == "line one\r\nline two\n"
    assert [p.name for p in target.parent.iterdir()] == ["file.rs"]


def test_read_text_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_text(tmp_path / "missing.rs")


def test_json_round_trip_is_sorted_with_trailing_newline(tmp_path: Path) -> None:
    target = tmp_path / "store.json"
    write_json_atomic(target, {"b": 1, "a": {"d": 2, "c": 3}})

    text = target.read_text(encoding="utf-8")
    assert text.endswith("}\n")
    assert text.index('"a"') < text.index('"b"')
    assert read_json(target) == {"a": {"c": 3, "d": 2}, "b": 1}


def test_read_json_default_and_errors(tmp_path: Path) -> None:
    assert read_json(tmp_path / "missing.json", default={}) == {}
    with pytest.raises(FileNotFoundError):
        read_json(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        read_json(bad)


def test_yaml_helpers(tmp_path: Path) -> None:
    (tmp_path / "b.yaml").write_text("z: 1\na: [1, 2]\n", encoding="utf-8")
    (tmp_path / "empty.yaml").write_text("", encoding="utf-8")
    (tmp_path / "a.yml").write_text("k: v\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
    (tmp_path / "broken.yaml").write_text("a: [", encoding="utf-8")

    assert [p.name for p in iter_yaml_files(tmp_path)] == ["a.yml", "b.yaml", "broken.yaml", "empty.yaml"]
    assert read_yaml(tmp_path / "b.yaml") == {"a": [1, 2], "z": 1}
    assert read_yaml(tmp_path / "empty.yaml", default={}) == {}
    with pytest.raises(yaml.YAMLError):
        read_yaml(tmp_path / "broken.yaml", default={})
    with pytest.raises(FileNotFoundError):
        read_yaml(tmp_path / "missing.yaml", default={})
    assert list(iter_yaml_files(tmp_path / "nope")) == []


def test_ensure_directory_and_remove_tree(tmp_path: Path) -> None:
    target = ensure_directory(tmp_path / "x" / "y")
    assert target.is_dir()
    (target / "f.txt").write_text("data", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        ensure_directory(target / "f.txt")

    assert remove_tree(tmp_path / "x") is True
    assert remove_tree(tmp_path / "x") is False


def test_deep_merge_does_not_mutate_inputs() -> None:
    base = {"layout": {"modulesDir": "modules", "storeFile": "a.json"}, "list": [1]}
    override = {"layout": {"storeFile": "b.json"}, "list": [2]}

    merged = deep_merge(base, override)

    assert merged == {"layout": {"modulesDir": "modules", "storeFile": "b.json"}, "list": [2]}
    assert base["layout"]["storeFile"] == "a.json"
