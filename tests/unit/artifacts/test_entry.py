from __future__ import annotations

from helpers.project import LIB_RS
from modctl.core.artifacts.entry import has_declaration, render_entry

ANCHOR = "use config::AppConfig;"


def test_enable_inserts_declaration_above_anchor() -> None:
    updated = render_entry(LIB_RS, enabled=True, anchor=ANCHOR)
    assert updated.startswith("mod config;\nmod commands;\n\nmod modules;\nuse config::AppConfig;\n")
    assert has_declaration(updated)


def test_enable_without_anchor_prepends() -> None:
    updated = render_entry("pub fn run() {}\n", enabled=True, anchor=ANCHOR)
    assert updated == "mod modules;\npub fn run() {}\n"


def test_enable_is_idempotent_and_collapses_duplicates() -> None:
    once = render_entry(LIB_RS, enabled=True, anchor=ANCHOR)
    assert render_entry(once, enabled=True, anchor=ANCHOR) == once

    doubled = "mod modules;\n" + once
    assert render_entry(doubled, enabled=True, anchor=ANCHOR) == once


def test_disable_removes_declaration_and_restores_original() -> None:
    enabled = render_entry(LIB_RS, enabled=True, anchor=ANCHOR)
    assert render_entry(enabled, enabled=False, anchor=ANCHOR) == LIB_RS
    assert render_entry(LIB_RS, enabled=False) == LIB_RS
    assert not has_declaration(LIB_RS)


def test_inline_mentions_are_not_declarations() -> None:
    text = "// mod modules; is managed by modctl\npub mod modules;\n"
    assert not has_declaration(text)
    assert render_entry(text, enabled=False) == text


def test_crlf_entry_file_round_trips() -> None:
    crlf = LIB_RS.replace("\n", "\r\n")

    enabled = render_entry(crlf, enabled=True, anchor=ANCHOR)

    assert "\r\nmod modules;\r\nuse config::AppConfig;\r\n" in enabled
    assert render_entry(enabled, enabled=False, anchor=ANCHOR) == crlf
