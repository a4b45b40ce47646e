"""Aggregator declaration (``mod modules;``) in the backend entry file."""
from __future__ import annotations

from .managed_blocks import insert_line_before, remove_own_lines


def render_entry(text: str, *, enabled: bool, declaration: str = "mod modules;", anchor: str = "") -> str:
    """Drop every existing declaration line, then add exactly one back when ``enabled``.

    The fresh declaration goes directly above the ``anchor`` line, or at the
    top of the file when the anchor is absent.
    """
    stripped = remove_own_lines(text, declaration).updated_text
    if not enabled:
        return stripped
    return insert_line_before(stripped, declaration, anchor=anchor).updated_text


def has_declaration(text: str, *, declaration: str = "mod modules;") -> bool:
    return remove_own_lines(text, declaration).changed


__all__ = ["render_entry", "has_declaration"]
