"""Feature-flag list inside the backend build manifest (``Cargo.toml``).

The managed region is the array value of ``default`` in the ``[features]``
table::

    [features]
    default = ["custom-protocol", "module-auth", "module-billing"]

Entries carrying the feature prefix are owned by modctl and rewritten from
the enabled set; any other entries are kept in their original order ahead of
the module flags. The array is located structurally (table header, then key,
then a string-aware scan to the closing bracket) and the patched document is
re-parsed with :mod:`tomllib` before it is accepted.
"""
from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from modctl.core.exceptions import ArtifactAnchorMissing

from .managed_blocks import replace_span

_HEADER_RE = re.compile(
    r"^[ \t]*(?P<open>\[\[?)[ \t]*(?P<name>[^\[\]\r\n]+?)[ \t]*\]\]?[ \t]*(?:#[^\r\n]*)?\r?$",
    re.MULTILINE,
)


class _Unparsable(ValueError):
    pass


@dataclass(frozen=True)
class FlagArray:
    """Location of the managed array: ``text[start:end]`` is ``[ ... ]``."""

    start: int
    end: int
    items: Tuple[str, ...]


def _anchor(table: str, key: str) -> str:
    return f"[{table}] {key} = [...]"


def _table_body(text: str, table: str) -> Tuple[int, int]:
    headers = list(_HEADER_RE.finditer(text))
    for index, match in enumerate(headers):
        if match.group("open") != "[" or match.group("name").strip() != table:
            continue
        body_start = match.end()
        body_end = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        return body_start, body_end
    raise _Unparsable(f"table [{table}] not found")


def _read_string(text: str, index: int) -> Tuple[str, int]:
    quote = text[index]
    i = index + 1
    while i < len(text):
        ch = text[i]
        if ch == "\n":
            break
        if quote == '"' and ch == "\\":
            i += 2
            continue
        if ch == quote:
            raw = text[index : i + 1]
            if quote == "'":
                return raw[1:-1], i + 1
            try:
                return json.loads(raw), i + 1
            except ValueError as exc:
                raise _Unparsable(f"unsupported string literal {raw}") from exc
        i += 1
    raise _Unparsable("unterminated string in flag array")


def _scan_array(text: str, open_index: int) -> Tuple[int, List[str]]:
    items: List[str] = []
    i = open_index + 1
    while i < len(text):
        ch = text[i]
        if ch in " \t\r\n,":
            i += 1
        elif ch == "#":
            nl = text.find("\n", i)
            i = len(text) if nl == -1 else nl
        elif ch == "]":
            return i + 1, items
        elif ch in "\"'":
            value, i = _read_string(text, i)
            items.append(value)
        else:
            raise _Unparsable(f"unexpected {ch!r} in flag array")
    raise _Unparsable("flag array is not closed")


def locate_flag_array(text: str, *, table: str = "features", key: str = "default", path: str = "") -> FlagArray:
    """Find the managed array.

    Raises:
        ArtifactAnchorMissing: The table, the key, or a well-formed array is missing.
    """
    try:
        body_start, body_end = _table_body(text, table)
        key_re = re.compile(
            rf"^[ \t]*(?:{re.escape(key)}|\"{re.escape(key)}\")[ \t]*=[ \t]*\[", re.MULTILINE
        )
        match = key_re.search(text, body_start, body_end)
        if match is None:
            raise _Unparsable(f"key '{key}' with an array value not found in [{table}]")
        open_index = match.end() - 1
        close_end, items = _scan_array(text, open_index)
    except _Unparsable as exc:
        raise ArtifactAnchorMissing(path, _anchor(table, key), detail=str(exc)) from exc
    return FlagArray(start=open_index, end=close_end, items=tuple(items))


def flag_entries(existing: Iterable[str], module_ids: Iterable[str], *, prefix: str) -> List[str]:
    """Unmanaged entries (deduplicated, original order) followed by sorted module flags."""
    kept: List[str] = []
    for item in existing:
        if not item.startswith(prefix) and item not in kept:
            kept.append(item)
    return kept + [f"{prefix}{module_id}" for module_id in sorted(set(module_ids))]


def render_feature_flags(
    text: str,
    module_ids: Iterable[str],
    *,
    prefix: str = "module-",
    table: str = "features",
    key: str = "default",
    path: str = "",
) -> str:
    """Return ``text`` with the managed array rewritten for ``module_ids``."""
    array = locate_flag_array(text, table=table, key=key, path=path)
    entries = flag_entries(array.items, module_ids, prefix=prefix)
    rendered = "[" + ", ".join(json.dumps(entry) for entry in entries) + "]"
    updated = replace_span(text, array.start, array.end, rendered).updated_text

    try:
        parsed = tomllib.loads(updated)
    except tomllib.TOMLDecodeError as exc:
        raise ArtifactAnchorMissing(
            path, _anchor(table, key), detail=f"build manifest is not valid TOML: {exc}"
        ) from exc
    if (parsed.get(table) or {}).get(key) != entries:
        raise ArtifactAnchorMissing(
            path, _anchor(table, key), detail="patched array does not round-trip"
        )
    return updated


def read_feature_flags(
    text: str,
    *,
    prefix: str = "module-",
    table: str = "features",
    key: str = "default",
    path: str = "",
) -> List[str]:
    """Module ids currently present in the managed array, sorted."""
    array = locate_flag_array(text, table=table, key=key, path=path)
    return sorted(item[len(prefix):] for item in array.items if item.startswith(prefix))


__all__ = [
    "FlagArray",
    "locate_flag_array",
    "flag_entries",
    "render_feature_flags",
    "read_feature_flags",
]
