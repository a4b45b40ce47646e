"""Line-anchored edits for partially managed text files.

modctl owns a few regions of files that are otherwise hand-written (the flag
array in the build manifest, one declaration line in the entry file). These
helpers locate anchors that sit alone on their line and splice text around
them without touching anything else.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ManagedEditResult:
    """Result of applying a managed edit."""

    updated_text: str
    changed: bool
    action: str  # "replaced" | "inserted" | "removed" | "unchanged"


def remove_own_lines(text: str, line: str) -> ManagedEditResult:
    """Remove every line consisting only of ``line`` (surrounding whitespace ignored)."""
    if not line.strip():
        raise ValueError("Managed line must be a non-empty string")

    out = text
    idx = find_on_own_line(out, line)
    removed = False
    while idx != -1:
        start = _line_start_index(out, idx)
        end = _line_end_index(out, idx + len(line))
        out = out[:start] + out[end:]
        removed = True
        idx = find_on_own_line(out, line, from_index=start)

    if not removed:
        return ManagedEditResult(updated_text=text, changed=False, action="unchanged")
    return ManagedEditResult(updated_text=out, changed=True, action="removed")


def insert_line_before(text: str, line: str, *, anchor: str) -> ManagedEditResult:
    """Insert ``line`` on its own line directly above the first ``anchor`` line.

    Rules:
    - If the anchor sits alone on a line, insert above that line.
    - Otherwise prepend to the file.
    - The inserted line ends the way the file's lines do (``\\r\\n`` or ``\\n``).
    """
    new_line = line.rstrip("\r\n") + line_ending(text)
    idx = find_on_own_line(text, anchor) if anchor.strip() else -1
    start = _line_start_index(text, idx) if idx != -1 else 0
    return ManagedEditResult(
        updated_text=text[:start] + new_line + text[start:], changed=True, action="inserted"
    )


def line_ending(text: str) -> str:
    """Line terminator used by ``text``: ``\\r\\n`` when its first line ends that way."""
    nl = text.find("\n")
    return "\r\n" if nl > 0 and text[nl - 1] == "\r" else "\n"


def replace_span(text: str, start: int, end: int, new_body: str) -> ManagedEditResult:
    """Replace ``text[start:end]`` with ``new_body``."""
    if not 0 <= start <= end <= len(text):
        raise ValueError(f"Invalid span {start}:{end} for text of length {len(text)}")
    replaced = text[:start] + new_body + text[end:]
    if replaced == text:
        return ManagedEditResult(updated_text=text, changed=False, action="unchanged")
    return ManagedEditResult(updated_text=replaced, changed=True, action="replaced")


def _line_start_index(text: str, index: int) -> int:
    """Return the index of the first character of the line containing ``index``."""
    return text.rfind("\n", 0, index) + 1


def _line_end_index(text: str, from_index: int) -> int:
    """Return the index immediately after the line containing from_index."""
    nl = text.find("\n", from_index)
    if nl == -1:
        return len(text)
    return nl + 1


def find_on_own_line(text: str, marker: str, *, from_index: int = 0) -> int:
    """Find marker ensuring it appears alone on a line (ignoring whitespace)."""
    idx = text.find(marker, from_index)
    while idx != -1:
        if _marker_on_own_line(text, idx, len(marker)):
            return idx
        idx = text.find(marker, idx + len(marker))
    return -1


def _marker_on_own_line(text: str, idx: int, marker_len: int) -> bool:
    left = idx - 1
    while left >= 0 and text[left] != "\n":
        if text[left] not in (" ", "\t", "\r"):
            return False
        left -= 1

    right = idx + marker_len
    while right < len(text) and text[right] != "\n":
        if text[right] not in (" ", "\t", "\r"):
            return False
        right += 1

    return True


__all__ = [
    "ManagedEditResult",
    "line_ending",
    "remove_own_lines",
    "insert_line_before",
    "replace_span",
    "find_on_own_line",
]
