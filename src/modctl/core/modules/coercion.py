"""Coerce textual configuration values against a module's config schema."""
from __future__ import annotations

import math
import re
from typing import Any, Union

from modctl.core.exceptions import InvalidValue

from .manifest import ConfigField

# Locale-independent decimal literal; rejects nan/inf, hex and trailing junk.
_NUMBER_RE = re.compile(r"[-+]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")
_INTEGER_RE = re.compile(r"[-+]?[0-9]+")


def parse_number(raw: str) -> Union[int, float, None]:
    """Parse ``raw`` as a decimal number, or return None when it is not one."""
    text = raw.strip()
    if not _NUMBER_RE.fullmatch(text):
        return None
    try:
        if _INTEGER_RE.fullmatch(text):
            return int(text)
        value = float(text)
    except ValueError:
        # int() refuses literals past the interpreter's digit limit.
        return None
    return value if math.isfinite(value) else None


def parse_boolean(raw: str, *, strict: bool = False) -> Union[bool, None]:
    text = raw.strip().lower() if strict else raw.lower()
    if text == "true":
        return True
    if strict and text != "false":
        return None
    return False


def coerce_value(
    field: ConfigField,
    raw: str,
    *,
    key: str = "",
    module_id: str | None = None,
    strict_booleans: bool = False,
) -> Any:
    """Convert ``raw`` to the type declared by ``field``.

    Booleans are lenient by default: only ``true`` (any case) is True and any
    other text is False. With ``strict_booleans`` only ``true``/``false`` are
    accepted.

    Raises:
        InvalidValue: ``raw`` cannot be read as ``field.field_type``.
    """
    if field.field_type == "boolean":
        flag = parse_boolean(raw, strict=strict_booleans)
        if flag is None:
            raise InvalidValue(key, raw, "boolean", module_id=module_id)
        return flag
    if field.field_type == "number":
        number = parse_number(raw)
        if number is None:
            raise InvalidValue(key, raw, "number", module_id=module_id)
        return number
    return raw


__all__ = ["coerce_value", "parse_number", "parse_boolean"]
