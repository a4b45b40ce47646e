"""Shared schema validation utilities.

modctl validates structured payloads (configuration, module manifests) using
JSON Schema. Schemas are stored as YAML files under ``modctl.data/schemas/``
and loaded in a single, consistent way across the codebase.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, List

from jsonschema import Draft202012Validator

from modctl.core.utils.io import read_yaml
from modctl.data import get_data_path


class SchemaValidationError(ValueError):
    """Raised when schema validation fails."""

    def __init__(self, schema_name: str, errors: List[str]) -> None:
        self.schema_name = schema_name
        self.errors = list(errors)
        joined = "; ".join(self.errors)
        super().__init__(f"{schema_name}: {joined}")


def _normalize_name(schema_name: str) -> str:
    lowered = schema_name.lower()
    if lowered.endswith(".yaml") or lowered.endswith(".yml"):
        return schema_name
    return f"{schema_name}.yaml"


@lru_cache(maxsize=16)
def _validator(schema_name: str) -> Draft202012Validator:
    path = get_data_path("schemas", _normalize_name(schema_name))
    schema = read_yaml(path)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema {path} is not a YAML mapping")
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def schema_errors(payload: Any, schema_name: str) -> List[str]:
    """Return human-readable validation errors, sorted by location."""
    messages: List[str] = []
    errors = sorted(_validator(schema_name).iter_errors(payload), key=lambda e: list(e.path))
    for err in errors:
        where = "/".join(str(p) for p in err.path) or "<root>"
        messages.append(f"{where}: {err.message}")
    return messages


def validate_payload(payload: Any, schema_name: str) -> None:
    """Validate ``payload`` against a bundled schema.

    Raises:
        SchemaValidationError: If any validation error is found.
    """
    errors = schema_errors(payload, schema_name)
    if errors:
        raise SchemaValidationError(schema_name, errors)


__all__ = [
    "SchemaValidationError",
    "schema_errors",
    "validate_payload",
]
