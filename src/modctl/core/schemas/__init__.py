"""JSON Schema validation for configuration and module manifests."""
from __future__ import annotations

from .validation import SchemaValidationError, schema_errors, validate_payload

__all__ = ["SchemaValidationError", "schema_errors", "validate_payload"]
