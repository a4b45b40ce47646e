"""Stable error types for the paths subsystem."""

from __future__ import annotations


class ModctlPathError(ValueError):
    """Raised when path resolution fails."""


__all__ = ["ModctlPathError"]
