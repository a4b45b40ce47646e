"""Derived build artifacts consumed by the backend build."""
from __future__ import annotations

from .aggregator import render_aggregator
from .entry import render_entry
from .feature_flags import read_feature_flags, render_feature_flags
from .generator import ArtifactChange, ArtifactGenerator, ArtifactSnapshot

__all__ = [
    "ArtifactChange",
    "ArtifactGenerator",
    "ArtifactSnapshot",
    "render_aggregator",
    "render_entry",
    "render_feature_flags",
    "read_feature_flags",
]
