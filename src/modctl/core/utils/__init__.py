"""Shared utilities for modctl core (I/O, paths, merging)."""
