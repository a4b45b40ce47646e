"""Shared test helpers for modctl."""
