"""Top-level modctl commands (auto-discovered by the dispatcher)."""
