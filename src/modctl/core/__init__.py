"""modctl core: manifests, state, dependency rules and artifact generation."""
