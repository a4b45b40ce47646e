"""
modctl - optional-feature module manager

modctl keeps a backend's optional modules consistent across three places:
the manifest registry, the enablement store, and the generated build
artifacts (feature flags, aggregator source, integration tree).
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
