"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
import re
from pathlib import Path
from typing import List

from modctl.core.exceptions import DependentExists, UnknownKey, UnsatisfiedDependency
from modctl.core.modules import ModuleService
from modctl.core.utils.paths import resolve_project_root


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get project root from args or auto-detect.

    Args:
        args: Parsed arguments with optional repo_root attribute

    Returns:
        Path: Project root path
    """
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).expanduser().resolve()
    return resolve_project_root()


def build_service(args: argparse.Namespace) -> ModuleService:
    return ModuleService.from_config(repo_root=get_repo_root(args))


def error_code_for(exc: Exception) -> str:
    """``UnsatisfiedDependency`` -> ``unsatisfied_dependency``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", type(exc).__name__).lower()


def hints_for(exc: Exception) -> List[str]:
    """Actionable follow-ups for failures the user can fix."""
    if isinstance(exc, UnsatisfiedDependency):
        return [f"Try installing the dependency first: modctl install {exc.dependency}"]
    if isinstance(exc, DependentExists):
        return [f"Uninstall '{exc.dependent}' first, or declare the dependency as optional."]
    if isinstance(exc, UnknownKey):
        available = exc.context.get("available") or []
        return [f"Available keys: {', '.join(available) if available else '(none)'}"]
    return []


__all__ = ["get_repo_root", "build_service", "error_code_for", "hints_for"]
