"""
modctl configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from modctl.core.schemas import validate_payload
from modctl.core.utils.io import iter_yaml_files, read_yaml
from modctl.core.utils.merge import deep_merge
from modctl.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "MODCTL_"
# Consumed by the path resolver, never treated as a config override.
_RESERVED_ENV = {"MODCTL_PROJECT_ROOT"}


class ConfigManager:
    """Load, merge, and validate modctl configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: MODCTL_<section>__<key>
    2. Project config: <repo>/.modctl/config/*.yaml (alphabetical order)
    3. Bundled defaults: modctl.data/config/defaults.yaml
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = repo_root or self._find_repo_root()

        from modctl.core.utils.paths import get_project_config_dir

        self.core_config_dir = get_data_path("config")
        self.project_config_dir = get_project_config_dir(self.repo_root) / "config"

    def _find_repo_root(self) -> Path:
        from modctl.core.utils.paths import ModctlPathError, resolve_project_root

        try:
            return resolve_project_root()
        except ModctlPathError as exc:
            raise RuntimeError(str(exc)) from exc

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Invalid YAML raises; an empty file is an empty layer.
        data = read_yaml(path, default={})
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        return data

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except ValueError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        if value.strip().lower() in {"null", "none"}:
            return None
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key in _RESERVED_ENV:
                continue
            raw = key[len(ENV_PREFIX):]
            segments = [seg for seg in raw.split("__")]
            if not raw or any(not seg for seg in segments):
                logger.warning("Ignoring malformed configuration override %s", key)
                continue
            yield segments, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        """Assign ``value`` at ``path``, matching existing keys case-insensitively."""
        cursor = root
        for index, segment in enumerate(path):
            existing = next((k for k in cursor if k.lower() == segment.lower()), segment)
            if index == len(path) - 1:
                cursor[existing] = value
                return
            child = cursor.get(existing)
            if not isinstance(child, dict):
                child = {}
                cursor[existing] = child
            cursor = child

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """Return the merged configuration.

        Args:
            validate: Validate the merged result against the bundled config schema.
        """
        cfg = self.load_yaml(self.core_config_dir / "defaults.yaml")

        for path in iter_yaml_files(self.project_config_dir):
            logger.debug("Applying project config %s", path)
            cfg = deep_merge(cfg, self.load_yaml(path))

        for segments, value in self._iter_env_overrides():
            self._set_nested(cfg, segments, value)

        if validate:
            validate_payload(cfg, "config.schema")
        return cfg

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dot-notation key (e.g. ``layout.storeFile``)."""
        node: Any = self.load_config(validate=False)
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node


__all__ = ["ConfigManager", "ENV_PREFIX"]
