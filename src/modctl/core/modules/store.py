"""Enablement store: persisted install/enable/config state per module.

The store is a single JSON document mapping module id to its state::

    {
      "auth": {
        "module_id": "auth",
        "enabled": true,
        "config": {"jwt_expiry_hours": 48},
        "dependency_overrides": {}
      }
    }

A missing or unparsable store is treated as empty. That loses whatever state
the corrupt file held, so the condition is logged rather than hidden.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

from modctl.core.exceptions import PersistenceFailure
from modctl.core.utils.io import read_json, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass
class ModuleState:
    module_id: str
    enabled: bool = False
    config: Dict[str, Any] = field(default_factory=dict)
    dependency_overrides: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module_id": self.module_id,
            "enabled": self.enabled,
            "config": dict(self.config),
            "dependency_overrides": dict(self.dependency_overrides),
        }

    @classmethod
    def from_dict(cls, module_id: str, data: Mapping[str, Any]) -> "ModuleState":
        config = data.get("config") or {}
        overrides = data.get("dependency_overrides") or {}
        if not isinstance(config, dict) or not isinstance(overrides, dict):
            raise ValueError("config and dependency_overrides must be objects")
        return cls(
            module_id=str(data.get("module_id") or module_id),
            enabled=data.get("enabled") is True,
            config=dict(config),
            dependency_overrides=dict(overrides),
        )


def enabled_ids(states: Mapping[str, ModuleState]) -> List[str]:
    """Sorted ids of every module whose state is enabled."""
    return sorted(module_id for module_id, state in states.items() if state.enabled)


class EnablementStore:
    """JSON-file backed store. Callers own the in-memory mapping between load and save."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Dict[str, ModuleState]:
        try:
            raw = read_json(self.path, default={})
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Store %s is unreadable (%s); treating it as empty", self.path, exc)
            return {}
        except OSError as exc:
            logger.warning("Store %s could not be opened (%s); treating it as empty", self.path, exc)
            return {}

        if not isinstance(raw, dict):
            logger.warning("Store %s does not hold a JSON object; treating it as empty", self.path)
            return {}

        states: Dict[str, ModuleState] = {}
        for module_id, entry in raw.items():
            if not isinstance(entry, dict):
                logger.warning("Skipping malformed store entry '%s' in %s", module_id, self.path)
                continue
            try:
                states[module_id] = ModuleState.from_dict(module_id, entry)
            except ValueError as exc:
                logger.warning("Skipping malformed store entry '%s' in %s: %s", module_id, self.path, exc)
        return states

    def save(self, states: Mapping[str, ModuleState]) -> None:
        """Atomically replace the store file with ``states``.

        Raises:
            PersistenceFailure: The file could not be written; nothing was committed.
        """
        payload = {module_id: states[module_id].to_dict() for module_id in sorted(states)}
        try:
            write_json_atomic(self.path, payload)
        except OSError as exc:
            raise PersistenceFailure(
                f"Failed to write module store {self.path}: {exc}", path=str(self.path)
            ) from exc
        logger.debug("Saved %d module state(s) to %s", len(payload), self.path)


__all__ = ["ModuleState", "EnablementStore", "enabled_ids"]
