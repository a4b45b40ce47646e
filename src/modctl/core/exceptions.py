from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence


class ModctlError(Exception):
    """Base exception for modctl."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ModuleNotFound(ModctlError, LookupError):
    """Raised when a module has no (usable) manifest in the registry."""

    def __init__(
        self,
        module_id: str,
        *,
        reason: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        ctx["module_id"] = module_id
        if reason:
            ctx["reason"] = reason
        message = f"Module '{module_id}' not found."
        if reason:
            message = f"Module '{module_id}' has an unusable manifest: {reason}"
        super().__init__(message, context=ctx)
        self.module_id = module_id


class ManifestParseError(ModctlError, ValueError):
    """Raised when a manifest exists but cannot be parsed or fails validation."""

    def __init__(self, module_id: str, detail: str, *, context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        ctx.update({"module_id": module_id, "detail": detail})
        super().__init__(f"Invalid manifest for module '{module_id}': {detail}", context=ctx)
        self.module_id = module_id
        self.detail = detail


class ModuleNoOp(ModctlError):
    """A requested transition is already in effect; nothing to do."""

    def __init__(self, message: str, *, module_id: str) -> None:
        super().__init__(message, context={"module_id": module_id})
        self.module_id = module_id


class AlreadyInstalled(ModuleNoOp):
    def __init__(self, module_id: str) -> None:
        super().__init__(f"Module '{module_id}' is already installed.", module_id=module_id)


class NotInstalled(ModuleNoOp):
    def __init__(self, module_id: str) -> None:
        super().__init__(f"Module '{module_id}' is not installed.", module_id=module_id)


class ProtectedModuleError(ModctlError):
    """Raised when uninstalling a module whose manifest sets can_disable=false."""

    def __init__(self, module_id: str) -> None:
        super().__init__(
            f"Module '{module_id}' cannot be uninstalled (core module).",
            context={"module_id": module_id},
        )
        self.module_id = module_id


class DependencyError(ModctlError):
    """Base class for dependency graph violations."""


class UnsatisfiedDependency(DependencyError):
    """A non-optional dependency is not both installed and enabled."""

    def __init__(self, module_id: str, dependency: str, *, missing: Sequence[str] = ()) -> None:
        super().__init__(
            f"Cannot install '{module_id}': dependency '{dependency}' is not installed and enabled.",
            context={
                "module_id": module_id,
                "dependency": dependency,
                "missing": list(missing) or [dependency],
            },
        )
        self.module_id = module_id
        self.dependency = dependency


class DependentExists(DependencyError):
    """An installed, enabled module requires the one being uninstalled."""

    def __init__(self, module_id: str, dependent: str, *, dependents: Sequence[str] = ()) -> None:
        super().__init__(
            f"Cannot uninstall '{module_id}': module '{dependent}' depends on it.",
            context={
                "module_id": module_id,
                "dependent": dependent,
                "dependents": list(dependents) or [dependent],
            },
        )
        self.module_id = module_id
        self.dependent = dependent


class ConfigValueError(ModctlError, ValueError):
    """Base class for module configuration failures."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ModctlError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class UnknownKey(ConfigValueError):
    def __init__(self, module_id: str, key: str, *, available: Sequence[str] = ()) -> None:
        super().__init__(
            f"Configuration key '{key}' is not valid for module '{module_id}'.",
            context={"module_id": module_id, "key": key, "available": sorted(available)},
        )
        self.module_id = module_id
        self.key = key


class InvalidValue(ConfigValueError):
    def __init__(self, key: str, raw_value: str, field_type: str, *, module_id: str | None = None) -> None:
        ctx: Dict[str, Any] = {"key": key, "value": raw_value, "field_type": field_type}
        if module_id:
            ctx["module_id"] = module_id
        super().__init__(f"Invalid value for '{key}': expected {field_type}, got {raw_value!r}", context=ctx)
        self.key = key
        self.raw_value = raw_value
        self.field_type = field_type


class ArtifactAnchorMissing(ModctlError):
    """Raised when a generated artifact's patch point cannot be located.

    Regeneration aborts as a whole; no artifact is written.
    """

    def __init__(self, path: str, anchor: str, *, detail: str | None = None) -> None:
        ctx = {"path": path, "anchor": anchor}
        if detail:
            ctx["detail"] = detail
        message = f"Could not locate {anchor} in {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, context=ctx)
        self.path = path
        self.anchor = anchor


class PersistenceFailure(ModctlError, OSError):
    """Raised when the store or a generated artifact cannot be written."""

    def __init__(self, message: str = "", *, path: str | None = None, context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        if path:
            ctx["path"] = path
        ModctlError.__init__(self, message, context=ctx)
        OSError.__init__(self, message)


__all__ = [
    "ModctlError",
    "ModuleNotFound",
    "ManifestParseError",
    "ModuleNoOp",
    "AlreadyInstalled",
    "NotInstalled",
    "ProtectedModuleError",
    "DependencyError",
    "UnsatisfiedDependency",
    "DependentExists",
    "ConfigValueError",
    "UnknownKey",
    "InvalidValue",
    "ArtifactAnchorMissing",
    "PersistenceFailure",
]
