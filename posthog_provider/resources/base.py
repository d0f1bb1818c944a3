"""Base class and registry for resource adapters."""

from __future__ import annotations

import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from posthog_provider.errors import ValidationError
from posthog_provider.models import LOGGER_NAME, OperationResult

if TYPE_CHECKING:
    from posthog_provider.client import PostHogClient

M = TypeVar("M")

# ---------------------------------------------------------------------------
# Resource Registry
# ---------------------------------------------------------------------------

_resource_registry: dict[str, type[Resource]] = {}


def register_resource(name: str):
    """Decorator to register a resource adapter under its resource type name."""

    def decorator(cls):
        _resource_registry[name] = cls
        cls.type_name = name
        return cls

    return decorator


def get_resource_registry() -> dict[str, type[Resource]]:
    """Get the resource registry."""
    return _resource_registry


# ---------------------------------------------------------------------------
# Model helpers
# ---------------------------------------------------------------------------


def sorted_strings(values: list[str] | None) -> list[str] | None:
    """Sort a remote list so that its order is stable; empty lists become None."""
    if not values:
        return None
    return sorted(values)


def model_kwargs(cls: type, raw: Any, required: tuple[str, ...]) -> dict[str, Any]:
    """Validate a JSON document against the fields of a model dataclass."""
    if not isinstance(raw, dict):
        raise ValidationError(f"Invalid {cls.__name__}", f"expected a JSON object, got {type(raw).__name__}")
    known = {f.name for f in dataclasses.fields(cls)}
    for key in raw:
        if key not in known:
            raise ValidationError("Unsupported attribute", f"{cls.__name__} has no attribute {key!r}", attribute=key)
    for key in required:
        if raw.get(key) in (None, ""):
            raise ValidationError("Missing required attribute", f"{key!r} must be set", attribute=key)
    # null means "use the default"
    return {k: v for k, v in raw.items() if v is not None}


def string_list(raw: dict, key: str) -> list[str] | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValidationError("Invalid attribute value", f"{key!r} must be a list of strings", attribute=key)
    return list(value)


# ---------------------------------------------------------------------------
# Resource Base Class
# ---------------------------------------------------------------------------


class Resource(ABC, Generic[M]):
    """Base class for resource adapters.

    Adapters keep no state between calls: every operation receives the full
    local model and returns the new one. ``read`` returns ``None`` when the
    resource no longer exists and should be dropped from state.
    """

    type_name: str = ""

    def __init__(self, client: PostHogClient):
        self.client = client
        self.logger = logging.getLogger(LOGGER_NAME)

    @staticmethod
    @abstractmethod
    def model_from_dict(raw: Any) -> M:
        """Build the local model from a JSON document."""
        ...

    @staticmethod
    @abstractmethod
    def model_to_dict(model: M) -> dict:
        """Render the local model as a JSON document."""
        ...

    @abstractmethod
    def create(self, model: M) -> M: ...

    @abstractmethod
    def read(self, model: M) -> M | None: ...

    @abstractmethod
    def update(self, model: M) -> M: ...

    @abstractmethod
    def delete(self, model: M) -> None: ...

    @abstractmethod
    def import_state(self, import_id: str) -> M:
        """Build a skeleton model, with only its identifiers set, from an import ID."""
        ...

    def _record(self, resource_id: Any, operation: str, outcome: str, detail: str = "") -> OperationResult:
        result = OperationResult(
            resource_type=self.type_name,
            resource_id=str(resource_id),
            operation=operation,
            outcome=outcome,
            detail=detail,
        )
        self.logger.info(
            f"[{result.resource_type}] {result.resource_id}: {result.operation} → {result.outcome}"
            f"{' (' + result.detail + ')' if result.detail else ''}",
            extra={"operation_result": result},
        )
        return result
