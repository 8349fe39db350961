"""Resource type registry for handler dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from grafana_apps.engine.errors import UnknownResourceTypeError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from grafana_apps.engine.handlers import AppResourceHandler
    from grafana_apps.resources.base import ResourceModel


@dataclass(frozen=True)
class ResourceTypeRegistration:
    resource_type: str
    model: type[ResourceModel[Any]]
    handler: AppResourceHandler[Any, Any, Any]


class ResourceTypeRegistry:
    """Registry mapping resource_type -> (model, handler)."""

    def __init__(self) -> None:
        self._registrations: dict[str, ResourceTypeRegistration] = {}

    def register(
        self, model: type[ResourceModel[Any]], handler: AppResourceHandler[Any, Any, Any]
    ) -> None:
        resource_type = getattr(model, "resource_type", None)
        if not isinstance(resource_type, str) or not resource_type:
            raise ValueError("Resource model must define a non-empty classvar `resource_type`")

        if resource_type in self._registrations:
            raise ValueError(f"Resource type already registered: {resource_type}")

        if handler.resource_type != resource_type:
            raise ValueError(
                f"Handler serves {handler.resource_type}, model declares {resource_type}"
            )

        self._registrations[resource_type] = ResourceTypeRegistration(
            resource_type=resource_type,
            model=model,
            handler=handler,
        )

    def get(self, resource_type: str) -> ResourceTypeRegistration:
        try:
            return self._registrations[resource_type]
        except KeyError as e:
            raise UnknownResourceTypeError(resource_type) from e

    def find_by_type_name(self, name: str) -> ResourceTypeRegistration:
        """Look up a registration by its short name (``dashboard``) or full resource type."""
        for reg in self._registrations.values():
            if name in (reg.resource_type, reg.handler.kind.kind.lower(), reg.handler.kind.plural):
                return reg
        raise UnknownResourceTypeError(name)

    def __iter__(self) -> Iterator[ResourceTypeRegistration]:
        return iter(self._registrations.values())
