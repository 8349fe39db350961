"""Resource identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from grafana_apps.core.objects import ResourceObject


@dataclass(frozen=True)
class Identifier:
    """Addresses one object within a kind."""

    namespace: str
    name: str

    @classmethod
    def of(cls, obj: ResourceObject) -> Identifier:
        """Identifier taken from the object's own metadata."""
        return cls(namespace=obj.metadata.namespace, name=obj.metadata.name)

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"
