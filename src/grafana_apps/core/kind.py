"""Resource kind descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from grafana_apps.core.objects import ResourceObject, ResourceObjectList


@dataclass(frozen=True)
class ResourceKind:
    """Immutable descriptor of an App Platform resource type.

    ``object_type``/``list_type`` are the classes a transport decodes wire
    payloads into. They are not part of the kind's identity.
    """

    group: str
    version: str
    kind: str
    plural: str
    object_type: type[ResourceObject] | None = field(default=None, compare=False, repr=False)
    list_type: type[ResourceObjectList[Any]] | None = field(
        default=None, compare=False, repr=False
    )

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def group_version(self) -> tuple[str, str]:
        return (self.group, self.version)

    @property
    def resource_type(self) -> str:
        """Resource type name (e.g. 'grafana_apps_dashboard_dashboard_v1alpha1')."""
        g = self.group.split(".")[0]
        return f"grafana_apps_{g}_{self.kind.lower()}_{self.version}"

    def path(self, namespace: str, name: str | None = None) -> str:
        """API path of the collection, or of one object when *name* is given."""
        prefix = f"/apis/{self.group}/{self.version}" if self.group else f"/api/{self.version}"
        res = f"{prefix}/namespaces/{namespace}/{self.plural}"
        if name:
            res += f"/{name}"
        return res
