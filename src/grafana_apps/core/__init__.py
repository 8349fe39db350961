"""Core building blocks: kinds, objects, identifiers, tenancy and call context."""

from grafana_apps.core.context import CallContext
from grafana_apps.core.identifier import Identifier
from grafana_apps.core.kind import ResourceKind
from grafana_apps.core.namespace import TenantKind, TenantRef, namespace_for, namespace_for_client
from grafana_apps.core.objects import ObjectMeta, ResourceObject, ResourceObjectList
from grafana_apps.core.provider import GrafanaProvider

__all__ = [
    "CallContext",
    "GrafanaProvider",
    "Identifier",
    "ObjectMeta",
    "ResourceKind",
    "ResourceObject",
    "ResourceObjectList",
    "TenantKind",
    "TenantRef",
    "namespace_for",
    "namespace_for_client",
]
