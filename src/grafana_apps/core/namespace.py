"""Tenant -> namespace resolution.

Namespaces are persisted as part of every resource reference, so the
format must never change: org 1 is ``default``, other orgs ``org-<id>``,
Grafana Cloud stacks ``stacks-<id>``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from grafana_apps.client.errors import NamespaceError

DEFAULT_NAMESPACE = "default"

ERR_NAMESPACE_MISSING_IDS = (
    "Expected either Grafana org ID (for local Grafana) "
    "or Grafana stack ID (for Grafana Cloud) to be set"
)


class TenantKind(str, Enum):
    ORG = "org"
    STACK = "stack"


@dataclass(frozen=True)
class TenantRef:
    id: int
    kind: TenantKind

    @property
    def namespace(self) -> str:
        return namespace_for(self.id, is_org=self.kind is TenantKind.ORG)


def org_namespace(org_id: int) -> str:
    if org_id <= 0:
        raise ValueError(f"org id must be positive, got {org_id}")
    if org_id == 1:
        return DEFAULT_NAMESPACE
    return f"org-{org_id}"


def stack_namespace(stack_id: int) -> str:
    if stack_id <= 0:
        raise ValueError(f"stack id must be positive, got {stack_id}")
    return f"stacks-{stack_id}"


def namespace_for(tenant_id: int, *, is_org: bool) -> str:
    """Resolve the namespace of an org (``is_org=True``) or a stack."""
    return org_namespace(tenant_id) if is_org else stack_namespace(tenant_id)


def namespace_for_client(org_id: int, stack_id: int) -> str:
    """Resolve the namespace for a configured client.

    The org id defaults to 1, so a set stack id takes precedence; otherwise
    the org id would always win unless explicitly set to 0.
    """
    if stack_id > 0:
        return stack_namespace(stack_id)
    if org_id > 0:
        return org_namespace(org_id)
    raise NamespaceError(ERR_NAMESPACE_MISSING_IDS)


def tenant_for_client(org_id: int, stack_id: int) -> TenantRef:
    """Same precedence as :func:`namespace_for_client`, as a ``TenantRef``."""
    if stack_id > 0:
        return TenantRef(id=stack_id, kind=TenantKind.STACK)
    if org_id > 0:
        return TenantRef(id=org_id, kind=TenantKind.ORG)
    raise NamespaceError(ERR_NAMESPACE_MISSING_IDS)
