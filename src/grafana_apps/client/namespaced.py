"""Namespace-bound resource client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from grafana_apps.core.identifier import Identifier
from grafana_apps.core.namespace import namespace_for
from grafana_apps.core.objects import ResourceObject, ResourceObjectList

if TYPE_CHECKING:
    from grafana_apps.client.options import (
        CreateOptions,
        DeleteOptions,
        ListOptions,
        PatchOptions,
        PatchRequest,
        UpdateOptions,
        WatchOptions,
    )
    from grafana_apps.client.typed import ResourceClient
    from grafana_apps.client.watch import WatchStream
    from grafana_apps.core.context import CallContext
    from grafana_apps.core.kind import ResourceKind

T = TypeVar("T", bound=ResourceObject)
L = TypeVar("L", bound=ResourceObjectList[Any])


class NamespacedClient(Generic[T, L]):
    """A ``ResourceClient`` bound to the namespace of one tenant.

    The namespace is resolved once, here, so callers cannot address another
    tenant's objects through this client.
    """

    def __init__(self, client: ResourceClient[T, L], tenant_id: int, *, is_org: bool) -> None:
        self._client = client
        self._namespace = namespace_for(tenant_id, is_org=is_org)

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def kind(self) -> ResourceKind:
        return self._client.kind

    def get(self, ctx: CallContext, name: str) -> T:
        return self._client.get(ctx, self._id(name))

    def list(self, ctx: CallContext, options: ListOptions | None = None) -> L:
        return self._client.list(ctx, self._namespace, options)

    def watch(self, ctx: CallContext, options: WatchOptions | None = None) -> WatchStream:
        return self._client.watch(ctx, self._namespace, options)

    def create(self, ctx: CallContext, obj: T, options: CreateOptions | None = None) -> T:
        return self._client.create(ctx, self._bind(obj), options)

    def update(self, ctx: CallContext, obj: T, options: UpdateOptions | None = None) -> T:
        return self._client.update(ctx, self._bind(obj), options)

    def patch(
        self,
        ctx: CallContext,
        name: str,
        patch: PatchRequest,
        options: PatchOptions | None = None,
    ) -> T:
        return self._client.patch(ctx, self._id(name), patch, options)

    def delete(self, ctx: CallContext, name: str, options: DeleteOptions | None = None) -> None:
        self._client.delete(ctx, self._id(name), options)

    def _id(self, name: str) -> Identifier:
        return Identifier(namespace=self._namespace, name=name)

    def _bind(self, obj: T) -> T:
        if not isinstance(obj, ResourceObject) or obj.metadata.namespace == self._namespace:
            return obj
        obj = obj.model_copy(deep=True)
        obj.metadata.namespace = self._namespace
        return obj
