"""Untyped transport protocol consumed by the resource clients."""

from typing import Any, Protocol

from grafana_apps.client.options import (
    CreateOptions,
    DeleteOptions,
    ListOptions,
    PatchOptions,
    PatchRequest,
    UpdateOptions,
    WatchOptions,
)
from grafana_apps.client.watch import WatchStream
from grafana_apps.core.context import CallContext
from grafana_apps.core.identifier import Identifier
from grafana_apps.core.kind import ResourceKind


class Transport(Protocol):
    """Protocol for object transports.

    A transport performs the network calls for any kind it is handed and
    returns untyped payloads. Retries, backoff and caching belong here, not
    in the typed clients.
    """

    def list(
        self, ctx: CallContext, kind: ResourceKind, namespace: str, options: ListOptions
    ) -> Any:
        """List objects of *kind* in *namespace*."""
        ...

    def watch(
        self, ctx: CallContext, kind: ResourceKind, namespace: str, options: WatchOptions
    ) -> WatchStream:
        """Open a live event stream."""
        ...

    def get(self, ctx: CallContext, kind: ResourceKind, identifier: Identifier) -> Any:
        """Get one object. Raises ``NotFoundError`` if absent."""
        ...

    def create(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        obj: Any,
        options: CreateOptions,
    ) -> Any:
        """Create an object."""
        ...

    def update(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        obj: Any,
        options: UpdateOptions,
    ) -> Any:
        """Replace an object, checking ``options.resource_version`` when set."""
        ...

    def patch(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        request: PatchRequest,
        options: PatchOptions,
    ) -> Any:
        """Apply a JSON patch to an object."""
        ...

    def delete(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        options: DeleteOptions,
    ) -> None:
        """Delete an object."""
        ...
