"""Type-safe resource client for a single kind."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from grafana_apps.client.errors import TypeMismatchError
from grafana_apps.client.options import (
    CreateOptions,
    DeleteOptions,
    ListOptions,
    PatchOptions,
    UpdateOptions,
    WatchOptions,
)
from grafana_apps.core.identifier import Identifier
from grafana_apps.core.objects import ResourceObject, ResourceObjectList

if TYPE_CHECKING:
    from grafana_apps.client.options import PatchRequest
    from grafana_apps.client.transport import Transport
    from grafana_apps.client.watch import WatchStream
    from grafana_apps.core.context import CallContext
    from grafana_apps.core.kind import ResourceKind

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ResourceObject)
L = TypeVar("L", bound=ResourceObjectList[Any])


class ResourceClient(Generic[T, L]):
    """Typed front door for one kind over one transport.

    Every untyped transport result is checked against ``object_type`` (or
    ``list_type`` for lists); a wrong payload raises ``TypeMismatchError``
    rather than flowing on as valid data. The client holds no mutable state
    and can be shared between threads.
    """

    def __init__(
        self,
        transport: Transport,
        kind: ResourceKind,
        object_type: type[T],
        list_type: type[L],
    ) -> None:
        self._transport = transport
        self._kind = kind
        self._object_type = object_type
        self._list_type = list_type

    @property
    def kind(self) -> ResourceKind:
        return self._kind

    def get(self, ctx: CallContext, identifier: Identifier) -> T:
        res = self._transport.get(ctx, self._kind, identifier)
        return self._as_object(res)

    def list(self, ctx: CallContext, namespace: str, options: ListOptions | None = None) -> L:
        res = self._transport.list(ctx, self._kind, namespace, options or ListOptions())
        return self._as_list(res)

    def watch(
        self, ctx: CallContext, namespace: str, options: WatchOptions | None = None
    ) -> WatchStream:
        return self._transport.watch(ctx, self._kind, namespace, options or WatchOptions())

    def create(self, ctx: CallContext, obj: T, options: CreateOptions | None = None) -> T:
        obj = self._stamped(obj)
        # The server assigns the first version.
        obj.metadata.resource_version = ""
        identifier = Identifier.of(obj)
        logger.debug("Creating %s %s", self._kind.kind, identifier)
        res = self._transport.create(ctx, self._kind, identifier, obj, options or CreateOptions())
        return self._as_object(res)

    def update(self, ctx: CallContext, obj: T, options: UpdateOptions | None = None) -> T:
        """Replace ``obj`` on the server.

        The precondition is ``options.resource_version`` or, when that is
        empty, the object's own version. ``options.overwrite`` drops it.
        """
        options = options or UpdateOptions()
        obj = self._stamped(obj)
        version = "" if options.overwrite else (
            options.resource_version or obj.metadata.resource_version
        )
        identifier = Identifier.of(obj)
        logger.debug("Updating %s %s at version %r", self._kind.kind, identifier, version)
        res = self._transport.update(
            ctx,
            self._kind,
            identifier,
            obj,
            options.model_copy(update={"resource_version": version}),
        )
        return self._as_object(res)

    def patch(
        self,
        ctx: CallContext,
        identifier: Identifier,
        patch: PatchRequest,
        options: PatchOptions | None = None,
    ) -> T:
        res = self._transport.patch(ctx, self._kind, identifier, patch, options or PatchOptions())
        return self._as_object(res)

    def delete(
        self, ctx: CallContext, identifier: Identifier, options: DeleteOptions | None = None
    ) -> None:
        logger.debug("Deleting %s %s", self._kind.kind, identifier)
        self._transport.delete(ctx, self._kind, identifier, options or DeleteOptions())

    def _stamped(self, obj: T) -> T:
        if not isinstance(obj, self._object_type):
            raise TypeMismatchError(self._object_type, obj)
        obj = obj.model_copy(deep=True)
        obj.api_version = self._kind.api_version
        obj.kind = self._kind.kind
        return obj

    def _as_object(self, res: Any) -> T:
        if not isinstance(res, self._object_type):
            raise TypeMismatchError(self._object_type, res)
        return res

    def _as_list(self, res: Any) -> L:
        if not isinstance(res, self._list_type):
            raise TypeMismatchError(self._list_type, res)
        return res
