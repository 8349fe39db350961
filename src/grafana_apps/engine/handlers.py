"""Generic reconciliation handler shared by every App Platform kind.

A handler turns a desired-state :class:`ResourceModel` into an API object,
sends it through a :class:`NamespacedClient` and records what the server
returned back onto the model. Kinds only differ in how their spec is
parsed and saved, which :class:`ResourceConfig` captures.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from grafana_apps.client.errors import NotFoundError
from grafana_apps.client.namespaced import NamespacedClient
from grafana_apps.client.options import UpdateOptions
from grafana_apps.client.typed import ResourceClient
from grafana_apps.core.namespace import TenantKind, tenant_for_client
from grafana_apps.core.objects import (
    ANNOTATION_MANAGED_BY,
    ANNOTATION_MANAGER_ID,
    ResourceObject,
    ResourceObjectList,
)
from grafana_apps.engine.errors import HandlerNotConfiguredError
from grafana_apps.resources.base import ResourceMetadataModel, ResourceModel, ResourceOptions

if TYPE_CHECKING:
    from grafana_apps.client.registry import ClientRegistry
    from grafana_apps.core.context import CallContext
    from grafana_apps.core.kind import ResourceKind

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ResourceObject)
L = TypeVar("L", bound=ResourceObjectList[Any])
S = TypeVar("S", bound=BaseModel)

# Written to grafana.app/managedBy on every object this package creates or updates.
MANAGER_KIND = "terraform"


@dataclass(frozen=True)
class ResourceConfig(Generic[T, S]):
    """Everything kind-specific a handler needs."""

    kind: ResourceKind
    model: type[ResourceModel[S]]
    spec_parser: Callable[[S, T], None]
    spec_saver: Callable[[T, S | None], S]


def set_manager_properties(obj: ResourceObject, client_id: str) -> bool:
    """Mark ``obj`` as managed by this client. Returns whether anything changed."""
    annotations = obj.metadata.annotations
    changed = False
    if annotations.get(ANNOTATION_MANAGED_BY) != MANAGER_KIND:
        annotations[ANNOTATION_MANAGED_BY] = MANAGER_KIND
        changed = True
    if annotations.get(ANNOTATION_MANAGER_ID) != client_id:
        annotations[ANNOTATION_MANAGER_ID] = client_id
        changed = True
    return changed


def set_metadata_from_model(src: ResourceMetadataModel, dst: ResourceObject) -> None:
    dst.metadata.uid = src.uuid
    dst.metadata.name = src.uid
    dst.metadata.set_folder(src.folder_uid or "")
    dst.metadata.resource_version = src.version


def save_resource_to_model(
    src: ResourceObject, dst: ResourceModel[Any], *, url: str = "", base_url: str = ""
) -> None:
    """Copy the server-computed metadata of ``src`` onto ``dst``.

    ``dst.spec`` keeps its declared value. ``folder_uid`` is only tracked
    when the model tracks it. The saved URL is the object's ``selfLink``,
    else ``url``, prefixed with ``base_url``.
    """
    meta = dst.metadata
    if meta.folder_uid is not None:
        meta.folder_uid = src.metadata.folder
    meta.uuid = src.metadata.uid
    meta.uid = src.metadata.name
    meta.version = src.metadata.resource_version
    meta.url = base_url.rstrip("/") + (src.metadata.self_link or url)
    meta.annotations = dict(src.metadata.annotations) or None
    dst.id = meta.uuid


class AppResourceHandler(Generic[T, L, S]):
    """Create/read/update/delete/import for one App Platform kind.

    ``configure`` must be called before any other method; it resolves the
    tenant namespace and builds the namespaced client once.
    """

    def __init__(self, config: ResourceConfig[T, S]) -> None:
        self._config = config
        self._client: NamespacedClient[T, L] | None = None
        self._client_id = ""
        self._base_url = ""

    @property
    def kind(self) -> ResourceKind:
        return self._config.kind

    @property
    def resource_type(self) -> str:
        return self._config.kind.resource_type

    @property
    def model(self) -> type[ResourceModel[S]]:
        return self._config.model

    @property
    def configured(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> NamespacedClient[T, L]:
        if self._client is None:
            raise HandlerNotConfiguredError(self.resource_type)
        return self._client

    def configure(
        self,
        registry: ClientRegistry,
        org_id: int,
        stack_id: int,
        client_id: str,
        *,
        base_url: str = "",
    ) -> None:
        """Bind the handler to a tenant. Only the first call takes effect.

        ``base_url`` is the Grafana server URL the saved ``metadata.url`` is
        made absolute with.
        """
        if self._client is not None:
            return

        kind = self._config.kind
        transport = registry.client_for(kind)
        tenant = tenant_for_client(org_id, stack_id)
        typed: ResourceClient[T, L] = ResourceClient(
            transport, kind, kind.object_type, kind.list_type
        )
        self._client = NamespacedClient(typed, tenant.id, is_org=tenant.kind is TenantKind.ORG)
        self._client_id = client_id
        self._base_url = base_url
        logger.debug("Configured %s handler for namespace %s", kind.kind, self._client.namespace)

    # -- model <-> object ---------------------------------------------------

    def build_object(self, model: ResourceModel[S]) -> T:
        """Build the API object declared by ``model``."""
        obj = self._config.kind.object_type()
        set_metadata_from_model(model.metadata, obj)
        self._config.spec_parser(model.spec, obj)
        return obj

    def _saved(self, src: T, model: ResourceModel[S]) -> ResourceModel[S]:
        res = model.model_copy(deep=True)
        path = self._config.kind.path(self.client.namespace, src.metadata.name)
        save_resource_to_model(src, res, url=path, base_url=self._base_url)
        return res

    # -- CRUD ---------------------------------------------------------------

    def create(self, ctx: CallContext, model: ResourceModel[S]) -> ResourceModel[S]:
        obj = self.build_object(model)
        set_manager_properties(obj, self._client_id)
        res = self.client.create(ctx, obj)
        logger.debug(
            "Created %s %s (version %s)",
            self.kind.kind,
            res.metadata.name,
            res.metadata.resource_version,
        )
        return self._saved(res, model)

    def read(self, ctx: CallContext, model: ResourceModel[S]) -> ResourceModel[S] | None:
        """Read the object back. Returns None if it no longer exists."""
        try:
            res = self.client.get(ctx, model.metadata.uid)
        except NotFoundError:
            return None
        return self._saved(res, model)

    def update(self, ctx: CallContext, model: ResourceModel[S]) -> ResourceModel[S]:
        obj = self.build_object(model)
        set_manager_properties(obj, self._client_id)

        res = self.client.update(ctx, obj, UpdateOptions(overwrite=model.options.overwrite))
        logger.debug(
            "Updated %s %s (version %s)",
            self.kind.kind,
            res.metadata.name,
            res.metadata.resource_version,
        )
        return self._saved(res, model)

    def delete(self, ctx: CallContext, model: ResourceModel[S]) -> None:
        try:
            self.client.delete(ctx, model.metadata.uid)
        except NotFoundError:
            logger.debug("%s %s already deleted", self.kind.kind, model.metadata.uid)

    def import_state(self, ctx: CallContext, uid: str) -> ResourceModel[S]:
        """Adopt an existing object as a fresh model.

        The imported model overwrites on its next update, since the caller
        never saw the version it was read at.
        """
        res = self.client.get(ctx, uid)
        spec = self._config.spec_saver(res, None)
        model = self._config.model(
            metadata=ResourceMetadataModel(uid=res.metadata.name),
            spec=spec,
            options=ResourceOptions(overwrite=True),
        )
        return self._saved(res, model)
