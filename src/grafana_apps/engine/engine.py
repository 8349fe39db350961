"""Apply/destroy engine: reconciles declared resources against the API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal

from grafana_apps.core.context import CallContext
from grafana_apps.engine.errors import ApplyCanceled, ApplyError
from grafana_apps.engine.types import Action, ApplyResult, ResourceChange

if TYPE_CHECKING:
    from collections.abc import Sequence

    from grafana_apps.core.provider import GrafanaProvider
    from grafana_apps.engine.handlers import AppResourceHandler
    from grafana_apps.engine.registry import ResourceTypeRegistry
    from grafana_apps.resources.base import ResourceModel

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ResourceChange, Literal["start", "done"]], None]


def _dump(model: ResourceModel[Any]) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude={"address"})


class AppsEngine:
    """Reconciles declared resources: read, then create or update."""

    def __init__(self, *, provider: GrafanaProvider, registry: ResourceTypeRegistry) -> None:
        self._provider = provider
        self._registry = registry

    @property
    def provider(self) -> GrafanaProvider:
        return self._provider

    @property
    def registry(self) -> ResourceTypeRegistry:
        return self._registry

    def handler_for(self, resource_type: str) -> AppResourceHandler[Any, Any, Any]:
        """Return the configured handler serving ``resource_type``."""
        handler = self._registry.get(resource_type).handler
        handler.configure(
            self._provider.registry,
            self._provider.org_id,
            self._provider.stack_id,
            self._provider.client_id,
            base_url=self._provider.url or "",
        )
        return handler

    def _reconcile(
        self, ctx: CallContext, resource: ResourceModel[Any], *, overwrite: bool
    ) -> ResourceChange:
        handler = self.handler_for(resource.resource_type)
        desired = resource.model_copy(deep=True)
        if overwrite:
            desired.options.overwrite = True

        current = handler.read(ctx, desired)
        if current is None:
            saved = handler.create(ctx, desired)
            action = Action.CREATE
        else:
            # Without a tracked version, the version just read is the base.
            if not desired.metadata.version:
                desired.metadata.version = current.metadata.version
            saved = handler.update(ctx, desired)
            action = Action.UPDATE

        return ResourceChange(
            address=resource.address,
            resource_type=resource.resource_type,
            action=action,
            prior=_dump(current) if current is not None else None,
            result=_dump(saved),
        )

    def apply(
        self,
        resources: Sequence[ResourceModel[Any]],
        *,
        ctx: CallContext | None = None,
        overwrite: bool = False,
        progress: ProgressCallback | None = None,
    ) -> ApplyResult:
        """Create or update every resource, in order.

        Stops at the first failure with an ``ApplyError`` carrying what was
        applied so far; the original error is chained.
        """
        ctx = ctx or CallContext.background()
        applied: list[ResourceChange] = []
        logger.info("Applying %d resources", len(resources))

        for resource in resources:
            pending = ResourceChange(
                address=resource.address,
                resource_type=resource.resource_type,
                action=Action.NOOP,
            )
            if progress:
                progress(pending, "start")
            try:
                change = self._reconcile(ctx, resource, overwrite=overwrite)
            except KeyboardInterrupt as e:  # pragma: no cover
                ctx.cancel()
                raise ApplyCanceled("Apply canceled") from e
            except Exception as e:
                raise ApplyError(applied=applied, address=resource.address, message=str(e)) from e

            logger.debug("%s %s", change.action.value, change.address)
            if progress:
                progress(change, "done")
            applied.append(change)

        return ApplyResult(applied=applied)

    def destroy(
        self,
        resources: Sequence[ResourceModel[Any]],
        *,
        ctx: CallContext | None = None,
        progress: ProgressCallback | None = None,
    ) -> ApplyResult:
        """Delete every resource, in reverse order. Missing objects count as deleted."""
        ctx = ctx or CallContext.background()
        applied: list[ResourceChange] = []
        logger.info("Destroying %d resources", len(resources))

        for resource in reversed(resources):
            change = ResourceChange(
                address=resource.address,
                resource_type=resource.resource_type,
                action=Action.DELETE,
                prior=_dump(resource),
            )
            if progress:
                progress(change, "start")
            try:
                self.handler_for(resource.resource_type).delete(ctx, resource)
            except KeyboardInterrupt as e:  # pragma: no cover
                ctx.cancel()
                raise ApplyCanceled("Destroy canceled") from e
            except Exception as e:
                raise ApplyError(applied=applied, address=resource.address, message=str(e)) from e
            if progress:
                progress(change, "done")
            applied.append(change)

        return ApplyResult(applied=applied)

    def import_resource(
        self, resource_type: str, uid: str, *, ctx: CallContext | None = None
    ) -> ResourceModel[Any]:
        """Adopt an existing object as a model of ``resource_type``."""
        ctx = ctx or CallContext.background()
        return self.handler_for(resource_type).import_state(ctx, uid)
