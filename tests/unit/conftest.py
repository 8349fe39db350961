"""Shared fixtures for unit tests."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

import pytest

from grafana_apps.client.errors import status_error
from grafana_apps.client.registry import ClientRegistry
from grafana_apps.client.watch import EventType, IterWatchStream, WatchEvent
from grafana_apps.config import load
from grafana_apps.core.objects import ResourceObject, UnstructuredObject, UnstructuredObjectList
from grafana_apps.core.provider import GrafanaProvider
from grafana_apps.resources.dashboard import DASHBOARD_KIND
from grafana_apps.resources.playlist import PLAYLIST_KIND

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from grafana_apps.client.options import (
        CreateOptions,
        DeleteOptions,
        ListOptions,
        PatchOptions,
        PatchRequest,
        UpdateOptions,
        WatchOptions,
    )
    from grafana_apps.config.schema import Config
    from grafana_apps.core.context import CallContext
    from grafana_apps.core.identifier import Identifier
    from grafana_apps.core.kind import ResourceKind

_GRAFANA_ENV_VARS = (
    "GRAFANA_URL",
    "GRAFANA_AUTH",
    "GRAFANA_ORG_ID",
    "GRAFANA_STACK_ID",
    "GRAFANA_INSECURE_SKIP_VERIFY",
    "GRAFANA_CA_CERT",
    "GRAFANA_USER_AGENT",
    "GRAFANA_TIMEOUT",
    "GRAFANA_APPS_LOG",
)


@pytest.fixture(autouse=True)
def _clean_grafana_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove GRAFANA_* env vars so unit tests don't leak host config."""
    for var in _GRAFANA_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class InMemoryTransport:
    """A ``Transport`` backed by a dict, behaving like the API server.

    Assigns uids and increasing resource versions, rejects stale versions
    with a conflict, and records every call.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.events: list[tuple[str, str, WatchEvent]] = []
        self.calls: list[tuple[str, str]] = []
        self._version = 0
        self._uids = 0

    # -- helpers --------------------------------------------------------------

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    @staticmethod
    def _key(kind: ResourceKind, namespace: str, name: str) -> tuple[str, str, str]:
        return (f"{kind.api_version}/{kind.plural}", namespace, name)

    @staticmethod
    def _decode(kind: ResourceKind, data: dict[str, Any]) -> Any:
        model = kind.object_type or UnstructuredObject
        return model.model_validate(copy.deepcopy(data))

    def _not_found(self, kind: ResourceKind, name: str) -> Exception:
        return status_error(404, "NotFound", f'{kind.plural}.{kind.group} "{name}" not found')

    def _emit(self, kind: ResourceKind, namespace: str, event_type: EventType, data: Any) -> None:
        event = WatchEvent(type=event_type, object=self._decode(kind, data))
        self.events.append((f"{kind.api_version}/{kind.plural}", namespace, event))

    def put(self, kind: ResourceKind, namespace: str, obj: ResourceObject) -> dict[str, Any]:
        """Seed an object directly, as if someone else had created it."""
        data = obj.to_wire()
        data["apiVersion"] = kind.api_version
        data["kind"] = kind.kind
        meta = data.setdefault("metadata", {})
        meta["namespace"] = namespace
        self._uids += 1
        if not meta.get("uid"):
            meta["uid"] = f"uid-{self._uids}"
        meta["resourceVersion"] = self._next_version()
        self.objects[self._key(kind, namespace, meta["name"])] = data
        return data

    # -- Transport protocol ---------------------------------------------------

    def list(
        self, ctx: CallContext, kind: ResourceKind, namespace: str, options: ListOptions
    ) -> Any:
        ctx.check()
        self.calls.append(("list", namespace))
        prefix = f"{kind.api_version}/{kind.plural}"
        items = [
            copy.deepcopy(v)
            for (k, ns, _), v in sorted(self.objects.items())
            if k == prefix and ns == namespace
        ]
        if options.limit:
            items = items[: options.limit]
        model = kind.list_type or UnstructuredObjectList
        return model.model_validate(
            {
                "apiVersion": kind.api_version,
                "kind": f"{kind.kind}List",
                "metadata": {"resourceVersion": str(self._version)},
                "items": items,
            }
        )

    def watch(
        self, ctx: CallContext, kind: ResourceKind, namespace: str, options: WatchOptions
    ) -> Any:
        ctx.check()
        self.calls.append(("watch", namespace))
        prefix = f"{kind.api_version}/{kind.plural}"
        events = [e for k, ns, e in self.events if k == prefix and ns == namespace]
        return IterWatchStream(iter(events))

    def get(self, ctx: CallContext, kind: ResourceKind, identifier: Identifier) -> Any:
        ctx.check()
        self.calls.append(("get", str(identifier)))
        data = self.objects.get(self._key(kind, identifier.namespace, identifier.name))
        if data is None:
            raise self._not_found(kind, identifier.name)
        return self._decode(kind, data)

    def create(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        obj: Any,
        options: CreateOptions,
    ) -> Any:
        ctx.check()
        self.calls.append(("create", str(identifier)))
        key = self._key(kind, identifier.namespace, identifier.name)
        if key in self.objects:
            raise status_error(
                409,
                "AlreadyExists",
                f'{kind.plural}.{kind.group} "{identifier.name}" already exists',
            )
        data = obj.to_wire()
        meta = data.setdefault("metadata", {})
        meta.pop("resourceVersion", None)
        meta["namespace"] = identifier.namespace
        self._uids += 1
        meta["uid"] = f"uid-{self._uids}"
        meta["resourceVersion"] = self._next_version()
        if not options.dry_run:
            self.objects[key] = data
            self._emit(kind, identifier.namespace, EventType.ADDED, data)
        return self._decode(kind, data)

    def update(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        obj: Any,
        options: UpdateOptions,
    ) -> Any:
        ctx.check()
        self.calls.append(("update", str(identifier)))
        key = self._key(kind, identifier.namespace, identifier.name)
        current = self.objects.get(key)
        if current is None:
            raise self._not_found(kind, identifier.name)
        if (
            options.resource_version
            and options.resource_version != current["metadata"]["resourceVersion"]
        ):
            raise status_error(
                409,
                "Conflict",
                f'Operation cannot be fulfilled on {kind.plural}.{kind.group} "{identifier.name}": '
                "the object has been modified; please apply your changes to the latest version "
                "and try again",
            )
        data = obj.to_wire()
        meta = data.setdefault("metadata", {})
        meta["namespace"] = identifier.namespace
        meta["uid"] = current["metadata"]["uid"]
        meta["resourceVersion"] = self._next_version()
        if not options.dry_run:
            self.objects[key] = data
            self._emit(kind, identifier.namespace, EventType.MODIFIED, data)
        return self._decode(kind, data)

    def patch(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        request: PatchRequest,
        options: PatchOptions,
    ) -> Any:
        ctx.check()
        self.calls.append(("patch", str(identifier)))
        key = self._key(kind, identifier.namespace, identifier.name)
        current = self.objects.get(key)
        if current is None:
            raise self._not_found(kind, identifier.name)
        data = copy.deepcopy(current)
        for op in request.to_wire():
            *parents, leaf = op["path"].strip("/").split("/")
            target = data
            for part in parents:
                target = target.setdefault(part, {})
            if op["op"] == "remove":
                target.pop(leaf, None)
            else:
                target[leaf] = op["value"]
        data["metadata"]["resourceVersion"] = self._next_version()
        if not options.dry_run:
            self.objects[key] = data
            self._emit(kind, identifier.namespace, EventType.MODIFIED, data)
        return self._decode(kind, data)

    def delete(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        options: DeleteOptions,
    ) -> None:
        ctx.check()
        self.calls.append(("delete", str(identifier)))
        key = self._key(kind, identifier.namespace, identifier.name)
        data = self.objects.pop(key, None)
        if data is None:
            raise self._not_found(kind, identifier.name)
        self._emit(kind, identifier.namespace, EventType.DELETED, data)


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def client_registry(transport: InMemoryTransport) -> ClientRegistry:
    registry = ClientRegistry()
    registry.register(DASHBOARD_KIND.group, DASHBOARD_KIND.version, transport)
    registry.register(PLAYLIST_KIND.group, PLAYLIST_KIND.version, transport)
    return registry


@pytest.fixture
def provider(client_registry: ClientRegistry) -> GrafanaProvider:
    return GrafanaProvider.from_registry(client_registry, org_id=1)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make
