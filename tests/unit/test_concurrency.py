"""Optimistic concurrency: stale versions conflict unless overwriting."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from grafana_apps.client.errors import ConflictError
from grafana_apps.client.namespaced import NamespacedClient
from grafana_apps.client.options import UpdateOptions
from grafana_apps.client.typed import ResourceClient
from grafana_apps.core.context import CallContext
from grafana_apps.core.objects import ObjectMeta
from grafana_apps.resources.dashboard import DASHBOARD_KIND, Dashboard, DashboardList

if TYPE_CHECKING:
    from tests.unit.conftest import InMemoryTransport


@pytest.fixture
def ctx() -> CallContext:
    return CallContext.background()


@pytest.fixture
def client(transport: InMemoryTransport) -> NamespacedClient[Dashboard, DashboardList]:
    typed: ResourceClient[Dashboard, DashboardList] = ResourceClient(
        transport, DASHBOARD_KIND, Dashboard, DashboardList
    )
    return NamespacedClient(typed, 1, is_org=True)


def _edit(name: str, title: str) -> Dashboard:
    return Dashboard(metadata=ObjectMeta(name=name), spec={"title": title})


def test_current_version_succeeds(
    ctx: CallContext, client: NamespacedClient[Dashboard, DashboardList]
) -> None:
    created = client.create(ctx, _edit("d", "v1"))

    updated = client.update(
        ctx, _edit("d", "v2"), UpdateOptions(resource_version=created.metadata.resource_version)
    )

    assert updated.spec["title"] == "v2"
    assert updated.metadata.resource_version != created.metadata.resource_version


def test_stale_version_conflicts_and_nothing_changes(
    ctx: CallContext, client: NamespacedClient[Dashboard, DashboardList]
) -> None:
    created = client.create(ctx, _edit("d", "v1"))
    stale = created.metadata.resource_version
    # Someone else writes first.
    client.update(ctx, _edit("d", "theirs"), UpdateOptions(resource_version=stale))

    with pytest.raises(ConflictError) as exc_info:
        client.update(ctx, _edit("d", "mine"), UpdateOptions(resource_version=stale))

    assert exc_info.value.code == 409
    assert exc_info.value.reason == "Conflict"
    assert client.get(ctx, "d").spec["title"] == "theirs"


def test_empty_version_is_last_writer_wins(
    ctx: CallContext, client: NamespacedClient[Dashboard, DashboardList]
) -> None:
    created = client.create(ctx, _edit("d", "v1"))
    client.update(
        ctx,
        _edit("d", "theirs"),
        UpdateOptions(resource_version=created.metadata.resource_version),
    )

    res = client.update(ctx, _edit("d", "mine"), UpdateOptions())

    assert res.spec["title"] == "mine"
    assert client.get(ctx, "d").spec["title"] == "mine"


def test_stale_version_on_the_object_conflicts(
    ctx: CallContext, client: NamespacedClient[Dashboard, DashboardList]
) -> None:
    created = client.create(ctx, _edit("d", "v1"))
    client.update(
        ctx,
        _edit("d", "theirs"),
        UpdateOptions(resource_version=created.metadata.resource_version),
    )
    # A read-modify-write holding the old read.
    mine = created.model_copy(deep=True)
    mine.spec["title"] = "mine"

    with pytest.raises(ConflictError):
        client.update(ctx, mine)

    assert client.get(ctx, "d").spec["title"] == "theirs"


def test_current_version_on_the_object_succeeds(
    ctx: CallContext, client: NamespacedClient[Dashboard, DashboardList]
) -> None:
    current = client.create(ctx, _edit("d", "v1"))
    current.spec["title"] = "v2"

    res = client.update(ctx, current)

    assert res.spec["title"] == "v2"


def test_options_version_wins_over_the_object(
    ctx: CallContext, client: NamespacedClient[Dashboard, DashboardList]
) -> None:
    created = client.create(ctx, _edit("d", "v1"))
    obj = _edit("d", "v2")
    obj.metadata.resource_version = "does-not-exist"

    res = client.update(
        ctx, obj, UpdateOptions(resource_version=created.metadata.resource_version)
    )

    assert res.spec["title"] == "v2"


def test_overwrite_ignores_stale_object_version(
    ctx: CallContext, client: NamespacedClient[Dashboard, DashboardList]
) -> None:
    created = client.create(ctx, _edit("d", "v1"))
    client.update(
        ctx,
        _edit("d", "theirs"),
        UpdateOptions(resource_version=created.metadata.resource_version),
    )
    mine = created.model_copy(deep=True)
    mine.spec["title"] = "mine"

    res = client.update(ctx, mine, UpdateOptions(overwrite=True))

    assert res.spec["title"] == "mine"
    assert client.get(ctx, "d").spec["title"] == "mine"
