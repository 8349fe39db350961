from typing import ClassVar

import pytest

from grafana_apps.config.registry import default_registry
from grafana_apps.engine.errors import UnknownResourceTypeError
from grafana_apps.engine.handlers import AppResourceHandler, ResourceConfig
from grafana_apps.engine.registry import ResourceTypeRegistry
from grafana_apps.resources.dashboard import (
    DASHBOARD_KIND,
    DashboardResource,
    parse_dashboard_spec,
    save_dashboard_spec,
)
from grafana_apps.resources.playlist import PlaylistResource


class OtherDashboardResource(DashboardResource):
    resource_type: ClassVar[str] = "grafana_apps_other_dashboard_v0"


def _handler() -> AppResourceHandler:
    return AppResourceHandler(
        ResourceConfig(
            kind=DASHBOARD_KIND,
            model=DashboardResource,
            spec_parser=parse_dashboard_spec,
            spec_saver=save_dashboard_spec,
        )
    )


def test_registry_register_and_get() -> None:
    registry = ResourceTypeRegistry()
    handler = _handler()

    registry.register(DashboardResource, handler)
    reg = registry.get(DashboardResource.resource_type)

    assert reg.resource_type == "grafana_apps_dashboard_dashboard_v1alpha1"
    assert reg.model is DashboardResource
    assert reg.handler is handler


def test_registry_duplicate_registration() -> None:
    registry = ResourceTypeRegistry()
    handler = _handler()

    registry.register(DashboardResource, handler)
    with pytest.raises(ValueError):
        registry.register(DashboardResource, handler)


def test_registry_handler_must_serve_model_type() -> None:
    registry = ResourceTypeRegistry()
    with pytest.raises(ValueError, match="Handler serves"):
        registry.register(OtherDashboardResource, _handler())


def test_registry_unknown_type() -> None:
    registry = ResourceTypeRegistry()
    with pytest.raises(UnknownResourceTypeError):
        registry.get("missing")


@pytest.mark.parametrize(
    ("name", "model"),
    [
        ("dashboard", DashboardResource),
        ("dashboards", DashboardResource),
        ("grafana_apps_dashboard_dashboard_v1alpha1", DashboardResource),
        ("playlist", PlaylistResource),
        ("playlists", PlaylistResource),
    ],
)
def test_find_by_type_name(name: str, model: type) -> None:
    assert default_registry().find_by_type_name(name).model is model


def test_find_by_type_name_unknown() -> None:
    with pytest.raises(UnknownResourceTypeError, match="folder"):
        default_registry().find_by_type_name("folder")


def test_default_registry_is_fresh() -> None:
    a = default_registry().get(DashboardResource.resource_type).handler
    b = default_registry().get(DashboardResource.resource_type).handler
    assert a is not b
    assert {r.model for r in default_registry()} == {DashboardResource, PlaylistResource}
