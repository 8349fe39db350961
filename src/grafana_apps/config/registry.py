"""Default resource type registry factory."""

from __future__ import annotations

from grafana_apps.engine.handlers import AppResourceHandler, ResourceConfig
from grafana_apps.engine.registry import ResourceTypeRegistry
from grafana_apps.resources.dashboard import (
    DASHBOARD_KIND,
    DashboardResource,
    parse_dashboard_spec,
    save_dashboard_spec,
)
from grafana_apps.resources.playlist import (
    PLAYLIST_KIND,
    PlaylistResource,
    parse_playlist_spec,
    save_playlist_spec,
)


def default_registry() -> ResourceTypeRegistry:
    """Create a fresh registry with all built-in resource types and handlers."""
    registry = ResourceTypeRegistry()

    registry.register(
        DashboardResource,
        AppResourceHandler(
            ResourceConfig(
                kind=DASHBOARD_KIND,
                model=DashboardResource,
                spec_parser=parse_dashboard_spec,
                spec_saver=save_dashboard_spec,
            )
        ),
    )
    registry.register(
        PlaylistResource,
        AppResourceHandler(
            ResourceConfig(
                kind=PLAYLIST_KIND,
                model=PlaylistResource,
                spec_parser=parse_playlist_spec,
                spec_saver=save_playlist_spec,
            )
        ),
    )

    return registry
