"""App Platform resource definitions."""

from grafana_apps.resources.base import ResourceMetadataModel, ResourceModel, ResourceOptions
from grafana_apps.resources.dashboard import (
    DASHBOARD_KIND,
    Dashboard,
    DashboardList,
    DashboardResource,
    DashboardSpecModel,
    MergeError,
    merge_spec,
)
from grafana_apps.resources.playlist import (
    PLAYLIST_KIND,
    Playlist,
    PlaylistItem,
    PlaylistItemType,
    PlaylistList,
    PlaylistResource,
    PlaylistSpec,
    PlaylistSpecModel,
)

__all__ = [
    "DASHBOARD_KIND",
    "PLAYLIST_KIND",
    "Dashboard",
    "DashboardList",
    "DashboardResource",
    "DashboardSpecModel",
    "MergeError",
    "Playlist",
    "PlaylistItem",
    "PlaylistItemType",
    "PlaylistList",
    "PlaylistResource",
    "PlaylistSpec",
    "PlaylistSpecModel",
    "ResourceMetadataModel",
    "ResourceModel",
    "ResourceOptions",
    "merge_spec",
]
