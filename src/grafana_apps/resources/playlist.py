"""Playlist kind: a strongly-typed spec."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from grafana_apps.core.kind import ResourceKind
from grafana_apps.core.objects import ResourceObject, ResourceObjectList
from grafana_apps.resources.base import ResourceModel


class PlaylistItemType(str, Enum):
    DASHBOARD_BY_TAG = "dashboard_by_tag"
    DASHBOARD_BY_UID = "dashboard_by_uid"
    DASHBOARD_BY_ID = "dashboard_by_id"


class PlaylistItem(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: PlaylistItemType
    value: str


class PlaylistSpec(BaseModel):
    """Wire spec of a playlist object."""

    model_config = ConfigDict(extra="allow")

    title: str
    interval: str = ""
    items: list[PlaylistItem] = Field(default_factory=list)


class Playlist(ResourceObject):
    spec: PlaylistSpec = Field(default_factory=lambda: PlaylistSpec(title=""))


class PlaylistList(ResourceObjectList[Playlist]):
    pass


PLAYLIST_KIND = ResourceKind(
    group="playlist.grafana.app",
    version="v0alpha1",
    kind="Playlist",
    plural="playlists",
    object_type=Playlist,
    list_type=PlaylistList,
)


class PlaylistSpecModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    interval: str | None = None
    items: list[PlaylistItem] = Field(min_length=1)


class PlaylistResource(ResourceModel[PlaylistSpecModel]):
    """A Grafana playlist."""

    resource_type: ClassVar[str] = PLAYLIST_KIND.resource_type

    type: Literal["playlist"] = "playlist"


def parse_playlist_spec(spec: PlaylistSpecModel, dst: Playlist) -> None:
    dst.spec = PlaylistSpec(
        title=spec.title,
        interval=spec.interval or "",
        items=[item.model_copy() for item in spec.items],
    )


def save_playlist_spec(src: Playlist, _prior: PlaylistSpecModel | None) -> PlaylistSpecModel:
    return PlaylistSpecModel(
        title=src.spec.title,
        interval=src.spec.interval,
        items=[item.model_copy() for item in src.spec.items],
    )
