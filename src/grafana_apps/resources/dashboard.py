"""Dashboard kind: an unstructured JSON spec with a few managed fields."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from grafana_apps.core.kind import ResourceKind
from grafana_apps.core.objects import ResourceObjectList, UnstructuredObject
from grafana_apps.resources.base import ResourceModel

# Keys the server manages inside the dashboard document.
_SERVER_MANAGED_KEYS = ("version",)


class MergeError(ValueError):
    """Raised when a dashboard document cannot be merged with declared fields."""


class Dashboard(UnstructuredObject):
    pass


class DashboardList(ResourceObjectList[Dashboard]):
    pass


DASHBOARD_KIND = ResourceKind(
    group="dashboard.grafana.app",
    version="v1alpha1",
    kind="Dashboard",
    plural="dashboards",
    object_type=Dashboard,
    list_type=DashboardList,
)


class DashboardSpecModel(BaseModel):
    """Dashboard spec: the full JSON document plus optional overrides.

    ``title`` replaces the document's title. ``tags`` are added to the
    document's own tags.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    json_: str = Field(alias="json")
    title: str | None = None
    tags: list[str] | None = None

    @field_validator("json_", mode="before")
    @classmethod
    def _encode_mapping(cls, v: Any) -> Any:
        # YAML configs may inline the document instead of a JSON string.
        if isinstance(v, Mapping):
            return json.dumps(v, sort_keys=True)
        return v


class DashboardResource(ResourceModel[DashboardSpecModel]):
    """A Grafana dashboard."""

    resource_type: ClassVar[str] = DASHBOARD_KIND.resource_type

    type: Literal["dashboard"] = "dashboard"


def parse_document(document: str | Mapping[str, Any]) -> dict[str, Any]:
    """Parse a dashboard document into a fresh dict."""
    if isinstance(document, Mapping):
        return json.loads(json.dumps(dict(document)))
    try:
        res = json.loads(document)
    except (TypeError, ValueError) as exc:
        raise MergeError(f"failed to parse dashboard spec: {exc}") from exc
    if not isinstance(res, dict):
        raise MergeError(
            f"failed to parse dashboard spec: expected a JSON object, got {type(res).__name__}"
        )
    return res


def get_tags(document: Mapping[str, Any]) -> list[str]:
    """Read the document's tags, treating a missing, null or non-list value as no tags."""
    tags = document.get("tags")
    if not isinstance(tags, list):
        return []
    bad = [t for t in tags if not isinstance(t, str)]
    if bad:
        raise MergeError(f"dashboard tags must be strings, got {bad!r}")
    return list(tags)


def merge_spec(
    document: str | Mapping[str, Any],
    *,
    title: str | None = None,
    tags: list[str] | None = None,
) -> dict[str, Any]:
    """Fold declared fields into a dashboard document.

    A non-empty ``title`` overwrites the document's title. Declared ``tags``
    are appended to the document's tags, skipping ones already present.
    Declaring ``tags`` at all, even empty, normalises the document's
    ``tags`` key to a list.
    Every other key is left as is, so merging values the document already
    holds returns an equal document.
    """
    res = parse_document(document)

    if title:
        res["title"] = title

    if tags is not None:
        merged = get_tags(res)
        for tag in tags:
            if tag not in merged:
                merged.append(tag)
        res["tags"] = merged

    return res


def parse_dashboard_spec(spec: DashboardSpecModel, dst: Dashboard) -> None:
    dst.spec = merge_spec(spec.json_, title=spec.title, tags=spec.tags)


def save_dashboard_spec(src: Dashboard, prior: DashboardSpecModel | None) -> DashboardSpecModel:
    """Build a spec model from a server object (used on import).

    Title and tags are only tracked when the prior model tracked them.
    """
    doc = {k: v for k, v in src.spec.items() if k not in _SERVER_MANAGED_KEYS}
    res = DashboardSpecModel(json=json.dumps(doc, sort_keys=True))
    if prior is not None and prior.title is not None:
        title = doc.get("title")
        if not isinstance(title, str):
            raise MergeError("failed to get title: title is not a string")
        res.title = title
    if prior is not None and prior.tags is not None:
        res.tags = get_tags(doc)
    return res
