"""Kubernetes-style object envelope shared by all kinds."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ANNOTATION_FOLDER = "grafana.app/folder"
ANNOTATION_MANAGED_BY = "grafana.app/managedBy"
ANNOTATION_MANAGER_ID = "grafana.app/managerId"

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class ObjectMeta(BaseModel):
    """Object metadata: identity, concurrency token and free-form maps."""

    model_config = _WIRE_CONFIG

    name: str = ""
    namespace: str = ""
    uid: str = ""
    resource_version: str = ""
    generation: int | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: str | None = None
    self_link: str | None = None

    @property
    def folder(self) -> str:
        return self.annotations.get(ANNOTATION_FOLDER, "")

    def set_folder(self, folder_uid: str) -> None:
        if folder_uid:
            self.annotations[ANNOTATION_FOLDER] = folder_uid
        else:
            self.annotations.pop(ANNOTATION_FOLDER, None)


class ResourceObject(BaseModel):
    """A typed resource: envelope plus a kind-specific ``spec``.

    Subclasses narrow ``spec`` to a model (typed kinds) or keep it as a
    plain mapping (unstructured kinds such as dashboards).
    """

    model_config = _WIRE_CONFIG

    api_version: str = ""
    kind: str = ""
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: Any = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class UnstructuredObject(ResourceObject):
    """Object whose spec is an arbitrary JSON object."""

    spec: dict[str, Any] = Field(default_factory=dict)


T = TypeVar("T", bound=ResourceObject)


class ListMeta(BaseModel):
    model_config = _WIRE_CONFIG

    resource_version: str = ""
    continue_: str = Field(default="", alias="continue")


class ResourceObjectList(BaseModel, Generic[T]):
    """A page of objects of a single kind."""

    model_config = _WIRE_CONFIG

    api_version: str = ""
    kind: str = ""
    metadata: ListMeta = Field(default_factory=ListMeta)
    items: list[T] = Field(default_factory=list)


class UnstructuredObjectList(ResourceObjectList[UnstructuredObject]):
    pass
