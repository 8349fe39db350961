"""Base desired-state model for App Platform resources."""

from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

S = TypeVar("S", bound=BaseModel)


class ResourceMetadataModel(BaseModel):
    """Metadata of a managed resource.

    ``uid`` and ``folder_uid`` are set by the user; the rest is computed by
    the API and saved back after every call.
    """

    model_config = ConfigDict(extra="forbid")

    uid: str = Field(pattern=r"^[a-zA-Z0-9_.-]+$", max_length=253)
    folder_uid: str | None = None

    uuid: str = ""
    version: str = ""
    url: str = ""
    annotations: dict[str, str] | None = None


class ResourceOptions(BaseModel):
    """Options for applying a resource."""

    model_config = ConfigDict(extra="forbid")

    # Skip the resourceVersion check on update (last writer wins).
    overwrite: bool = False


class ResourceModel(BaseModel, Generic[S]):
    """Base class for all resource models.

    Models are pure data - they define the desired state and record what
    the server returned. Handlers know how to CRUD them.
    """

    model_config = ConfigDict(extra="forbid")

    resource_type: ClassVar[str]

    id: str = ""
    metadata: ResourceMetadataModel
    spec: S
    options: ResourceOptions = Field(default_factory=ResourceOptions)

    @computed_field
    @property
    def address(self) -> str:
        """Unique address for this resource (e.g., 'grafana_apps_..._v1alpha1.my-uid')."""
        return f"{self.resource_type}.{self.metadata.uid}"
