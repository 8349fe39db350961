"""Request options for resource client calls."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ListOptions(BaseModel):
    label_filters: list[str] = Field(default_factory=list)
    field_selectors: list[str] = Field(default_factory=list)
    limit: int = 0
    continue_token: str = ""
    resource_version: str = ""


class WatchOptions(BaseModel):
    label_filters: list[str] = Field(default_factory=list)
    field_selectors: list[str] = Field(default_factory=list)
    resource_version: str = ""
    timeout_seconds: int | None = None


class CreateOptions(BaseModel):
    dry_run: bool = False


class UpdateOptions(BaseModel):
    """Options for an update.

    ``resource_version`` is the precondition sent to the server; when empty
    the object's own ``metadata.resourceVersion`` is used. ``overwrite``
    drops the precondition so the server applies last-writer-wins.
    """

    resource_version: str = ""
    overwrite: bool = False
    subresource: str = ""
    dry_run: bool = False


class PatchOptions(BaseModel):
    subresource: str = ""
    dry_run: bool = False


class DeleteOptions(BaseModel):
    resource_version: str = ""
    propagation_policy: str = ""


class PatchOp(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    COPY = "copy"
    TEST = "test"


class PatchOperation(BaseModel):
    """A single RFC 6902 JSON-patch operation."""

    model_config = ConfigDict(populate_by_name=True)

    op: PatchOp
    path: str
    value: Any = None
    from_: str | None = Field(default=None, alias="from")

    def to_wire(self) -> dict[str, Any]:
        res: dict[str, Any] = {"op": self.op.value, "path": self.path}
        if self.op in (PatchOp.ADD, PatchOp.REPLACE, PatchOp.TEST):
            res["value"] = self.value
        if self.from_ is not None:
            res["from"] = self.from_
        return res


class PatchRequest(BaseModel):
    operations: list[PatchOperation] = Field(default_factory=list)

    def to_wire(self) -> list[dict[str, Any]]:
        return [op.to_wire() for op in self.operations]
