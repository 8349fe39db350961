"""Human-readable descriptions of API errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from grafana_apps.client.errors import APIStatusError, InvalidError
from grafana_apps.resources.dashboard import DASHBOARD_KIND

_DASHBOARD_TYPED_FIELDS = frozenset({"title", "tags"})


class ResourceAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    READ = "read"


@dataclass
class FieldError:
    """Field-level error, with the API field path mapped onto the model."""

    field: str
    path: str
    messages: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        lines = "\n".join(f"* {m}" for m in self.messages)
        return f'invalid value for field "{self.field}" ({self.path}):\n{lines}'


def parse_field_path(resource_type: str, field_path: str) -> str:
    """Map an API field path (``spec.panels.0.title``) onto the model.

    Only ``metadata`` and ``spec`` paths are mapped; anything else yields
    an empty path. Dashboard specs live under ``spec.json`` except for the
    ``title`` and ``tags`` overrides.
    """
    parts = field_path.split(".")
    root = parts[0]
    if root not in ("metadata", "spec"):
        return ""

    rest = parts[1:]
    res = root
    if (
        root == "spec"
        and resource_type == DASHBOARD_KIND.resource_type
        and rest
        and rest[0] not in _DASHBOARD_TYPED_FIELDS
    ):
        res += ".json"

    for part in rest:
        if part.isdigit():
            res += f"[{part}]"
        else:
            res += f".{part}"
    return res


def field_errors_from_causes(resource_type: str, err: APIStatusError) -> list[FieldError]:
    """Group the causes of ``err`` by field, in first-seen order."""
    res: dict[str, FieldError] = {}
    for cause in err.causes:
        fe = res.get(cause.field)
        if fe is None:
            fe = FieldError(field=cause.field, path=parse_field_path(resource_type, cause.field))
            res[cause.field] = fe
        fe.messages.append(cause.message)
    return list(res.values())


def describe_error(
    action: ResourceAction | str, name: str, resource_type: str, err: Exception
) -> list[str]:
    """Describe a failed call as one or more messages.

    Invalid errors that carry causes produce one message per field;
    everything else produces a single message.
    """
    action = action.value if isinstance(action, ResourceAction) else action

    if not isinstance(err, APIStatusError):
        return [f'failed to {action} resource "{name}": unknown error: {err}']

    if isinstance(err, InvalidError) and err.causes:
        return [str(fe) for fe in field_errors_from_causes(resource_type, err)]

    reason = err.reason or "Unknown"
    msg = f'failed to {action} resource "{name}": HTTP {err.code} - {reason}'
    if err.message:
        msg += f": {err.message}"
    return [msg]
