"""Client error types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from grafana_apps.core.kind import ResourceKind


class ClientError(Exception):
    """Base exception for resource client errors."""


class UnknownKindError(ClientError):
    """Raised when no transport is registered for a kind's group/version."""

    def __init__(self, kind: ResourceKind) -> None:
        super().__init__(
            f"No client registered for kind {kind.kind} ({kind.group}/{kind.version})"
        )
        self.kind = kind


class TypeMismatchError(ClientError):
    """Raised when a transport returns a payload of the wrong concrete type."""

    def __init__(self, expected: type, actual: Any) -> None:
        self.expected = expected
        self.actual = type(actual)
        super().__init__(
            f"invalid type, expected: {_type_name(expected)}, got: {_type_name(self.actual)}"
        )


class NamespaceError(ClientError):
    """Raised when no namespace can be resolved for a client."""


class TransportError(ClientError):
    """Raised when the transport fails below the API level (network, decoding)."""


class CanceledError(ClientError):
    """Raised when a call is canceled before it completes."""


class DeadlineExceededError(CanceledError):
    """Raised when a call runs past its context deadline."""


@dataclass(frozen=True)
class StatusCause:
    """One field-level cause attached to an API status."""

    field: str
    message: str
    reason: str = ""


class APIStatusError(ClientError):
    """An error status returned by the API server."""

    def __init__(
        self,
        code: int,
        reason: str,
        message: str,
        causes: list[StatusCause] | None = None,
    ) -> None:
        self.code = code
        self.reason = reason
        self.message = message
        self.causes = causes or []
        summary = f"HTTP {code} - {reason}"
        super().__init__(f"{summary}: {message}" if message else summary)


class NotFoundError(APIStatusError):
    """The resource does not exist."""


class ConflictError(APIStatusError):
    """The presented resourceVersion is stale; re-read and retry."""


class AlreadyExistsError(APIStatusError):
    """A resource with the same identifier already exists."""


class InvalidError(APIStatusError):
    """The server rejected the object as invalid."""


_REASON_ERRORS: dict[str, type[APIStatusError]] = {
    "NotFound": NotFoundError,
    "Conflict": ConflictError,
    "AlreadyExists": AlreadyExistsError,
    "Invalid": InvalidError,
}

_CODE_REASONS: dict[int, str] = {
    404: "NotFound",
    409: "Conflict",
    422: "Invalid",
}


def status_error(
    code: int,
    reason: str = "",
    message: str = "",
    causes: list[StatusCause] | None = None,
) -> APIStatusError:
    """Build the most specific ``APIStatusError`` for a status code/reason."""
    reason = reason or _CODE_REASONS.get(code, "Unknown")
    cls = _REASON_ERRORS.get(reason, APIStatusError)
    return cls(code, reason, message, causes)


def _type_name(t: type) -> str:
    return f"{t.__module__}.{t.__qualname__}"
