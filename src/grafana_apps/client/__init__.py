"""Typed and namespaced clients for App Platform kinds."""

from grafana_apps.client.errors import (
    AlreadyExistsError,
    APIStatusError,
    CanceledError,
    ClientError,
    ConflictError,
    DeadlineExceededError,
    InvalidError,
    NamespaceError,
    NotFoundError,
    TransportError,
    TypeMismatchError,
    UnknownKindError,
)
from grafana_apps.client.namespaced import NamespacedClient
from grafana_apps.client.registry import ClientRegistry
from grafana_apps.client.rest import RestTransport
from grafana_apps.client.typed import ResourceClient

__all__ = [
    "APIStatusError",
    "AlreadyExistsError",
    "CanceledError",
    "ClientError",
    "ClientRegistry",
    "ConflictError",
    "DeadlineExceededError",
    "InvalidError",
    "NamespaceError",
    "NamespacedClient",
    "NotFoundError",
    "ResourceClient",
    "RestTransport",
    "TransportError",
    "TypeMismatchError",
    "UnknownKindError",
]
