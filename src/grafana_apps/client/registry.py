"""Kind -> transport registry."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from grafana_apps.client.errors import UnknownKindError

if TYPE_CHECKING:
    from collections.abc import Callable

    from grafana_apps.client.transport import Transport
    from grafana_apps.core.kind import ResourceKind

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Registry mapping a kind's (group, version) to the transport serving it.

    Transports can be registered up front, or built on first use by a
    factory; either way one transport is cached per (group, version) and
    shared by every kind in it. Safe to share between threads.
    """

    def __init__(self, factory: Callable[[ResourceKind], Transport] | None = None) -> None:
        self._factory = factory
        self._transports: dict[tuple[str, str], Transport] = {}
        self._lock = threading.Lock()

    def register(self, group: str, version: str, transport: Transport) -> None:
        key = (group, version)
        with self._lock:
            if key in self._transports:
                raise ValueError(f"Transport already registered for {group}/{version}")
            self._transports[key] = transport

    def client_for(self, kind: ResourceKind) -> Transport:
        key = kind.group_version
        with self._lock:
            transport = self._transports.get(key)
            if transport is not None:
                return transport
            if self._factory is None:
                raise UnknownKindError(kind)
            logger.debug("Creating transport for %s/%s", kind.group, kind.version)
            transport = self._factory(kind)
            self._transports[key] = transport
            return transport
