"""HTTP transport for the App Platform ``/apis`` endpoint."""

from __future__ import annotations

import contextlib
import json
import logging
import socket
import threading
from typing import TYPE_CHECKING, Any

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

from grafana_apps.client.errors import (
    APIStatusError,
    CanceledError,
    DeadlineExceededError,
    StatusCause,
    TransportError,
    status_error,
)
from grafana_apps.client.watch import EventType, IterWatchStream, WatchEvent
from grafana_apps.core.objects import ResourceObject, UnstructuredObject, UnstructuredObjectList

if TYPE_CHECKING:
    from collections.abc import Iterator

    from grafana_apps.client.options import (
        CreateOptions,
        DeleteOptions,
        ListOptions,
        PatchOptions,
        PatchRequest,
        UpdateOptions,
        WatchOptions,
    )
    from grafana_apps.core.context import CallContext
    from grafana_apps.core.identifier import Identifier
    from grafana_apps.core.kind import ResourceKind

logger = logging.getLogger(__name__)

JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"

_DECODED_EVENTS = frozenset({EventType.ADDED, EventType.MODIFIED, EventType.DELETED})

# The in-flight call of the current thread, if any.
_active = threading.local()


class _InFlightCall:
    """Connections one request is waiting on, so a cancel can cut them."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._conns: list[HTTPConnection] = []
        self._aborted = False

    def track(self, conn: HTTPConnection) -> None:
        with self._lock:
            self._conns.append(conn)
            aborted = self._aborted
        if aborted:
            _shutdown(conn)

    def abort(self) -> None:
        with self._lock:
            self._aborted = True
            conns = list(self._conns)
        for conn in conns:
            _shutdown(conn)


def _shutdown(conn: HTTPConnection) -> None:
    sock = getattr(conn, "sock", None)
    if sock is None:
        return
    # socket.socket.shutdown also works on TLS sockets without unwrapping them.
    with contextlib.suppress(OSError):
        socket.socket.shutdown(sock, socket.SHUT_RDWR)


def _track_current(conn: HTTPConnection) -> None:
    call = getattr(_active, "call", None)
    if call is not None:
        call.track(conn)


class _AbortableHTTPConnection(HTTPConnection):
    def getresponse(self, *args: Any, **kwargs: Any) -> Any:
        _track_current(self)
        return super().getresponse(*args, **kwargs)


class _AbortableHTTPSConnection(HTTPSConnection):
    def getresponse(self, *args: Any, **kwargs: Any) -> Any:
        _track_current(self)
        return super().getresponse(*args, **kwargs)


class _AbortableHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = _AbortableHTTPConnection


class _AbortableHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = _AbortableHTTPSConnection


class AbortableAdapter(HTTPAdapter):
    """``HTTPAdapter`` whose pending responses can be cut from another thread.

    While a :class:`RestTransport` call waits for the server, canceling its
    context shuts the socket down, so the blocked read fails at once instead
    of running into the timeout. Requests through a proxy are not covered.
    """

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            "http": _AbortableHTTPConnectionPool,
            "https": _AbortableHTTPSConnectionPool,
        }


class RestTransport:
    """Transport speaking the Kubernetes-style REST protocol over ``requests``.

    One instance serves every kind behind the same base URL; the registry
    shares it between kinds of the same connection. Canceling a call's
    context aborts the request it is waiting on; a caller-supplied session
    keeps its own adapters and only notices the cancel once the server
    answers.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        token: str | None = None,
        basic_auth: tuple[str, str] | None = None,
        user_agent: str | None = None,
        verify: bool | str = True,
        timeout: float | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        if session is None:
            session = requests.Session()
            adapter = AbortableAdapter()
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self._session = session
        self._timeout = timeout
        self._session.verify = verify
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"
        elif basic_auth is not None:
            self._session.auth = basic_auth
        if user_agent:
            self._session.headers["User-Agent"] = user_agent

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._session.close()

    def url_for(self, kind: ResourceKind, namespace: str, name: str | None = None) -> str:
        return self._base_url + kind.path(namespace, name)

    # -- Transport protocol -------------------------------------------------

    def list(
        self, ctx: CallContext, kind: ResourceKind, namespace: str, options: ListOptions
    ) -> Any:
        params = _selector_params(options.label_filters, options.field_selectors)
        if options.limit:
            params["limit"] = str(options.limit)
        if options.continue_token:
            params["continue"] = options.continue_token
        if options.resource_version:
            params["resourceVersion"] = options.resource_version

        resp = self._request(ctx, "GET", self.url_for(kind, namespace), params=params)
        return self._decode_list(kind, resp.json())

    def watch(
        self, ctx: CallContext, kind: ResourceKind, namespace: str, options: WatchOptions
    ) -> IterWatchStream:
        params = _selector_params(options.label_filters, options.field_selectors)
        params["watch"] = "true"
        if options.resource_version:
            params["resourceVersion"] = options.resource_version
        if options.timeout_seconds is not None:
            params["timeoutSeconds"] = str(options.timeout_seconds)

        resp = self._request(
            ctx, "GET", self.url_for(kind, namespace), params=params, stream=True
        )
        unregister = ctx.on_cancel(resp.close)

        def _close() -> None:
            unregister()
            resp.close()

        return IterWatchStream(self._iter_events(ctx, kind, resp), on_close=_close)

    def get(self, ctx: CallContext, kind: ResourceKind, identifier: Identifier) -> Any:
        resp = self._request(
            ctx, "GET", self.url_for(kind, identifier.namespace, identifier.name)
        )
        return self._decode(kind, resp.json())

    def create(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        obj: Any,
        options: CreateOptions,
    ) -> Any:
        body = _to_wire(obj)
        body.setdefault("metadata", {}).pop("resourceVersion", None)
        params = {"dryRun": "All"} if options.dry_run else {}
        resp = self._request(
            ctx, "POST", self.url_for(kind, identifier.namespace), params=params, json=body
        )
        return self._decode(kind, resp.json())

    def update(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        obj: Any,
        options: UpdateOptions,
    ) -> Any:
        body = _to_wire(obj)
        meta = body.setdefault("metadata", {})
        if options.resource_version:
            meta["resourceVersion"] = options.resource_version
        else:
            # No version: the server skips the concurrency check.
            meta.pop("resourceVersion", None)

        url = self.url_for(kind, identifier.namespace, identifier.name)
        if options.subresource:
            url += f"/{options.subresource}"
        params = {"dryRun": "All"} if options.dry_run else {}
        resp = self._request(ctx, "PUT", url, params=params, json=body)
        return self._decode(kind, resp.json())

    def patch(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        request: PatchRequest,
        options: PatchOptions,
    ) -> Any:
        url = self.url_for(kind, identifier.namespace, identifier.name)
        if options.subresource:
            url += f"/{options.subresource}"
        params = {"dryRun": "All"} if options.dry_run else {}
        resp = self._request(
            ctx,
            "PATCH",
            url,
            params=params,
            data=json.dumps(request.to_wire()),
            headers={"Content-Type": JSON_PATCH_CONTENT_TYPE},
        )
        return self._decode(kind, resp.json())

    def delete(
        self,
        ctx: CallContext,
        kind: ResourceKind,
        identifier: Identifier,
        options: DeleteOptions,
    ) -> None:
        body: dict[str, Any] | None = None
        if options.resource_version or options.propagation_policy:
            body = {"kind": "DeleteOptions", "apiVersion": "v1"}
            if options.resource_version:
                body["preconditions"] = {"resourceVersion": options.resource_version}
            if options.propagation_policy:
                body["propagationPolicy"] = options.propagation_policy
        self._request(
            ctx, "DELETE", self.url_for(kind, identifier.namespace, identifier.name), json=body
        )

    # -- Internals ------------------------------------------------------------

    def _request(
        self,
        ctx: CallContext,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        data: str | None = None,
        headers: dict[str, str] | None = None,
        stream: bool = False,
    ) -> requests.Response:
        ctx.check()
        timeout = _min_timeout(ctx.remaining(), self._timeout)
        logger.debug("%s %s params=%s", method, url, params)

        call = _InFlightCall()
        _active.call = call
        unregister = ctx.on_cancel(call.abort)
        try:
            resp = self._session.request(
                method,
                url,
                params=params or None,
                json=json,
                data=data,
                headers=headers,
                timeout=timeout,
                stream=stream,
            )
        except requests.Timeout as exc:
            raise DeadlineExceededError(f"{method} {url}: {exc}") from exc
        except requests.RequestException as exc:
            if ctx.canceled:
                raise CanceledError(f"{method} {url}: call canceled") from exc
            raise TransportError(f"{method} {url}: {exc}") from exc
        finally:
            unregister()
            _active.call = None

        if ctx.canceled:
            resp.close()
            raise CanceledError(f"{method} {url}: call canceled")

        if resp.status_code >= 400:
            err = _status_from_response(resp)
            resp.close()
            logger.debug("%s %s failed: %s", method, url, err)
            raise err
        return resp

    def _decode(self, kind: ResourceKind, payload: Any) -> Any:
        model = kind.object_type or UnstructuredObject
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(f"failed to decode {kind.kind}: {exc}") from exc

    def _decode_list(self, kind: ResourceKind, payload: Any) -> Any:
        model = kind.list_type or UnstructuredObjectList
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(f"failed to decode {kind.kind} list: {exc}") from exc

    def _iter_events(
        self, ctx: CallContext, kind: ResourceKind, resp: requests.Response
    ) -> Iterator[WatchEvent]:
        try:
            for line in resp.iter_lines():
                if not line:
                    continue
                raw = json.loads(line)
                event_type = EventType(raw.get("type", EventType.ERROR.value))
                obj = raw.get("object")
                if event_type in _DECODED_EVENTS:
                    obj = self._decode(kind, obj)
                yield WatchEvent(type=event_type, object=obj)
        except requests.RequestException as exc:
            if ctx.canceled:
                return
            raise TransportError(f"watch {kind.kind}: {exc}") from exc
        finally:
            resp.close()


def _to_wire(obj: Any) -> dict[str, Any]:
    if isinstance(obj, ResourceObject):
        return obj.to_wire()
    if isinstance(obj, dict):
        return json.loads(json.dumps(obj))
    raise TypeError(f"cannot encode {type(obj).__name__} as a resource object")


def _selector_params(labels: list[str], fields: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    if labels:
        params["labelSelector"] = ",".join(labels)
    if fields:
        params["fieldSelector"] = ",".join(fields)
    return params


def _min_timeout(a: float | None, b: float | None) -> float | None:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _status_from_response(resp: requests.Response) -> APIStatusError:
    body: Any = None
    with contextlib.suppress(ValueError):
        body = resp.json()

    if not isinstance(body, dict) or body.get("kind") != "Status":
        return status_error(resp.status_code, message=resp.text.strip())

    details = body.get("details") or {}
    causes = [
        StatusCause(
            field=c.get("field", ""),
            message=c.get("message", ""),
            reason=c.get("reason", ""),
        )
        for c in details.get("causes") or []
    ]
    return status_error(
        int(body.get("code") or resp.status_code),
        reason=body.get("reason", ""),
        message=body.get("message", ""),
        causes=causes,
    )
