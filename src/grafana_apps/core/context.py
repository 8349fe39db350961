"""Per-call context: deadline and cancellation."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

from grafana_apps.client.errors import CanceledError, DeadlineExceededError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class CallContext:
    """Governs one or more API calls.

    A context may carry a timeout (seconds from creation) and can be
    canceled from another thread. Cancel callbacks let a transport abort the
    network call it is blocked on.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._canceled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def background(cls) -> CallContext:
        """A context with no deadline that is never canceled by itself."""
        return cls()

    @property
    def canceled(self) -> bool:
        return self._canceled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        with self._lock:
            if self._canceled.is_set():
                return
            self._canceled.set()
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            try:
                cb()
            except Exception:
                logger.debug("Cancel callback failed", exc_info=True)

    def on_cancel(self, cb: Callable[[], None]) -> Callable[[], None]:
        """Register *cb* to run on cancel. Returns a function that unregisters it.

        If the context is already canceled, *cb* runs immediately.
        """
        with self._lock:
            if not self._canceled.is_set():
                self._callbacks.append(cb)
                return lambda: self._discard(cb)
        cb()
        return lambda: None

    def _discard(self, cb: Callable[[], None]) -> None:
        with self._lock:
            if cb in self._callbacks:
                self._callbacks.remove(cb)

    def check(self) -> None:
        """Raise if the context is canceled or past its deadline."""
        if self._canceled.is_set():
            raise CanceledError("call canceled")
        if self.expired:
            raise DeadlineExceededError("call deadline exceeded")
