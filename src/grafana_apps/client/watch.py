"""Watch event streams."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from types import TracebackType


class EventType(str, Enum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


@dataclass(frozen=True)
class WatchEvent:
    type: EventType
    object: Any


class WatchStream(Protocol):
    """A live event stream. Iterating blocks until the next event arrives."""

    def __iter__(self) -> Iterator[WatchEvent]: ...

    def close(self) -> None: ...


class IterWatchStream:
    """``WatchStream`` over an event iterator, with a close hook."""

    def __init__(
        self,
        events: Iterator[WatchEvent],
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._events = events
        self._on_close = on_close
        self._closed = False

    def __iter__(self) -> Iterator[WatchEvent]:
        for event in self._events:
            if self._closed:
                return
            yield event

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> IterWatchStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
