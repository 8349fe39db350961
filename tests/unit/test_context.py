import threading
import time

import pytest

from grafana_apps.client.errors import CanceledError, DeadlineExceededError
from grafana_apps.client.watch import EventType, IterWatchStream, WatchEvent
from grafana_apps.core.context import CallContext


def test_background_context_never_expires() -> None:
    ctx = CallContext.background()
    assert ctx.remaining() is None
    assert not ctx.expired
    ctx.check()


def test_deadline() -> None:
    ctx = CallContext(timeout=0)
    assert ctx.expired
    assert ctx.remaining() == 0.0
    with pytest.raises(DeadlineExceededError):
        ctx.check()


def test_remaining_counts_down() -> None:
    ctx = CallContext(timeout=60)
    remaining = ctx.remaining()
    assert remaining is not None
    assert 0 < remaining <= 60


def test_cancel_runs_callbacks_once() -> None:
    ctx = CallContext()
    calls: list[str] = []
    ctx.on_cancel(lambda: calls.append("a"))
    unregister = ctx.on_cancel(lambda: calls.append("b"))
    unregister()

    ctx.cancel()
    ctx.cancel()

    assert calls == ["a"]
    assert ctx.canceled
    with pytest.raises(CanceledError):
        ctx.check()


def test_on_cancel_after_cancel_runs_immediately() -> None:
    ctx = CallContext()
    ctx.cancel()
    calls: list[int] = []
    ctx.on_cancel(lambda: calls.append(1))
    assert calls == [1]


def test_failing_callback_does_not_stop_others() -> None:
    ctx = CallContext()
    calls: list[int] = []

    def boom() -> None:
        raise RuntimeError("boom")

    ctx.on_cancel(boom)
    ctx.on_cancel(lambda: calls.append(1))
    ctx.cancel()

    assert calls == [1]


def test_cancel_from_another_thread() -> None:
    ctx = CallContext()
    t = threading.Thread(target=lambda: (time.sleep(0.01), ctx.cancel()))
    t.start()
    t.join()
    assert ctx.canceled


class TestIterWatchStream:
    def _events(self, n: int) -> list[WatchEvent]:
        return [WatchEvent(type=EventType.ADDED, object=i) for i in range(n)]

    def test_iterates_events(self) -> None:
        stream = IterWatchStream(iter(self._events(3)))
        assert [e.object for e in stream] == [0, 1, 2]

    def test_close_stops_iteration(self) -> None:
        closed: list[bool] = []
        stream = IterWatchStream(iter(self._events(3)), on_close=lambda: closed.append(True))

        seen = []
        for event in stream:
            seen.append(event.object)
            stream.close()

        assert seen == [0]
        assert closed == [True]

    def test_close_is_idempotent(self) -> None:
        closed: list[bool] = []
        with IterWatchStream(iter([]), on_close=lambda: closed.append(True)) as stream:
            stream.close()
        assert closed == [True]
