"""
Tests for tickloop: Event, HandlerRegistry, queues, EventLoop.tick.
"""

import threading
import time
from dataclasses import FrozenInstanceError

import pytest

from tickloop import (
    CompletedQueue,
    CompletedResult,
    ConsoleReporter,
    Event,
    EventLoop,
    FifoQueue,
    Handled,
    HandlerRegistry,
    NoHandler,
    PendingQueue,
    event_key,
)
from tickloop.driver import run_until_idle


def _quiet_loop(**kwargs) -> EventLoop:
    return EventLoop(reporters=[], **kwargs)


def _tick_until_output(loop: EventLoop, key: str, timeout: float = 5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        report = loop.tick()
        for result in report.outputs:
            if result.key == key:
                return report, result
        time.sleep(0.005)
    raise AssertionError(f"no output for {key} within {timeout}s")


# --- Event ---


def test_event_defaults():
    e = Event(key="greet")
    assert e.payload is None
    assert e.is_async is False


def test_event_immutable():
    e = Event(key="greet", payload="world")
    with pytest.raises(FrozenInstanceError):
        e.is_async = True


def test_event_key_format():
    assert event_key("hello", 0) == "hello-0"
    assert event_key("read-file", 12) == "read-file-12"


def test_completed_result_failed_flag():
    assert not CompletedResult(key="a", value="x").failed
    assert CompletedResult(key="a", value=None, error="ValueError: bad").failed


# --- HandlerRegistry ---


def test_registry_lookup_missing_is_none():
    assert HandlerRegistry().lookup("nope") is None


def test_registry_last_write_wins():
    registry = HandlerRegistry()
    registry.register("k", lambda p: "first")
    registry.register("k", lambda p: "second")
    assert registry.lookup("k")("x") == "second"
    assert len(registry) == 1


def test_registry_register_is_chainable():
    registry = HandlerRegistry()
    assert registry.register("a", str).register("b", str) is registry
    assert "a" in registry and "b" in registry


# --- Queues ---


def test_fifo_order_and_empty_pop():
    q: FifoQueue[int] = FifoQueue()
    assert q.pop() is None
    for i in range(3):
        q.push(i)
    assert len(q) == 3
    assert [q.pop(), q.pop(), q.pop()] == [0, 1, 2]
    assert q.pop() is None
    assert q.empty()


def test_fifo_pop_where_only_checks_head():
    q: FifoQueue[int] = FifoQueue()
    q.push(5)
    q.push(1)
    assert q.pop(where=lambda x: x < 3) is None
    assert len(q) == 2
    assert q.pop(where=lambda x: x > 3) == 5


def test_fifo_concurrent_pushes_are_all_kept():
    q = CompletedQueue()

    def push_many(prefix: str) -> None:
        for i in range(200):
            q.push(CompletedResult(key=f"{prefix}-{i}", value=str(i)))

    threads = [threading.Thread(target=push_many, args=(p,)) for p in "abcd"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(q) == 800


def test_pending_queue_clear():
    q = PendingQueue()
    q.push(Event(key="a"))
    q.clear()
    assert q.pop() is None


# --- EventLoop: synchronous path ---


def test_sync_greet_outputs_within_same_tick(capsys):
    loop = EventLoop()
    loop.on("greet", lambda p: "Hello! " + p)
    loop.dispatch(Event(key="greet", payload="world", is_async=False))
    report = loop.tick()
    out = capsys.readouterr().out
    assert "received event: greet" in out
    assert "output for greet: Hello! world" in out
    assert "event loop was blocked for" in out
    assert isinstance(report.outcome, Handled)
    assert report.outcome.blocked_ms >= 0
    assert [r.value for r in report.outputs] == ["Hello! world"]


def test_sync_blocking_duration_covers_handler_time():
    loop = _quiet_loop()

    def sleepy(p):
        time.sleep(0.05)
        return p

    loop.on("sleepy", sleepy).dispatch(Event(key="sleepy", payload="z"))
    report = loop.tick()
    assert report.outcome.blocked_ms >= 45.0
    assert report.outcome.blocked_ms < 2000.0


def test_on_is_chainable_into_dispatch():
    loop = _quiet_loop()
    loop.on("a", str.upper).dispatch(Event(key="a", payload="x"))
    assert loop.pending_count == 1
    assert loop.tick().outputs[0].value == "X"


# --- EventLoop: missing handler ---


def test_missing_handler_reported_without_output(capsys):
    loop = EventLoop()
    loop.dispatch(Event(key="unregistered", payload="x", is_async=False))
    report = loop.tick()
    out = capsys.readouterr().out
    assert "no handler for unregistered" in out
    assert "output for unregistered" not in out
    assert report.outcome == NoHandler(key="unregistered")
    assert report.outputs == []
    assert loop.pending_count == 0


def test_missing_handler_does_not_stop_later_events():
    loop = _quiet_loop()
    loop.on("ok", lambda p: "fine")
    loop.dispatch(Event(key="missing"))
    loop.dispatch(Event(key="ok"))
    loop.tick()
    assert loop.tick().outputs[0].value == "fine"


# --- EventLoop: idle tick ---


def test_tick_on_empty_queues_reports_nothing(capsys):
    loop = EventLoop()
    start = time.perf_counter()
    report = loop.tick()
    assert time.perf_counter() - start < 0.5
    assert report.idle
    assert report.outcome is None
    assert capsys.readouterr().out == ""


def test_tick_runs_at_most_one_pending_event():
    loop = _quiet_loop()
    loop.on("a", str)
    for _ in range(3):
        loop.dispatch(Event(key="a", payload="p"))
    loop.tick()
    assert loop.pending_count == 2
    assert loop.tick_count == 1


# --- EventLoop: asynchronous path ---


def test_async_does_not_block_and_outputs_on_later_tick():
    release = threading.Event()
    loop = _quiet_loop()

    def waits(p):
        release.wait(5.0)
        return "done " + p

    loop.on("bg", waits).dispatch(Event(key="bg", payload="job", is_async=True))
    first = loop.tick()
    assert first.received.key == "bg"
    assert first.outcome.is_async
    assert first.outcome.result is None
    assert first.outcome.blocked_ms < 200.0
    assert first.outputs == []

    release.set()
    report, result = _tick_until_output(loop, "bg")
    assert report.tick > first.tick
    assert result.value == "done job"


def test_async_result_never_surfaces_on_dispatching_tick():
    loop = _quiet_loop()
    for i in range(20):
        key = event_key("fast", i)
        loop.on(key, lambda p: p)
        loop.dispatch(Event(key=key, payload=str(i), is_async=True))
        report = loop.tick()
        assert all(r.key != key for r in report.outputs)
        assert all(r.dispatched_on_tick < report.tick for r in report.outputs)
    run_until_idle(loop, timeout=5.0)


def test_async_results_keep_key_value_pairing():
    loop = _quiet_loop()
    loop.on("a", lambda p: (time.sleep(0.05), "A:" + p)[1])
    loop.on("b", lambda p: "B:" + p)
    loop.dispatch(Event(key="a", payload="1", is_async=True))
    loop.dispatch(Event(key="b", payload="2", is_async=True))
    reports = run_until_idle(loop, timeout=5.0)
    results = {r.key: r.value for rep in reports for r in rep.outputs}
    assert results == {"a": "A:1", "b": "B:2"}


# --- EventLoop: handler failures ---


def _boom(payload):
    raise ValueError("bad payload")


def test_sync_failure_is_reported_and_loop_continues(capsys):
    loop = EventLoop()
    loop.on("boom", _boom).on("ok", lambda p: "fine")
    loop.dispatch(Event(key="boom", payload="x"))
    loop.dispatch(Event(key="ok"))
    report = loop.tick()
    assert report.outputs[0].failed
    assert report.outputs[0].error == "ValueError: bad payload"
    assert "handler failed for boom: ValueError: bad payload" in capsys.readouterr().out
    assert loop.tick().outputs[0].value == "fine"


def test_async_failure_is_captured_as_result():
    loop = _quiet_loop()
    loop.on("boom", _boom)
    loop.dispatch(Event(key="boom", is_async=True))
    loop.tick()
    _, result = _tick_until_output(loop, "boom")
    assert result.failed
    assert result.value is None
    assert "bad payload" in result.error


# --- EventLoop: independence and state ---


def test_loops_do_not_share_state():
    a = _quiet_loop()
    b = _quiet_loop()
    a.on("k", lambda p: "a")
    b.dispatch(Event(key="k"))
    assert isinstance(b.tick().outcome, NoHandler)
    assert a.pending_count == 0


def test_is_idle_tracks_in_flight_workers():
    release = threading.Event()
    loop = _quiet_loop()
    loop.on("k", lambda p: (release.wait(5.0), "v")[1])
    assert loop.is_idle
    loop.dispatch(Event(key="k", is_async=True))
    assert not loop.is_idle
    loop.tick()
    assert not loop.is_idle
    release.set()
    run_until_idle(loop, timeout=5.0)
    assert loop.is_idle


def test_console_reporter_writes_to_given_stream():
    import io

    buf = io.StringIO()
    loop = EventLoop(reporters=[ConsoleReporter(buf)])
    loop.on("greet", lambda p: "Hello! " + p).dispatch(Event(key="greet", payload="you"))
    loop.tick()
    lines = buf.getvalue().splitlines()
    assert lines[0] == "received event: greet"
    assert lines[1].startswith("event loop was blocked for ")
    assert lines[2] == "output for greet: Hello! you"


def test_tick_report_separates_sync_result_from_completed():
    loop = _quiet_loop()
    loop.on("bg", lambda p: "later").on("now", lambda p: "now")
    loop.dispatch(Event(key="bg", is_async=True))
    loop.dispatch(Event(key="now"))
    loop.tick()
    deadline = time.monotonic() + 5.0
    while loop.dispatcher.in_flight and time.monotonic() < deadline:
        time.sleep(0.005)
    report = loop.tick()
    assert report.received.key == "now"
    assert report.outcome.result.value == "now"
    assert report.completed.value == "later"
    assert [r.value for r in report.outputs] == ["now", "later"]


class _FailingReporter:
    def on_received(self, event):
        raise RuntimeError("reporter broke")

    def on_no_handler(self, event):
        pass

    def on_blocked(self, event, blocked_ms):
        pass

    def on_output(self, result):
        pass


def test_reporter_error_propagates_and_drops_popped_event():
    calls = []
    loop = EventLoop(reporters=[_FailingReporter()])
    loop.on("k", lambda p: calls.append(p) or "v")
    loop.dispatch(Event(key="k", payload="x"))
    with pytest.raises(RuntimeError, match="reporter broke"):
        loop.tick()
    assert calls == []
    assert loop.pending_count == 0
