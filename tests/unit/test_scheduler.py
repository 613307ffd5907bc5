from __future__ import annotations

import threading

from esquire.scheduler import TaskQueue


def test_run_pending_only_runs_tasks_queued_before_the_call():
    queue = TaskQueue()
    events: list[str] = []

    def first() -> None:
        events.append("first")
        queue.call_soon(events.append, "nested")

    queue.call_soon(first)
    queue.call_soon(events.append, "second")

    assert queue.run_pending() == 2
    assert events == ["first", "second"]
    assert queue.pending == 1


def test_run_until_idle_drains_nested_tasks():
    queue = TaskQueue()
    events: list[int] = []

    def countdown(value: int) -> None:
        events.append(value)
        if value:
            queue.call_soon(countdown, value - 1)

    queue.call_soon(countdown, 3)

    assert queue.run_until_idle() == 4
    assert events == [3, 2, 1, 0]
    assert queue.pending == 0


def test_run_until_idle_respects_round_limit():
    queue = TaskQueue()

    def forever() -> None:
        queue.call_soon(forever)

    queue.call_soon(forever)

    assert queue.run_until_idle(max_rounds=3) == 3
    assert queue.pending == 1


def test_call_soon_is_safe_from_other_threads():
    queue = TaskQueue()
    events: list[int] = []

    threads = [
        threading.Thread(target=queue.call_soon, args=(events.append, index))
        for index in range(10)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    queue.run_until_idle()

    assert sorted(events) == list(range(10))


def test_run_forever_stops_when_event_is_set():
    queue = TaskQueue()
    stop_event = threading.Event()
    events: list[str] = []

    queue.call_soon(events.append, "ran")
    queue.call_soon(stop_event.set)

    queue.run_forever(stop_event, poll_interval=0.01)

    assert events == ["ran"]
    assert stop_event.is_set()
