"""Cooperative task queue used to defer propagation passes and script loads."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from typing import Any, Protocol

LOGGER = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Anything that can run a callback later on the owning thread.

    ``asyncio`` event loops satisfy this protocol as well.
    """

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> Any: ...


class TaskQueue:
    """FIFO of deferred tasks drained by a single thread.

    Submission is thread-safe; tasks only run inside ``run_pending``,
    ``run_until_idle`` or ``run_forever`` on the caller's thread.
    """

    def __init__(self) -> None:
        self._tasks: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()
        self._condition = threading.Condition()

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        with self._condition:
            self._tasks.append((callback, args))
            self._condition.notify_all()

    def run_pending(self) -> int:
        """Run the tasks queued right now; tasks they submit wait for the next call."""

        with self._condition:
            batch = len(self._tasks)
        executed = 0
        for _ in range(batch):
            task = self._pop()
            if task is None:
                break
            callback, args = task
            callback(*args)
            executed += 1
        return executed

    def run_until_idle(self, max_rounds: int | None = None) -> int:
        """Drain the queue, including tasks submitted while draining."""

        executed = 0
        rounds = 0
        while self.pending:
            if max_rounds is not None and rounds >= max_rounds:
                LOGGER.debug("Stopping after %s round(s) with tasks still queued", rounds)
                break
            executed += self.run_pending()
            rounds += 1
        return executed

    def run_forever(self, stop_event: threading.Event, poll_interval: float = 0.5) -> None:
        """Run tasks as they arrive until ``stop_event`` is set."""

        while not stop_event.is_set():
            with self._condition:
                if not self._tasks:
                    self._condition.wait(timeout=poll_interval)
            self.run_pending()

    @property
    def pending(self) -> int:
        with self._condition:
            return len(self._tasks)

    def _pop(self) -> tuple[Callable[..., Any], tuple[Any, ...]] | None:
        with self._condition:
            if not self._tasks:
                return None
            return self._tasks.popleft()


__all__ = ["Scheduler", "TaskQueue"]
