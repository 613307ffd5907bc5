"""Filesystem watcher that reports script files dropped into a directory."""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler, FileSystemMovedEvent
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

LOGGER = logging.getLogger(__name__)
SCRIPT_SUFFIX = ".py"


class ScriptWatcher:
    """Watch a directory (non-recursively) for new script files.

    Callbacks run on the observer thread; hand the work to a ``TaskQueue``
    to keep resolver access on a single thread.
    """

    def __init__(
        self,
        directory: Path,
        *,
        debounce_seconds: float = 0.2,
        observer_factory: Callable[[], BaseObserver] | None = None,
    ) -> None:
        self._directory = directory.expanduser()
        self._observer_factory = observer_factory or Observer
        self._observer: BaseObserver | None = None
        self._callbacks: list[Callable[[Path], None]] = []
        self._debounce = max(0.0, debounce_seconds)
        self._lock = threading.Lock()

    def on_new_script(self, callback: Callable[[Path], None]) -> None:
        """Register callback invoked when a script appears in the directory."""

        self._callbacks.append(callback)

    def existing_scripts(self) -> list[Path]:
        """Return scripts already present, sorted by name."""

        if not self._directory.is_dir():
            return []
        return sorted(
            (entry.resolve() for entry in self._directory.iterdir() if _is_script(entry)),
            key=lambda item: item.name,
        )

    def start(self) -> None:
        """Start watching filesystem events."""

        with self._lock:
            if self._observer is not None:
                return
            self._directory.mkdir(parents=True, exist_ok=True)
            observer = self._observer_factory()
            handler = _ScriptEventHandler(self._emit, debounce_seconds=self._debounce)
            observer.schedule(handler, str(self._directory), recursive=False)
            observer.start()
            self._observer = observer
            LOGGER.info("Watching %s for scripts", self._directory)

    def stop(self) -> None:
        """Stop watching and wait for the observer thread to finish."""

        with self._lock:
            observer = self._observer
            if observer is None:
                return
            observer.stop()
            try:
                observer.join(timeout=5)
            except RuntimeError:  # pragma: no cover - watchdog internals
                LOGGER.warning("Failed to join script observer thread")
            self._observer = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def _emit(self, path: Path) -> None:
        for callback in list(self._callbacks):
            try:
                callback(path)
            except Exception:  # pragma: no cover - defensive logging
                LOGGER.exception("Script callback failed for path %s", path)


class _ScriptEventHandler(FileSystemEventHandler):
    """Forward created and moved-in script files, dropping rapid duplicates."""

    def __init__(self, callback: Callable[[Path], None], *, debounce_seconds: float) -> None:
        super().__init__()
        self._callback = callback
        self._debounce_seconds = debounce_seconds
        self._recent: dict[Path, float] = {}
        self._recent_lock = threading.Lock()

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._handle_path(_event_path(event.src_path))

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        if event.is_directory:
            return
        self._handle_path(_event_path(event.dest_path))

    def _handle_path(self, path: Path) -> None:
        if path.suffix != SCRIPT_SUFFIX or path.name.startswith("."):
            return
        resolved = path.resolve()
        if not self._should_emit(resolved):
            return
        self._callback(resolved)

    def _should_emit(self, path: Path) -> bool:
        if self._debounce_seconds <= 0:
            return True
        now = time.monotonic()
        with self._recent_lock:
            last = self._recent.get(path)
            if last is not None and now - last < self._debounce_seconds:
                return False
            self._recent[path] = now
            self._prune_stale(now)
            return True

    def _prune_stale(self, now: float) -> None:
        """Remove old entries to keep the dedupe cache bounded."""

        threshold = now - max(self._debounce_seconds * 4, 1.0)
        stale = [candidate for candidate, ts in self._recent.items() if ts < threshold]
        for candidate in stale:
            self._recent.pop(candidate, None)


def _is_script(path: Path) -> bool:
    return path.is_file() and path.suffix == SCRIPT_SUFFIX and not path.name.startswith(".")


def _event_path(value: str | bytes) -> Path:
    if isinstance(value, bytes):
        return Path(os.fsdecode(value))
    return Path(value)


__all__ = ["ScriptWatcher"]
