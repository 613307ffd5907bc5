from __future__ import annotations

from pathlib import Path

from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileMovedEvent

from esquire.watcher import ScriptWatcher, _ScriptEventHandler


class FakeObserver:
    def __init__(self) -> None:
        self.scheduled: list[tuple[object, str, bool]] = []
        self.started = False
        self.stopped = False

    def schedule(self, handler, path: str, recursive: bool = False) -> None:
        self.scheduled.append((handler, path, recursive))

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        return None


def test_handler_forwards_only_python_scripts(tmp_path):
    seen: list[Path] = []
    handler = _ScriptEventHandler(seen.append, debounce_seconds=0)

    handler.on_created(FileCreatedEvent(str(tmp_path / "alpha.py")))
    handler.on_created(FileCreatedEvent(str(tmp_path / "notes.txt")))
    handler.on_created(FileCreatedEvent(str(tmp_path / ".hidden.py")))
    handler.on_created(DirCreatedEvent(str(tmp_path / "package.py")))
    handler.on_moved(FileMovedEvent(str(tmp_path / "beta.part"), str(tmp_path / "beta.py")))

    assert seen == [(tmp_path / "alpha.py").resolve(), (tmp_path / "beta.py").resolve()]


def test_handler_debounces_duplicate_events(tmp_path):
    seen: list[Path] = []
    handler = _ScriptEventHandler(seen.append, debounce_seconds=60)
    event = FileCreatedEvent(str(tmp_path / "alpha.py"))

    handler.on_created(event)
    handler.on_created(event)

    assert seen == [(tmp_path / "alpha.py").resolve()]


def test_existing_scripts_are_sorted(tmp_path):
    for name in ("zeta.py", "alpha.py", "readme.md", ".hidden.py"):
        (tmp_path / name).write_text("", encoding="utf-8")

    watcher = ScriptWatcher(tmp_path)

    assert [path.name for path in watcher.existing_scripts()] == ["alpha.py", "zeta.py"]
    assert ScriptWatcher(tmp_path / "missing").existing_scripts() == []


def test_start_and_stop_manage_the_observer(tmp_path):
    observer = FakeObserver()
    target = tmp_path / "incoming"
    watcher = ScriptWatcher(target, observer_factory=lambda: observer)

    watcher.start()
    watcher.start()

    assert target.is_dir()
    assert observer.started
    assert len(observer.scheduled) == 1
    assert observer.scheduled[0][1:] == (str(target), False)
    assert watcher.is_running

    watcher.stop()

    assert observer.stopped
    assert not watcher.is_running
