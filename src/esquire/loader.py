"""Asynchronous execution of script files that declare modules."""

from __future__ import annotations

import importlib.util
import itertools
import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from types import ModuleType
from typing import Any

from .scheduler import Scheduler

LOGGER = logging.getLogger(__name__)
_MODULE_PREFIX = "esquire.scripts"
_SCRIPT_SUFFIX = ".py"


def log_load_error(name: str) -> None:
    """Default error handler: report the failing location and carry on."""

    LOGGER.error("Error loading module: %s", name)


class ScriptLoader:
    """Run script files on the scheduler and report the outcome.

    Scripts execute as fresh modules whose globals are seeded from
    ``script_globals`` (the runtime puts ``define``, ``require``, ``include``
    and ``esquire`` there).
    """

    def __init__(
        self,
        scheduler: Scheduler,
        search_paths: Iterable[Path | str] = (),
        *,
        error_handler: Callable[[str], Any] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._paths = [Path(path).expanduser() for path in search_paths]
        self._loaded: list[Path] = []
        self._counter = itertools.count(1)
        self.script_globals: dict[str, Any] = {}
        self.error_handler: Callable[[str], Any] = error_handler or log_load_error

    def include(
        self,
        location: str | Path,
        on_success: Callable[[], Any] | None = None,
    ) -> None:
        """Load ``location`` on a later scheduler turn, then call ``on_success``."""

        self._scheduler.call_soon(self._load, location, on_success)

    def locate(self, location: str | Path) -> Path | None:
        """Return the script file for ``location``, checking search paths for bare names."""

        candidate = Path(location).expanduser()
        if candidate.is_file():
            return candidate.resolve()
        if candidate.is_absolute():
            return None
        names = [candidate]
        if candidate.suffix != _SCRIPT_SUFFIX:
            names.append(candidate.with_name(candidate.name + _SCRIPT_SUFFIX))
        for search_path in self._paths:
            for name in names:
                target = search_path / name
                if target.is_file():
                    return target.resolve()
        return None

    @property
    def loaded(self) -> list[Path]:
        """Return scripts loaded successfully, in load order."""

        return list(self._loaded)

    def _load(self, location: str | Path, on_success: Callable[[], Any] | None) -> None:
        path = self.locate(location)
        if path is None:
            LOGGER.debug("No script found for '%s' (search paths: %s)", location, self._paths)
            self.error_handler(str(location))
            return
        try:
            self._execute(path)
        except Exception:
            LOGGER.exception("Script %s raised while loading", path)
            self.error_handler(str(location))
            return
        self._loaded.append(path)
        LOGGER.debug("Loaded script '%s' from %s", location, path)
        if on_success is not None:
            on_success()

    def _execute(self, path: Path) -> ModuleType:
        module_name = f"{_MODULE_PREFIX}.{_identifier(path.stem)}_{next(self._counter)}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load script from {path}")

        module = importlib.util.module_from_spec(spec)
        module.__dict__.update(self.script_globals)
        sys.modules[spec.name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(spec.name, None)
            raise
        return module


def _identifier(stem: str) -> str:
    cleaned = "".join(char if char.isalnum() else "_" for char in stem)
    return cleaned or "script"


__all__ = ["ScriptLoader", "log_load_error"]
