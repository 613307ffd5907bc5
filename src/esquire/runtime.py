"""Runtime wiring: resolver, task queue and script loader behind one API object."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .loader import ScriptLoader
from .registry import ModuleRegistry
from .resolver import DependencyNames, Resolver
from .scheduler import Scheduler, TaskQueue

if TYPE_CHECKING:
    from .config import Config

LOGGER = logging.getLogger(__name__)

API_MODULE = "esquire"
INCLUDE_MODULE = "include"


class Runtime:
    """Public API of one independent resolver instance.

    The runtime registers itself as the ``esquire`` module and its loader's
    ``include`` as the ``include`` module, so scripts can depend on either.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler | None = None,
        registry: ModuleRegistry | None = None,
        search_paths: Iterable[Path | str] = (),
        debug: bool = False,
        compact: bool = True,
        error_handler: Callable[[str], Any] | None = None,
    ) -> None:
        self.scheduler: Scheduler = scheduler if scheduler is not None else TaskQueue()
        self.resolver = Resolver(registry, self.scheduler, debug=debug, compact=compact)
        self.loader = ScriptLoader(self.scheduler, search_paths, error_handler=error_handler)
        self.loader.script_globals.update(
            define=self.define,
            require=self.require,
            include=self.include,
            esquire=self,
        )
        self.resolver.define_value(API_MODULE, self)
        self.resolver.define_value(INCLUDE_MODULE, self.include)

    @classmethod
    def from_config(cls, config: Config, *, scheduler: Scheduler | None = None) -> Runtime:
        """Build a runtime from configuration and queue its preload scripts."""

        runtime = cls(
            scheduler=scheduler,
            search_paths=config.script_paths,
            debug=config.debug,
            compact=config.compact_pending,
        )
        for location in config.preload:
            runtime.include(location)
        return runtime

    def define(self, name: str, *args: Any) -> None:
        self.resolver.define(name, *args)

    def define_value(self, name: str, value: Any, dependencies: DependencyNames = None) -> None:
        self.resolver.define_value(name, value, dependencies)

    def define_computed(
        self,
        name: str,
        dependencies: DependencyNames,
        finalizer: Callable[..., Any],
    ) -> None:
        self.resolver.define_computed(name, dependencies, finalizer)

    def require(self, dependencies: DependencyNames, callback: Callable[..., Any]) -> None:
        self.resolver.require(dependencies, callback)

    def include(self, location: str | Path, on_success: Callable[[], Any] | None = None) -> None:
        self.loader.include(location, on_success)

    def debug(self, toggle: bool) -> None:
        self.resolver.debug(toggle)

    def waiting(self) -> list[str]:
        return self.resolver.waiting_names()

    @property
    def on_error(self) -> Callable[[str], Any]:
        """Handler called with the location of a script that failed to load."""

        return self.loader.error_handler

    @on_error.setter
    def on_error(self, handler: Callable[[str], Any]) -> None:
        self.loader.error_handler = handler

    def run_until_idle(self, max_rounds: int | None = None) -> int:
        """Drain the task queue: pending loads and follow-up propagation passes."""

        if not isinstance(self.scheduler, TaskQueue):
            raise TypeError("run_until_idle() needs the runtime's own TaskQueue scheduler.")
        return self.scheduler.run_until_idle(max_rounds)

    def status_snapshot(self) -> dict[str, Any]:
        """Return a serialisable summary of resolver state."""

        registry = self.resolver.registry
        resolved = [name for name in registry.names() if registry.get(name).resolved]
        return {
            "modules": len(registry),
            "resolved": resolved,
            "pending_callbacks": self.resolver.pending_count,
            "waiting": self.waiting(),
            "scripts_loaded": [str(path) for path in self.loader.loaded],
            "debug": self.resolver.is_debug,
        }


__all__ = ["API_MODULE", "INCLUDE_MODULE", "Runtime"]
