"""Dependency resolution: pending callbacks and the propagation loop."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from .registry import ModuleRegistry
from .scheduler import Scheduler, TaskQueue
from .types import ModuleRecord, PendingCallback, normalize_names

LOGGER = logging.getLogger(__name__)

DependencyNames = str | Sequence[str] | None


class Resolver:
    """Fire callbacks once the modules they name are resolved.

    Every ``define``/``require`` call runs a propagation pass. A pass that
    fires anything submits one follow-up pass to the scheduler so callbacks
    unblocked as a side effect get their own scan. Passes are not re-entrant:
    a trigger arriving mid-scan is absorbed by the running scan, which also
    visits entries appended while it runs.

    Not thread-safe; drive it from the thread that drains the scheduler.
    """

    def __init__(
        self,
        registry: ModuleRegistry | None = None,
        scheduler: Scheduler | None = None,
        *,
        debug: bool = False,
        compact: bool = True,
    ) -> None:
        self._registry = registry if registry is not None else ModuleRegistry()
        self._scheduler = scheduler if scheduler is not None else TaskQueue()
        self._pending: list[PendingCallback] = []
        self._debug = debug
        self._compact = compact
        self._scanning = False
        self._rescan_scheduled = False

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def is_debug(self) -> bool:
        return self._debug

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def debug(self, toggle: bool) -> None:
        """Enable or disable progress messages."""

        self._debug = bool(toggle)

    def define_value(
        self,
        name: str,
        value: Any,
        dependencies: DependencyNames = None,
    ) -> None:
        """Register ``value`` under ``name``.

        Without dependencies the module resolves immediately. Otherwise it
        resolves to the same ``value`` once all dependencies are resolved.
        """

        record = ModuleRecord(name=name, value=value, dependencies=normalize_names(dependencies))
        self._register(record)

    def define_computed(
        self,
        name: str,
        dependencies: DependencyNames,
        finalizer: Callable[..., Any],
    ) -> None:
        """Register a module whose value is ``finalizer(*dependency_values)``."""

        if not callable(finalizer):
            raise TypeError(f"Finalizer for module '{name}' must be callable.")
        record = ModuleRecord(
            name=name,
            dependencies=normalize_names(dependencies),
            finalizer=finalizer,
        )
        self._register(record)

    def define(self, name: str, *args: Any) -> None:
        """Register a module using the short ``define`` forms.

        ``define(name)`` marks an event: ``name`` resolves to ``None``.
        ``define(name, value)`` stores ``value`` as is, callables included.
        ``define(name, deps, definition)`` computes the value from the
        dependencies when ``definition`` is callable, otherwise stores
        ``definition`` once the dependencies resolve.
        """

        if len(args) <= 1:
            self.define_value(name, args[0] if args else None)
            return
        if len(args) == 2:
            dependencies, definition = args
            if callable(definition):
                self.define_computed(name, dependencies, definition)
            else:
                self.define_value(name, definition, dependencies)
            return
        raise TypeError(
            f"define() takes a name plus at most 2 arguments ({len(args)} given)."
        )

    def require(self, dependencies: DependencyNames, callback: Callable[..., Any]) -> None:
        """Call ``callback`` with the dependency values once they all resolve."""

        names = normalize_names(dependencies)
        self._log("required: %s", ",".join(names))
        self._pending.append(PendingCallback(dependencies=names, action=callback))
        self.tick()

    def waiting_names(self) -> list[str]:
        """Return names blocking at least one waiting callback, in first-seen order."""

        blocked: dict[str, None] = {}
        for entry in self._pending:
            if not entry.waiting:
                continue
            for name in entry.dependencies:
                record = self._registry.get(name)
                if record is None or not record.resolved:
                    blocked.setdefault(name, None)
        return list(blocked)

    def tick(self) -> int:
        """Run one propagation pass and return how many callbacks fired."""

        if self._scanning:
            return 0
        self._scanning = True
        fired = 0
        try:
            index = 0
            while index < len(self._pending):
                entry = self._pending[index]
                index += 1
                if not entry.waiting:
                    continue
                values = self._registry.is_satisfied(entry.dependencies)
                if values is None:
                    continue
                self._log("resolved: %s", ",".join(entry.dependencies))
                entry.waiting = False
                fired += 1
                entry.action(*values)
        finally:
            self._scanning = False
            if self._compact:
                self._pending = [entry for entry in self._pending if entry.waiting]
            if fired:
                self._schedule_rescan()
        if not fired and self._debug:
            self._log("waiting: %s", ",".join(self.waiting_names()))
        return fired

    def _register(self, record: ModuleRecord) -> None:
        previous = self._registry.put(record)
        if previous is not None:
            self._log(
                "redefined: %s (previous %s)",
                record.name,
                "resolved" if previous.resolved else "unresolved",
            )
        if record.dependencies:
            # Bound to this record, so a replaced definition never finalizes its successor.
            self._pending.append(
                PendingCallback(dependencies=record.dependencies, action=record.resolve)
            )
        else:
            record.resolve()
        self.tick()

    def _schedule_rescan(self) -> None:
        if self._rescan_scheduled:
            return
        self._rescan_scheduled = True
        self._scheduler.call_soon(self._scheduled_tick)

    def _scheduled_tick(self) -> None:
        self._rescan_scheduled = False
        self.tick()

    def _log(self, message: str, *args: Any) -> None:
        if self._debug:
            LOGGER.info(message, *args)


__all__ = ["Resolver"]
