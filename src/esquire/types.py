"""Core data structures shared by the registry and the resolver."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class ModuleRecord:
    """A named value, optionally produced from other modules."""

    name: str
    value: Any = None
    dependencies: tuple[str, ...] = ()
    finalizer: Callable[..., Any] | None = None
    resolved: bool = False

    def resolve(self, *values: Any) -> None:
        """Fix the module value from its dependency values.

        Only the first call has an effect; later calls leave the record untouched.
        """

        if self.resolved:
            return
        if self.finalizer is not None:
            self.value = self.finalizer(*values)
        self.resolved = True


@dataclass(eq=False)
class PendingCallback:
    """Deferred work waiting on a set of module resolutions."""

    dependencies: tuple[str, ...]
    action: Callable[..., Any]
    waiting: bool = True


def normalize_names(names: str | Sequence[str] | None) -> tuple[str, ...]:
    """Return dependency names as a tuple, wrapping a lone name."""

    if names is None:
        return ()
    if isinstance(names, str):
        return (names,)
    return tuple(names)


__all__ = ["ModuleRecord", "PendingCallback", "normalize_names"]
