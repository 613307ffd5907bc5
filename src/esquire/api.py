"""Process-wide default runtime and the module-level convenience functions."""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .resolver import DependencyNames
from .runtime import Runtime

_default_runtime: Runtime | None = None
_lock = threading.Lock()


def default_runtime() -> Runtime:
    """Return the shared runtime, creating it on first use."""

    global _default_runtime
    with _lock:
        if _default_runtime is None:
            _default_runtime = Runtime()
        return _default_runtime


def reset_default_runtime(runtime: Runtime | None = None) -> Runtime:
    """Replace the shared runtime (a fresh one unless ``runtime`` is given)."""

    global _default_runtime
    with _lock:
        _default_runtime = runtime if runtime is not None else Runtime()
        return _default_runtime


def define(name: str, *args: Any) -> None:
    default_runtime().define(name, *args)


def define_value(name: str, value: Any, dependencies: DependencyNames = None) -> None:
    default_runtime().define_value(name, value, dependencies)


def define_computed(
    name: str,
    dependencies: DependencyNames,
    finalizer: Callable[..., Any],
) -> None:
    default_runtime().define_computed(name, dependencies, finalizer)


def require(dependencies: DependencyNames, callback: Callable[..., Any]) -> None:
    default_runtime().require(dependencies, callback)


def include(location: str | Path, on_success: Callable[[], Any] | None = None) -> None:
    default_runtime().include(location, on_success)


def debug(toggle: bool) -> None:
    default_runtime().debug(toggle)


def waiting() -> list[str]:
    return default_runtime().waiting()


def run_until_idle(max_rounds: int | None = None) -> int:
    """Drain the default runtime's queue: pending includes and follow-up passes."""

    return default_runtime().run_until_idle(max_rounds)


__all__ = [
    "debug",
    "default_runtime",
    "define",
    "define_computed",
    "define_value",
    "include",
    "require",
    "reset_default_runtime",
    "run_until_idle",
    "waiting",
]
