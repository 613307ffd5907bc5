"""esquire package initialisation."""

from importlib import metadata

from .api import (
    debug,
    default_runtime,
    define,
    define_computed,
    define_value,
    include,
    require,
    reset_default_runtime,
    run_until_idle,
    waiting,
)
from .registry import ModuleRegistry
from .resolver import Resolver
from .runtime import Runtime
from .scheduler import TaskQueue


def _discover_version() -> str:
    """Return the installed package version, falling back to dev marker."""
    try:
        return metadata.version("esquire")
    except metadata.PackageNotFoundError:  # pragma: no cover - occurs in editable installs
        return "0.0.0"


__all__ = [
    "ModuleRegistry",
    "Resolver",
    "Runtime",
    "TaskQueue",
    "__version__",
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
__version__ = _discover_version()
