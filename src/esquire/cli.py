"""esquire command-line interface."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from types import FrameType
from typing import Annotated, Any, NoReturn

import typer

from . import __version__
from .config import Config, ConfigError, load_config
from .loader import log_load_error
from .logging import configure_logging
from .runtime import Runtime
from .scheduler import TaskQueue
from .watcher import ScriptWatcher

app = typer.Typer(help="Define modules in scripts and resolve them on demand.")
LOGGER = logging.getLogger(__name__)


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config_path: Path | None
    debug: bool = False


@dataclass
class LoadReport:
    """Collects values and load failures observed while a runtime drains."""

    values: dict[str, Any] = field(default_factory=dict)
    failures: list[str] = field(default_factory=list)

    def record_failure(self, name: str) -> None:
        log_load_error(name)
        self.failures.append(name)

    def collector(self, name: str) -> Callable[[Any], None]:
        def _store(value: Any) -> None:
            self.values[name] = value

        return _store


@app.callback()
def _esquire(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to esquire config (env ESQUIRE_CONFIG or ~/.config/esquire/config.yaml).",
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Log resolver progress (required/resolved/waiting messages).",
        ),
    ] = False,
) -> None:
    """Capture global CLI options."""

    resolved = config.expanduser() if config else None
    ctx.obj = CLIState(config_path=resolved, debug=debug)


@app.command()
def run(
    ctx: typer.Context,
    scripts: Annotated[
        list[Path] | None,
        typer.Argument(help="Script files (or names on the script path) to load."),
    ] = None,
    requires: Annotated[
        list[str] | None,
        typer.Option(
            "-r",
            "--require",
            help="Module name to resolve and print (repeatable).",
        ),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Exit with status 1 if a load fails or a module stays unresolved.",
        ),
    ] = False,
) -> None:
    """Load scripts, resolve the requested modules and report what is still waiting."""

    state = _state(ctx)
    config = _load_config(state.config_path)
    configure_logging(config.logging, diagnostics=state.debug or config.debug)
    report = LoadReport()
    runtime = _build_runtime(config, state, report)

    for script in scripts or []:
        runtime.include(script.expanduser())
    runtime.run_until_idle()

    names = list(requires or [])
    for name in names:
        runtime.require([name], report.collector(name))
    runtime.run_until_idle()

    for name in names:
        if name in report.values:
            typer.echo(f"{name} = {report.values[name]!r}")
        else:
            typer.echo(f"{name}: unresolved")
    for failure in report.failures:
        typer.secho(f"Failed to load: {failure}", fg=typer.colors.RED, err=True)

    waiting = runtime.waiting()
    typer.echo(f"Waiting: {', '.join(waiting) if waiting else 'none'}")

    unresolved = [name for name in names if name not in report.values]
    if strict and (waiting or unresolved or report.failures):
        raise typer.Exit(1)


@app.command()
def watch(
    ctx: typer.Context,
    directory: Annotated[Path, typer.Argument(help="Directory to watch for *.py scripts.")],
    requires: Annotated[
        list[str] | None,
        typer.Option(
            "-r",
            "--require",
            help="Module name to print once it resolves (repeatable).",
        ),
    ] = None,
) -> None:
    """Load scripts from a directory as they appear, until interrupted."""

    state = _state(ctx)
    config = _load_config(state.config_path)
    configure_logging(config.logging, diagnostics=state.debug or config.debug)
    report = LoadReport()
    queue = TaskQueue()
    runtime = _build_runtime(config, state, report, scheduler=queue)
    watcher = ScriptWatcher(directory)

    for script in watcher.existing_scripts():
        runtime.include(script)
    watcher.on_new_script(runtime.include)
    for name in requires or []:
        runtime.require([name], _announcer(name))

    stop_event = threading.Event()
    previous = _install_stop_signals(stop_event)
    watcher.start()
    try:
        queue.run_forever(stop_event)
    except KeyboardInterrupt:
        LOGGER.info("Interrupt received; stopping watcher.")
    finally:
        watcher.stop()
        _restore_signals(previous)

    waiting = runtime.waiting()
    typer.echo(f"Waiting: {', '.join(waiting) if waiting else 'none'}")


@app.command()
def version() -> None:
    """Print the installed esquire version."""

    typer.echo(__version__)


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise RuntimeError("CLI state missing from context.")
    return state


def _load_config(path: Path | None) -> Config:
    try:
        return load_config(path)
    except ConfigError as exc:
        _config_failure(exc)


def _config_failure(exc: ConfigError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(2) from exc


def _build_runtime(
    config: Config,
    state: CLIState,
    report: LoadReport,
    *,
    scheduler: TaskQueue | None = None,
) -> Runtime:
    runtime = Runtime.from_config(config, scheduler=scheduler)
    runtime.on_error = report.record_failure
    if state.debug:
        runtime.debug(True)
    return runtime


def _announcer(name: str) -> Callable[[Any], None]:
    def _announce(value: Any) -> None:
        typer.echo(f"{name} = {value!r}")

    return _announce


def _install_stop_signals(stop_event: threading.Event) -> dict[int, Any]:
    def _handle(signum: int, _frame: FrameType | None) -> None:
        LOGGER.info("Signal %s received; stopping.", signum)
        stop_event.set()

    installed: dict[int, Any] = {}
    for sig in _stop_signals():
        try:
            previous = signal.getsignal(sig)
            signal.signal(sig, _handle)
        except ValueError:  # not on the main thread
            continue
        installed[sig] = previous
    return installed


def _restore_signals(installed: dict[int, Any]) -> None:
    for sig, handler in installed.items():
        try:
            signal.signal(sig, handler)
        except ValueError:  # pragma: no cover - not on the main thread
            continue


def _stop_signals() -> Iterable[int]:
    return (signal.SIGTERM, signal.SIGINT)


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
