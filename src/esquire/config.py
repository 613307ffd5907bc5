"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ESQUIRE_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/esquire/config.yaml")
DEFAULT_LOG_LEVEL = "info"
LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    file: Path | None = None


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    debug: bool = False
    compact_pending: bool = True
    script_paths: list[Path] = field(default_factory=list)
    preload: list[str] = field(default_factory=list)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML.

    An explicitly given file (argument or ``$ESQUIRE_CONFIG``) must exist;
    a missing default file yields the default configuration.
    """

    config_path, explicit = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        LOGGER.debug("No config file at %s; using defaults.", config_path)
        return Config()

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw)


def _resolve_config_path(explicit: Path | str | None) -> tuple[Path, bool]:
    if explicit:
        return Path(explicit).expanduser(), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser(), True
    return DEFAULT_CONFIG_PATH.expanduser(), False


def _parse_config(raw: dict[str, Any]) -> Config:
    return Config(
        debug=_parse_bool(raw.get("debug"), "debug", default=False),
        compact_pending=_parse_bool(raw.get("compact_pending"), "compact_pending", default=True),
        script_paths=_parse_script_paths(raw.get("script_paths")),
        preload=_parse_preload(raw.get("preload")),
        logging=_parse_logging(raw.get("logging")),
    )


def _parse_bool(value: Any, field_name: str, *, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"{field_name} must be true or false.")
    return value


def _parse_script_paths(value: Any) -> list[Path]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("script_paths must be a list.")

    paths: list[Path] = []
    for idx, entry in enumerate(value, start=1):
        if isinstance(entry, Path):
            path = entry
        elif isinstance(entry, str):
            path = Path(entry)
        else:
            raise ConfigError(f"script_paths[{idx}] must be a string path.")
        paths.append(path.expanduser())
    return paths


def _parse_preload(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("preload must be a list.")

    scripts: list[str] = []
    for idx, entry in enumerate(value, start=1):
        if not isinstance(entry, str) or not entry.strip():
            raise ConfigError(f"preload[{idx}] must be a non-empty string.")
        scripts.append(entry.strip())
    return scripts


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = _parse_log_level(value.get("level", DEFAULT_LOG_LEVEL))
    raw_file = value.get("file")
    if raw_file is not None and not isinstance(raw_file, str):
        raise ConfigError("logging.file must be a string path.")
    log_file = Path(raw_file).expanduser() if raw_file else None
    return LoggingConfig(level=level, file=log_file)


def _parse_log_level(value: Any) -> str:
    normalized = str(value).strip().lower()
    if normalized not in LOG_LEVELS:
        raise ConfigError(
            f"Unknown log level: {value} (expected one of {', '.join(LOG_LEVELS)})."
        )
    return normalized


__all__ = [
    "CONFIG_ENV_VAR",
    "LOG_LEVELS",
    "Config",
    "ConfigError",
    "LoggingConfig",
    "load_config",
]
