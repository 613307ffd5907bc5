from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from esquire.config import CONFIG_ENV_VAR, Config, ConfigError, load_config


def _write_config(tmp_path: Path, content: str) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(textwrap.dedent(content), encoding="utf-8")
    return config_path


def test_load_config_success(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        f"""
        debug: true
        compact_pending: false
        script_paths:
          - ~/custom/esquire
          - {tmp_path}/scripts
        preload:
          - bootstrap
          - vendor/helpers.py
        logging:
          level: DEBUG
          file: {tmp_path}/logs/esquire.log
        """,
    )

    config = load_config(config_path)

    assert config.debug is True
    assert config.compact_pending is False
    assert config.script_paths == [
        Path("~/custom/esquire").expanduser(),
        tmp_path / "scripts",
    ]
    assert config.preload == ["bootstrap", "vendor/helpers.py"]
    assert config.logging.level == "debug"
    assert config.logging.file == tmp_path / "logs" / "esquire.log"


def test_load_config_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        """
        preload:
          - main
        """,
    )

    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    config = load_config()

    assert config.preload == ["main"]
    assert config.debug is False
    assert config.compact_pending is True
    assert config.logging.file is None


def test_missing_default_config_uses_defaults(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    assert load_config() == Config()


def test_missing_explicit_config_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.yaml")


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "")

    assert load_config(config_path) == Config()


@pytest.mark.parametrize(
    "bad_content, expected_message",
    [
        ("- just\n- a list\n", "root must be a mapping"),
        ("debug: yes please\n", "debug must be true or false"),
        ("compact_pending: 1\n", "compact_pending must be true or false"),
        ("script_paths: ~/one\n", "script_paths must be a list"),
        ("script_paths:\n  - 3\n", r"script_paths\[1\] must be a string path"),
        ("preload: main\n", "preload must be a list"),
        ("preload:\n  - ''\n", r"preload\[1\] must be a non-empty string"),
        ("logging: verbose\n", "logging must be a mapping"),
        ("logging:\n  file: 5\n", "logging.file must be a string path"),
        ("logging:\n  level: verbose\n", "Unknown log level: verbose"),
        ("debug: [unclosed\n", "Invalid YAML"),
    ],
)
def test_invalid_configs_raise(tmp_path: Path, bad_content: str, expected_message: str) -> None:
    config_path = _write_config(tmp_path, bad_content)

    with pytest.raises(ConfigError, match=expected_message):
        load_config(config_path)
