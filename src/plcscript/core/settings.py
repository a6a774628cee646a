"""
Configuration for the plcscript toolchain.

Settings come from an optional ``plcscript.toml`` file and can be
overridden by environment variables:

    [logging]
    level = "INFO"

    [emit]
    class_name = "Main"
    indent = 4

Environment variables:
    PLCSCRIPT_LOG_LEVEL: overrides ``[logging] level``
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "plcscript.toml"

LOG_LEVEL_VAR = "PLCSCRIPT_LOG_LEVEL"

_DEFAULT_LOG_LEVEL = "WARNING"
_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EmitConfig:
    """Java emitter configuration."""

    class_name: str = "Main"
    indent: int = 4


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = _DEFAULT_LOG_LEVEL


@dataclass
class Settings:
    """Top-level plcscript settings."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    emit: EmitConfig = field(default_factory=EmitConfig)
    path: Path | None = None


def normalize_log_level(value: str | None) -> str:
    """Return a valid logging level name, defaulting to WARNING.

    Examples:
        >>> normalize_log_level("debug")
        'DEBUG'
        >>> normalize_log_level("")
        'WARNING'
    """
    level = (value or "").upper().strip()
    if not level:
        return _DEFAULT_LOG_LEVEL
    if level not in _VALID_LOG_LEVELS:
        logger.warning(
            "Unknown log level '%s'. Valid values: %s. Defaulting to %s.",
            value,
            ", ".join(_VALID_LOG_LEVELS),
            _DEFAULT_LOG_LEVEL,
        )
        return _DEFAULT_LOG_LEVEL
    return level


def _table(data: dict, name: str) -> dict:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ValueError(f"[{name}] must be a table, got {value!r}.")
    return value


def _level(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError(f"[logging] level must be a string, got {value!r}.")
    return normalize_log_level(value)


def _class_name(value: object) -> str:
    if not isinstance(value, str) or not value.isidentifier():
        raise ValueError(f"[emit] class_name must be a Java identifier, got {value!r}.")
    return value


def _indent(value: object) -> int:
    # bool is an int subclass; TOML true is not an indent.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"[emit] indent must be a non-negative integer, got {value!r}.")
    return value


def load_settings(path: Path | None = None) -> Settings:
    """
    Load settings from a TOML file and the environment.

    Args:
        path: Explicit config file. When omitted, ``plcscript.toml`` in the
            current directory is used if it exists.

    Returns:
        Settings with file values applied, then environment overrides.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ValueError: If the file is not valid TOML (``tomllib.TOMLDecodeError``)
            or a value has the wrong type.
    """
    if path is None:
        candidate = Path.cwd() / CONFIG_FILENAME
        path = candidate if candidate.exists() else None

    data: dict = {}
    if path is not None:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        logger.debug("Loaded settings from %s", path)

    logging_data = _table(data, "logging")
    emit_data = _table(data, "emit")

    settings = Settings(
        logging=LoggingConfig(
            level=_level(logging_data.get("level", _DEFAULT_LOG_LEVEL)),
        ),
        emit=EmitConfig(
            class_name=_class_name(emit_data.get("class_name", "Main")),
            indent=_indent(emit_data.get("indent", 4)),
        ),
        path=path,
    )

    env_level = os.environ.get(LOG_LEVEL_VAR, "")
    if env_level.strip():
        settings.logging.level = normalize_log_level(env_level)

    return settings
