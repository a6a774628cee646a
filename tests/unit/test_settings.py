"""Tests for plcscript settings loading.

Covers:
- Defaults when no config file exists
- plcscript.toml discovery and explicit paths
- Environment override of the log level
- Rejection of malformed files and mistyped values
- Log level normalization
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import pytest

from plcscript.core.settings import (
    CONFIG_FILENAME,
    LOG_LEVEL_VAR,
    EmitConfig,
    load_settings,
    normalize_log_level,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LOG_LEVEL_VAR, raising=False)


def write_config(directory: Path, text: str) -> Path:
    path = directory / CONFIG_FILENAME
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_no_config_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        settings = load_settings()
        assert settings.path is None
        assert settings.logging.level == "WARNING"
        assert settings.emit == EmitConfig(class_name="Main", indent=4)


class TestConfigFile:
    def test_discovered_in_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = write_config(tmp_path, '[emit]\nclass_name = "Program"\n')
        monkeypatch.chdir(tmp_path)
        settings = load_settings()
        assert settings.path == path
        assert settings.emit.class_name == "Program"
        assert settings.emit.indent == 4

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path, '[logging]\nlevel = "debug"\n\n[emit]\nclass_name = "App"\nindent = 2\n'
        )
        settings = load_settings(path)
        assert settings.logging.level == "DEBUG"
        assert settings.emit == EmitConfig(class_name="App", indent=2)

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.toml")

    def test_malformed_toml(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "[emit\nindent = 2\n")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_settings(path)


class TestInvalidValues:
    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ('[emit]\nindent = "wide"\n', "indent must be a non-negative integer"),
            ("[emit]\nindent = 2.5\n", "indent must be a non-negative integer"),
            ("[emit]\nindent = true\n", "indent must be a non-negative integer"),
            ("[emit]\nindent = -1\n", "indent must be a non-negative integer"),
            ('[emit]\nclass_name = "my class"\n', "class_name must be a Java identifier"),
            ("[emit]\nclass_name = 7\n", "class_name must be a Java identifier"),
            ("[logging]\nlevel = 10\n", "level must be a string"),
            ("emit = 3\n", r"\[emit\] must be a table"),
        ],
        ids=[
            "indent-string",
            "indent-float",
            "indent-bool",
            "indent-negative",
            "class-name-space",
            "class-name-int",
            "level-int",
            "emit-not-table",
        ],
    )
    def test_rejected(self, tmp_path: Path, text: str, message: str) -> None:
        path = write_config(tmp_path, text)
        with pytest.raises(ValueError, match=message):
            load_settings(path)

    def test_zero_indent_is_allowed(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "[emit]\nindent = 0\n")
        assert load_settings(path).emit.indent == 0


class TestEnvironment:
    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path, '[logging]\nlevel = "ERROR"\n')
        monkeypatch.setenv(LOG_LEVEL_VAR, "info")
        assert load_settings(path).logging.level == "INFO"

    def test_blank_env_is_ignored(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path, '[logging]\nlevel = "ERROR"\n')
        monkeypatch.setenv(LOG_LEVEL_VAR, "  ")
        assert load_settings(path).logging.level == "ERROR"


class TestNormalizeLogLevel:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("debug", "DEBUG"), (" Error ", "ERROR"), ("", "WARNING"), (None, "WARNING")],
    )
    def test_valid(self, value: str | None, expected: str) -> None:
        assert normalize_log_level(value) == expected

    def test_unknown_level_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="plcscript.core.settings"):
            assert normalize_log_level("verbose") == "WARNING"
        assert "Unknown log level 'verbose'" in caplog.text
