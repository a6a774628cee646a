"""Tests for CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from plcscript.cli import app

PROGRAM = """\
LET x: Integer = 1 + 2;

DEF main(): Integer DO
    print("hello");
    RETURN x;
END
"""


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each command from an empty directory (no plcscript.toml)."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestTokensCommand:
    def test_lists_tokens(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "prog.plc", "LET x = 5;")
        result = cli_runner.invoke(app, ["tokens", str(source)])
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "IDENTIFIER 0 'LET'",
            "IDENTIFIER 4 'x'",
            "OPERATOR 6 '='",
            "INTEGER 8 '5'",
            "OPERATOR 9 ';'",
        ]

    def test_lex_error(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "bad.plc", 'print("oops);')
        result = cli_runner.invoke(app, ["tokens", str(source)])
        assert result.exit_code == 1
        assert "LexError" in result.output


class TestCheckCommand:
    def test_valid_program(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "prog.plc", PROGRAM)
        result = cli_runner.invoke(app, ["check", str(source)])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_type_error(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "bad.plc", 'DEF main(): Integer DO RETURN "no"; END')
        result = cli_runner.invoke(app, ["check", str(source)])
        assert result.exit_code == 1
        assert "StaticTypeError" in result.output

    def test_parse_error_shows_location(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "bad.plc", "LET x: Integer = 1 + 2 + 3;")
        result = cli_runner.invoke(app, ["check", str(source)])
        assert result.exit_code == 1
        assert "ParseError" in result.output
        assert ":1:24" in result.output

    def test_missing_file(self, cli_runner: CliRunner, workdir: Path) -> None:
        result = cli_runner.invoke(app, ["check", str(workdir / "missing.plc")])
        assert result.exit_code != 0


class TestRunCommand:
    def test_exit_code_is_main_result(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "prog.plc", PROGRAM)
        result = cli_runner.invoke(app, ["run", str(source)])
        assert result.exit_code == 3
        assert "hello" in result.output

    def test_runtime_error(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "bad.plc", "DEF main(): Integer DO RETURN 1 / 0; END")
        result = cli_runner.invoke(app, ["run", str(source)])
        assert result.exit_code == 1
        assert "Division by zero" in result.output

    @pytest.mark.parametrize(
        "text",
        [
            'DEF main(): Integer DO print("hi"); END',
            "LET x: Integer; DEF main(): Integer DO RETURN x; END",
        ],
        ids=["no-return", "unset-field"],
    )
    def test_main_without_integer_result(
        self, cli_runner: CliRunner, workdir: Path, text: str
    ) -> None:
        source = write(workdir, "nil.plc", text)
        result = cli_runner.invoke(app, ["run", str(source)])
        assert result.exit_code == 1
        assert "PlcRuntimeError" in result.output
        assert "must return an Integer" in result.output


class TestEmitCommand:
    def test_writes_to_stdout(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "prog.plc", PROGRAM)
        result = cli_runner.invoke(app, ["emit", str(source)])
        assert result.exit_code == 0
        assert result.output.startswith("public class Main {")
        assert 'System.out.println("hello");' in result.output

    def test_writes_to_file(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "prog.plc", PROGRAM)
        target = workdir / "Main.java"
        result = cli_runner.invoke(app, ["emit", str(source), "--output", str(target)])
        assert result.exit_code == 0
        assert target.read_text(encoding="utf-8").startswith("public class Main {")

    def test_config_file_sets_class_name(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "prog.plc", PROGRAM)
        config = write(workdir, "custom.toml", '[emit]\nclass_name = "Program"\nindent = 2\n')
        result = cli_runner.invoke(app, ["--config", str(config), "emit", str(source)])
        assert result.exit_code == 0
        assert result.output.startswith("public class Program {")
        assert "\n  int x = 1 + 2;\n" in result.output

    def test_discovers_config_in_working_directory(
        self, cli_runner: CliRunner, workdir: Path
    ) -> None:
        source = write(workdir, "prog.plc", PROGRAM)
        write(workdir, "plcscript.toml", '[emit]\nclass_name = "Discovered"\n')
        result = cli_runner.invoke(app, ["emit", str(source)])
        assert result.exit_code == 0
        assert "new Discovered().main()" in result.output


class TestInvalidConfig:
    @pytest.mark.parametrize(
        "text",
        ["[emit\nclass_name = 1\n", '[emit]\nindent = "wide"\n'],
        ids=["malformed-toml", "non-integer-indent"],
    )
    def test_explicit_config(self, cli_runner: CliRunner, workdir: Path, text: str) -> None:
        source = write(workdir, "prog.plc", PROGRAM)
        config = write(workdir, "custom.toml", text)
        result = cli_runner.invoke(app, ["--config", str(config), "emit", str(source)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not isinstance(result.exception, ValueError)

    def test_discovered_config(self, cli_runner: CliRunner, workdir: Path) -> None:
        source = write(workdir, "prog.plc", PROGRAM)
        write(workdir, "plcscript.toml", "[emit]\nindent = 2.5\n")
        result = cli_runner.invoke(app, ["check", str(source)])
        assert result.exit_code == 1
        assert "indent must be a non-negative integer" in result.output


class TestVersion:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "plcscript" in result.output
