"""
plcscript command-line interface.

Commands:
  tokens FILE            print one token per line
  check FILE             analyze and report OK or the first error
  run FILE               evaluate; the exit code is main's return value
  emit FILE [--output]   write the program as Java source
"""

from __future__ import annotations

import logging
import platform
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from plcscript import __version__
from plcscript.core.errors import PlcError
from plcscript.core.pipeline import check_text, emit_text, run_text, tokenize_text
from plcscript.core.settings import Settings, load_settings, normalize_log_level

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

app = typer.Typer(
    help="plcscript – tokenize, check, run and compile plcscript programs",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"plcscript {__version__}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        help="Path to plcscript.toml (default: ./plcscript.toml if present)",
        exists=True,
        dir_okay=False,
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
) -> None:
    """plcscript CLI main callback for global options."""
    try:
        settings = load_settings(config)
    except ValueError as e:
        # tomllib.TOMLDecodeError is a ValueError.
        err_console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}", soft_wrap=True)
        raise typer.Exit(code=1) from e
    if log_level:
        settings.logging.level = normalize_log_level(log_level)
    logging.basicConfig(level=settings.logging.level, format=LOG_FORMAT)
    logger.debug("Using settings from %s", settings.path or "defaults")
    ctx.obj = settings


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _fail(error: PlcError) -> typer.Exit:
    """Print ``error`` to stderr and return the exit to raise."""
    err_console.print(
        f"[red]{type(error).__name__}:[/red] {escape(error.message)}", soft_wrap=True
    )
    if error.context is not None:
        err_console.print(escape(error.context.format()), soft_wrap=True, highlight=False)
    return typer.Exit(code=1)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else load_settings()


@app.command(name="tokens")
def tokens_command(
    file: Path = typer.Argument(  # noqa: B008
        ..., help="plcscript source file", exists=True, dir_okay=False, readable=True
    ),
) -> None:
    """Print the tokens of FILE, one per line."""
    try:
        tokens = tokenize_text(_read(file), file)
    except PlcError as e:
        raise _fail(e) from e
    for token in tokens:
        typer.echo(f"{token.kind.upper()} {token.pos} {token.value!r}")


@app.command(name="check")
def check_command(
    file: Path = typer.Argument(  # noqa: B008
        ..., help="plcscript source file", exists=True, dir_okay=False, readable=True
    ),
) -> None:
    """Parse and analyze FILE without running it."""
    try:
        check_text(_read(file), file=file)
    except PlcError as e:
        raise _fail(e) from e
    console.print("[green]OK[/green]")


@app.command(name="run")
def run_command(
    file: Path = typer.Argument(  # noqa: B008
        ..., help="plcscript source file", exists=True, dir_okay=False, readable=True
    ),
) -> None:
    """Run FILE; the exit code is the value returned by main."""
    try:
        result = run_text(_read(file), file=file)
    except PlcError as e:
        raise _fail(e) from e
    sys.stdout.flush()
    raise typer.Exit(code=int(result.value))


@app.command(name="emit")
def emit_command(
    ctx: typer.Context,
    file: Path = typer.Argument(  # noqa: B008
        ..., help="plcscript source file", exists=True, dir_okay=False, readable=True
    ),
    output: Path | None = typer.Option(  # noqa: B008
        None,
        "--output",
        "-o",
        help="Write the Java source here instead of standard output",
    ),
) -> None:
    """Compile FILE to Java source."""
    settings = _settings(ctx)
    try:
        java = emit_text(_read(file), settings.emit, file=file)
    except PlcError as e:
        raise _fail(e) from e
    if output is None:
        typer.echo(java, nl=False)
        return
    output.write_text(java, encoding="utf-8")
    console.print(f"Wrote {escape(str(output))}")


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
