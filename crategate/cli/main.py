"""crategate CLI - Main entrypoint.

Installed twice: as ``crategate`` and as ``cargo-validate``. Cargo runs
``cargo-validate validate <args>`` for ``cargo validate <args>``, so both
names expose the same ``validate`` command.
"""

from __future__ import annotations

import typer
from rich.console import Console

from crategate import __version__
from crategate.cli.commands import validate_cmd
from crategate.kernel.exceptions import ExitCode
from crategate.kernel.logging import configure_logging

app = typer.Typer(
    name="crategate",
    help="Cargo publish with validation and confirmation.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

app.command(
    "validate",
    help="Validate the package, confirm, then run cargo publish",
    context_settings={"allow_interspersed_args": False},
)(validate_cmd.validate)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold blue]crategate[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only log errors"),
    verbose: bool = typer.Option(False, "-V", "--verbose", help="Enable debug logging"),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level: debug|info|warning|error"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """crategate - pre-publish validation gate for cargo publish.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    """
    if ctx.obj is None:
        ctx.obj = {}

    # Explicit flags win over the configuration file
    effective_level = log_level.upper() if log_level else None
    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"
    if effective_level == "WARN":
        effective_level = "WARNING"
    if effective_level and effective_level not in _LOG_LEVELS:
        console.print(
            f"[red]Invalid log level '{log_level}'.[/red] Choose from: debug, info, warning, error"
        )
        raise typer.Exit(ExitCode.INPUT_ERROR)

    ctx.obj.update({"quiet": quiet, "verbose": verbose, "log_level": effective_level})

    if effective_level:
        configure_logging(level=effective_level)  # type: ignore[arg-type]


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
