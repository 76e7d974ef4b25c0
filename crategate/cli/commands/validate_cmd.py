"""Validate-then-publish command for the crategate CLI."""

from __future__ import annotations

import asyncio
import json
import os
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.markup import escape

from crategate.cli.confirmation import ConfirmationGate, GateDecision
from crategate.drivers.publish.publish_forwarder import PublishForwarder, target_registry
from crategate.kernel.config import CrateGateConfig, load_config
from crategate.kernel.domain.models import RepoStatusKind
from crategate.kernel.exceptions import CrateGateError, ExitCode
from crategate.kernel.logging import configure_logging, get_logger
from crategate.kernel.validation.pipeline import ValidationOutcome, ValidationPipeline

console = Console()
logger = get_logger(__name__)

_OUTPUT_FORMATS = ("text", "json", "yaml")


def validate(
    ctx: typer.Context,
    manifest_path: Annotated[
        Path | None,
        typer.Option(
            "--manifest-path",
            "-m",
            help="Path to Cargo.toml or the directory containing it",
        ),
    ] = None,
    username: Annotated[
        str | None,
        typer.Option("--username", "-u", help="Registry login used for the ownership check"),
    ] = None,
    registry_url: Annotated[
        str | None,
        typer.Option("--registry-url", help="Registry base URL (default: https://crates.io)"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a crategate.toml configuration file"),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Also print the report as json or yaml before the prompt (text, json, yaml)",
        ),
    ] = "text",
    publish_args: Annotated[
        list[str] | None,
        typer.Argument(
            help="Arguments after -- are passed verbatim to cargo publish",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Validate the package, ask for confirmation, then run cargo publish.

    Checks the working tree, the manifest metadata, crate ownership and
    whether the version is already published. Blocking findings stop the
    publish without prompting.

    Examples
    --------
    crategate validate
    crategate validate -- --dry-run
    cargo validate -- --features full
    """
    if output_format not in _OUTPUT_FORMATS:
        console.print(f"[red]Invalid format '{output_format}'.[/red] Choose from: text, json, yaml")
        raise typer.Exit(ExitCode.INPUT_ERROR)

    extra_args = list(publish_args or [])
    project_root = _project_root(manifest_path)

    try:
        config = _effective_config(ctx, config_file, project_root, username, registry_url)
        outcome = asyncio.run(
            _arun_pipeline(config, manifest_path, target_registry(extra_args))
        )
    except CrateGateError as e:
        console.print(f"[bold red]{escape(str(e))}[/bold red]", highlight=False, soft_wrap=True)
        raise typer.Exit(e.exit_code) from e

    if output_format == "json":
        typer.echo(json.dumps(outcome.report.to_dict(), indent=2))
    elif output_format == "yaml":
        typer.echo(yaml.safe_dump(outcome.report.to_dict(), sort_keys=False))

    gate = ConfirmationGate(console)
    decision = gate.decide(outcome.report, outcome.metadata, outcome.repo_status)
    if decision is GateDecision.BLOCKED:
        raise typer.Exit(ExitCode.BLOCKED)
    if decision is GateDecision.DECLINED:
        raise typer.Exit(ExitCode.DECLINED)

    console.print("[bold green]Proceeding with cargo publish...[/bold green]")
    forwarder = PublishForwarder.from_config(config.publish, cwd=project_root)
    allow_dirty = (
        config.publish.append_allow_dirty and outcome.repo_status.kind is RepoStatusKind.DIRTY
    )
    try:
        code = forwarder.forward(extra_args, allow_dirty=allow_dirty)
    except CrateGateError as e:
        console.print(f"[bold red]{escape(str(e))}[/bold red]", highlight=False, soft_wrap=True)
        raise typer.Exit(e.exit_code) from e

    if code != 0:
        console.print("[bold red]cargo publish failed[/bold red]")
    raise typer.Exit(code)


async def _arun_pipeline(
    config: CrateGateConfig, manifest_path: Path | None, registry_name: str | None
) -> ValidationOutcome:
    pipeline = ValidationPipeline.from_config(
        config, manifest_path, target_registry=registry_name
    )
    try:
        return await pipeline.arun()
    finally:
        await pipeline.aclose()


def _project_root(manifest_path: Path | None) -> Path:
    if manifest_path is None:
        return Path.cwd()
    return manifest_path if manifest_path.is_dir() else manifest_path.parent


def _effective_config(
    ctx: typer.Context,
    config_file: Path | None,
    project_root: Path,
    username: str | None,
    registry_url: str | None,
) -> CrateGateConfig:
    """Load configuration and apply command-line overrides."""
    config = load_config(config_file, project_root=project_root)

    changes: dict[str, object] = {}
    if registry_url:
        changes["url"] = registry_url
    if username:
        changes["username"] = username
    elif not config.registry.username:
        if cargo_username := _read_cargo_username():
            changes["username"] = cargo_username
    if changes:
        config = replace(config, registry=replace(config.registry, **changes))

    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    configure_logging(
        level=obj.get("log_level") or config.logging.level,
        format=config.logging.format,
        output_file=config.logging.output_file,
    )
    return config


def _read_cargo_username() -> str | None:
    """Username saved in ``$CARGO_HOME/username`` (default ``~/.cargo/username``)."""
    cargo_home = Path(os.environ.get("CARGO_HOME") or Path.home() / ".cargo")
    username_file = cargo_home / "username"
    try:
        username = username_file.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    if username:
        logger.debug("Using registry username from {path}", path=username_file)
    return username or None
