"""
Unity Runner — CLI entrypoint.

Usage:
    python -m unity_runner.main --help
    unity-runner detect
    unity-runner locate --unity-version 2019.4.0
    unity-runner run --project-path game --run-editor-tests
"""

from __future__ import annotations

import json
import os
import shlex
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from unity_runner import __version__
from unity_runner.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="unity-runner")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to unity-runner.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Unity Runner — find Unity editors and run them in batch mode."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


# ── Registry commands ───────────────────────────────────────────


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--tools-dir", default=None, help="Extra directory to scan for editors.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool, tools_dir: str | None) -> None:
    """Scan this agent for Unity editors and print the published parameters."""
    from unity_runner.core.use_cases.detect import run_detect

    result = run_detect(config_path=ctx.obj.get("config_path"), tools_directory=tools_dir)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)
        return

    if result.error:
        _fail(result.error)

    if result.detector is None:
        click.secho("⚠️  Unity detection is not supported on this OS", fg="yellow", err=True)
    elif not result.parameters:
        click.secho("⚠️  No Unity installations found", fg="yellow", err=True)

    for name, path in result.parameters.items():
        click.echo(f"{name}={path}")


@cli.command()
@click.option("--unity-version", default=None, help="Minimum version (major.minor.patch).")
@click.option("--tools-dir", default=None, help="Extra directory to scan for editors.")
@click.pass_context
def locate(ctx: click.Context, unity_version: str | None, tools_dir: str | None) -> None:
    """Print the editor binary a build would use."""
    from unity_runner.core.config.loader import ConfigError, load_config
    from unity_runner.core.models.version import parse_version
    from unity_runner.core.services.tool_provider import ToolNotFoundError
    from unity_runner.core.use_cases.detect import agent_for, load_provider

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        _fail(str(e))
        return

    requested = unity_version or config.runner.unity_version.strip()
    if not requested and config.feature is not None:
        requested = config.feature.unity_version.strip()

    provider = load_provider(agent_for(config, tools_dir))
    try:
        path = provider.locate(parse_version(requested) if requested else None)
    except ToolNotFoundError as e:
        _fail(str(e))
        return

    click.echo(path)


# ── Build step commands ─────────────────────────────────────────


def build_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by ``command`` and ``run``; each overrides the config file."""
    options = [
        click.option("--unity-version", default=None, help="Minimum editor version."),
        click.option("--feature-unity-version", default=None, help="Build feature version override."),
        click.option("--project-path", default=None, help="Project directory (relative to working dir)."),
        click.option("--build-target", default=None, help="Active build target, e.g. StandaloneLinux64."),
        click.option("--build-player", default=None, help="Player flag without dash, e.g. buildLinux64Player."),
        click.option("--build-player-path", default=None, help="Player output path."),
        click.option("--run-editor-tests/--no-run-editor-tests", default=None, help="Run editor tests."),
        click.option("--no-graphics/--graphics", default=None, help="Run without a graphics device."),
        click.option("--execute-method", default=None, help="Static method to execute."),
        click.option("--arguments", default=None, help="Extra editor arguments (quoted as in a shell)."),
        click.option("--test-platform", default=None, help="Test platform, e.g. editmode."),
        click.option("--test-categories", default=None, help="Test categories, comma separated."),
        click.option("--test-names", default=None, help="Test names, comma separated."),
        click.option("--cache-server", default=None, help="Cache server address."),
        click.option("--working-dir", "working_directory", default=None, help="Checkout directory."),
        click.option("--build-id", default=None, help="Build identifier used in temp file names."),
        click.option("--temp-dir", "temp_directory", default=None, help="Build temp directory."),
        click.option("--tools-dir", "tools_directory", default=None, help="Extra directory to scan for editors."),
        click.option("--virtual-context/--no-virtual-context", default=None, help="Editor runs inside a container."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@cli.command()
@build_options
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def command(ctx: click.Context, as_json: bool, **overrides: Any) -> None:
    """Print the editor command line for the build step."""
    from unity_runner.core.config.loader import ConfigError
    from unity_runner.core.services.tool_provider import ToolNotFoundError
    from unity_runner.core.use_cases.build import prepare_build

    try:
        service, cmd = prepare_build(ctx.obj.get("config_path"), overrides)
    except (ConfigError, ToolNotFoundError) as e:
        _fail(str(e))
        return

    if as_json:
        assert service.spec is not None  # set by make_command_line
        click.echo(json.dumps({
            "argv": cmd.argv(),
            "working_directory": cmd.working_directory,
            "invocation": service.spec.model_dump(),
        }, indent=2))
        return

    click.echo(shlex.join(cmd.argv()))


@cli.command()
@build_options
@click.pass_context
def run(ctx: click.Context, **overrides: Any) -> None:
    """Run the build step and exit with the editor's exit code."""
    from unity_runner.adapters.shell.process import ProcessLaunchError
    from unity_runner.core.config.loader import ConfigError
    from unity_runner.core.services.tool_provider import ToolNotFoundError
    from unity_runner.core.use_cases.build import run_step

    try:
        result = run_step(ctx.obj.get("config_path"), overrides)
    except (ConfigError, ToolNotFoundError, ProcessLaunchError) as e:
        _fail(str(e))
        return

    if not result.ok and not ctx.obj.get("quiet"):
        click.secho(f"❌ Unity exited with code {result.exit_code}", fg="red", err=True)
    sys.exit(result.exit_code)


if __name__ == "__main__":
    cli()
