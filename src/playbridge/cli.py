# src/playbridge/cli.py
"""playbridge Command Line Interface.

Entry point for the playbridge CLI tool. The CLI is a development aid: it
replays scripted playback sessions through a bridge wired to a configured
sink, and lists the sinks discovered through plugins.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

from playbridge import __version__
from playbridge.core.config import BridgeSettings, load_settings
from playbridge.core.logging import configure_logging

__all__ = [
    "app",
]

app = typer.Typer(
    name="playbridge",
    help="playbridge: playback telemetry bridge tools.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"playbridge version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Args:
        env_file: Explicit path. If None, searches the current directory and
            its parents.

    Raises:
        typer.Exit: If an explicit env_file doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(False, "--no-dotenv", help="Skip loading .env file."),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output structured JSON logs."),
) -> None:
    """playbridge: playback telemetry bridge tools."""
    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")
    ctx.obj = {"verbose": verbose, "json_logs": json_logs}

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)


def _load_settings_or_exit(settings: str | None) -> BridgeSettings:
    if settings is None:
        return BridgeSettings()

    from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
    from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError

    settings_path = Path(settings).expanduser()
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


@app.command()
def sinks() -> None:
    """List analytics sinks available to the sink.name setting."""
    from playbridge.telemetry.errors import SinkConfigurationError
    from playbridge.telemetry.factory import discover_sink_registry

    try:
        registry = discover_sink_registry()
    except SinkConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    for name in sorted(registry):
        typer.echo(f"  {name:12} - {registry[name].__name__}")


@app.command()
def replay(
    ctx: typer.Context,
    script: Path = typer.Argument(..., help="Path to replay script YAML."),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file. Defaults: console sink, no token.",
    ),
) -> None:
    """Replay a scripted playback session through the bridge."""
    from playbridge.replay import ReplayRunner, ReplayScriptError, load_script
    from playbridge.telemetry.bridge import TelemetryBridge
    from playbridge.telemetry.errors import SinkConfigurationError
    from playbridge.telemetry.factory import create_analytics_sink
    from playbridge.telemetry.providers import StaticIdentityProvider, StaticTokenProvider

    config = _load_settings_or_exit(settings)

    global_flags = ctx.obj or {}
    if not global_flags.get("verbose"):
        configure_logging(
            json_output=config.logging.json_output or bool(global_flags.get("json_logs")),
            level=config.logging.level,
        )

    script_path = script.expanduser()
    try:
        steps = load_script(script_path)
    except FileNotFoundError:
        typer.echo(f"Error: Script file not found: {script}", err=True)
        raise typer.Exit(1) from None
    except ReplayScriptError as e:
        typer.echo(f"Invalid replay script: {e}", err=True)
        raise typer.Exit(1) from None

    token_provider = StaticTokenProvider.from_settings(config)
    identity_provider = StaticIdentityProvider()
    try:
        sink = create_analytics_sink(config)
    except SinkConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    bridge = TelemetryBridge(
        sink,
        origin=config.origin,
        token_provider=token_provider,
        identity_provider=identity_provider,
    )

    runner = ReplayRunner(bridge, token_provider, identity_provider)
    try:
        result = runner.run(steps)
    except ReplayScriptError as e:
        typer.echo(f"Replay failed: {e}", err=True)
        raise typer.Exit(1) from None
    finally:
        bridge.close()
        if sink is not None:
            sink.close()

    # Read after close() so the final flush is counted
    metrics = bridge.health_metrics
    typer.echo(
        f"Replayed {result.steps_run} steps, {result.events_emitted} player events: "
        f"{metrics['calls_forwarded']} calls forwarded, {metrics['sink_failures']} failed, "
        f"{metrics['sessions_bound']} sessions bound, {metrics['sessions_released']} released",
        err=True,
    )
