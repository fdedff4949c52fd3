"""CLI main entry point."""

import sys

import click

from .bridge.provider import ConnectionProvider
from .commands.send import ping_command, send_command
from .commands.serve import serve_command
from .config import CONVERTERS, load_config, save_config, unset_config
from .formatters import print_config
from .shared.logging import configure_logging

VERBOSITY_LEVELS = {1: "info", 2: "debug"}


@click.group()
@click.option("--url", help="Godot WebSocket URL (default: ws://127.0.0.1:9080)")
@click.option("--timeout", type=float, help="Command timeout in seconds")
@click.option("-v", "--verbose", count=True, help="Increase verbosity")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write logs to file")
@click.version_option(package_name="godot-mcp-bridge")
@click.pass_context
def cli(
    ctx: click.Context,
    url: str | None,
    timeout: float | None,
    verbose: int,
    json_output: bool,
    log_file: str | None,
) -> None:
    """Command bridge between MCP agents and the Godot editor."""
    ctx.ensure_object(dict)

    config = load_config({"url": url, "timeout": timeout})
    level = VERBOSITY_LEVELS.get(min(verbose, 2), config.log_level)
    configure_logging(level, log_file=log_file)

    ctx.obj["config"] = config
    ctx.obj["json_output"] = json_output
    ctx.obj["provider"] = ConnectionProvider(config_loader=lambda: config)


cli.add_command(serve_command)
cli.add_command(send_command)
cli.add_command(ping_command)


@cli.group("config")
def config_group() -> None:
    """Manage configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration and where each value comes from."""
    print_config(ctx.obj["config"], ctx.obj["json_output"])


@config_group.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Save a configuration value to ~/.godot-mcp/config.yaml."""
    try:
        save_config(key, value)
    except KeyError:
        click.echo(f"Error: Unknown key '{key}'", err=True)
        click.echo(f"\nValid keys:\n  {', '.join(CONVERTERS)}")
        sys.exit(1)
    except ValueError:
        click.echo(f"Error: Invalid value for {key}: {value}", err=True)
        sys.exit(1)
    click.echo(f"Set {key} = {value}")


@config_group.command("unset")
@click.argument("key")
def config_unset(key: str) -> None:
    """Remove a configuration value from ~/.godot-mcp/config.yaml."""
    try:
        removed = unset_config(key)
    except KeyError:
        click.echo(f"Error: Unknown key '{key}'", err=True)
        sys.exit(1)
    if removed:
        click.echo(f"Unset {key}")
    else:
        click.echo(f"{key} is not set in the config file")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
