"""Send and ping commands - issue single commands to Godot."""

import asyncio
import sys
import time
from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape

from ..bridge.errors import BridgeError
from ..bridge.provider import ConnectionProvider
from ..formatters import print_result
from ..utils import parse_params

console = Console(stderr=True)


async def issue_command(provider: ConnectionProvider, method: str, params: dict[str, Any]) -> Any:
    """Send one command and close the connection afterwards."""
    connection = provider.get()
    try:
        return await connection.send_command(method, params)
    finally:
        await provider.reset()


def _run(ctx: click.Context, method: str, params: dict[str, Any]) -> Any:
    try:
        return asyncio.run(issue_command(ctx.obj["provider"], method, params))
    except BridgeError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        sys.exit(1)


@click.command("send")
@click.argument("method")
@click.option(
    "-p",
    "--param",
    "param_flags",
    multiple=True,
    help="Command parameter as KEY=VALUE (VALUE parsed as JSON when possible)",
)
@click.option(
    "--params-file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON or YAML file with command parameters",
)
@click.pass_context
def send_command(
    ctx: click.Context,
    method: str,
    param_flags: tuple[str, ...],
    params_file: str | None,
) -> None:
    """Send a command to Godot and print its result.

    \b
    Example usage:
      godot-bridge send get_scene_tree
      godot-bridge send create_node -p parent_path=/root -p node_type=Node2D
    """
    try:
        params = parse_params(param_flags, params_file)
    except (ValueError, yaml.YAMLError) as e:
        raise click.UsageError(str(e)) from e

    result = _run(ctx, method, params)
    print_result(result, ctx.obj["json_output"])


@click.command("ping")
@click.pass_context
def ping_command(ctx: click.Context) -> None:
    """Check that Godot answers commands."""
    start = time.monotonic()
    result = _run(ctx, "ping", {})
    elapsed_ms = (time.monotonic() - start) * 1000

    if ctx.obj["json_output"]:
        print_result({"result": result, "elapsed_ms": round(elapsed_ms, 1)}, json_output=True)
    else:
        click.echo(f"Pong from Godot in {elapsed_ms:.1f} ms")
