"""CLI output formatting helpers."""

import json
from typing import Any

import click
import yaml

from .config import BridgeConfig


def print_result(result: Any, json_output: bool = False) -> None:
    """Print a command result as YAML, or JSON when requested."""
    if json_output:
        click.echo(json.dumps(result, indent=2, default=str))
    else:
        click.echo(yaml.safe_dump(result, default_flow_style=False, sort_keys=False).rstrip())


def print_config(config: BridgeConfig, json_output: bool = False) -> None:
    """Print configuration values with where each one came from.

    Args:
        config: Loaded configuration
        json_output: Output as JSON instead of a table
    """
    values = config.values()
    if json_output:
        sources = {key: config.get_source(key) for key in values}
        click.echo(json.dumps({"values": values, "sources": sources}, indent=2))
        return

    click.echo("Godot Bridge Configuration\n")
    width = max(len(key) for key in values)
    for key, value in values.items():
        click.echo(f"  {key:<{width}}  {value!s:<24}  ({config.get_source(key)})")
