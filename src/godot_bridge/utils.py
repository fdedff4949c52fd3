"""CLI utility functions."""

import json
from pathlib import Path
from typing import Any

import yaml


def parse_params(
    param_flags: tuple[str, ...],
    params_file: str | None,
) -> dict[str, Any]:
    """Parse command parameters from flags and file.

    Args:
        param_flags: Tuple of KEY=VALUE strings
        params_file: Path to JSON/YAML file with parameters

    Returns:
        Dictionary of parameters

    Raises:
        ValueError: On malformed flags or unsupported/invalid files
    """
    params: dict[str, Any] = {}

    # Parse params file first (if provided)
    if params_file:
        file_path = Path(params_file)
        with file_path.open() as f:
            if file_path.suffix in [".yaml", ".yml"]:
                loaded = yaml.safe_load(f) or {}
            elif file_path.suffix == ".json":
                loaded = json.load(f)
            else:
                raise ValueError(f"Unsupported params file format: {file_path.suffix}")
        if not isinstance(loaded, dict):
            raise ValueError(f"Params file must contain a mapping: {params_file}")
        params = loaded

    # Parse param flags (override file params)
    for param_str in param_flags:
        if "=" not in param_str:
            raise ValueError(f"Invalid param format: {param_str}. Expected KEY=VALUE")

        key, value = param_str.split("=", 1)

        # Try to parse value as JSON (for numbers, booleans, objects)
        try:
            params[key] = json.loads(value)
        except json.JSONDecodeError:
            # Keep as string if not valid JSON
            params[key] = value

    return params
