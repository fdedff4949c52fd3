"""Bridge configuration management.

Handles persistent configuration stored in ~/.godot-mcp/config.yaml.
Supports environment variable overrides and CLI flag precedence.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from .shared.paths import GODOT_MCP_DIR

logger = logging.getLogger(__name__)

# Default values
DEFAULT_URL = "ws://127.0.0.1:9080"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 2.0
DEFAULT_PING_INTERVAL = 20.0
DEFAULT_LOG_LEVEL = "warning"

# Environment variable mappings
ENV_VARS = {
    "url": "GODOT_MCP_URL",
    "timeout": "GODOT_MCP_TIMEOUT",
    "max_retries": "GODOT_MCP_MAX_RETRIES",
    "retry_delay": "GODOT_MCP_RETRY_DELAY",
    "ping_interval": "GODOT_MCP_PING_INTERVAL",
    "log_level": "GODOT_MCP_LOG_LEVEL",
}

# Value converters, also the list of recognized keys
CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "url": str,
    "timeout": float,
    "max_retries": int,
    "retry_delay": float,
    "ping_interval": float,
    "log_level": lambda value: str(value).lower(),
}


@dataclass
class BridgeConfig:
    """Connection bridge configuration."""

    url: str = DEFAULT_URL
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    ping_interval: float = DEFAULT_PING_INTERVAL
    log_level: str = DEFAULT_LOG_LEVEL

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    def values(self) -> dict[str, Any]:
        """Config values keyed by name."""
        return {key: getattr(self, key) for key in CONVERTERS}


def get_config_path() -> Path:
    """Get the config file path.

    Returns:
        Path to ~/.godot-mcp/config.yaml
    """
    return GODOT_MCP_DIR / "config.yaml"


def _apply(config: BridgeConfig, key: str, value: Any, source: str) -> None:
    try:
        setattr(config, key, CONVERTERS[key](value))
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid {key} from {source}: {value!r}")
        return
    config._sources[key] = source


def _read_config_file(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config file {config_path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {config_path}: expected a mapping")
        return {}
    return data


def load_config(overrides: Optional[dict[str, Any]] = None) -> BridgeConfig:
    """Load bridge configuration.

    Precedence (highest to lowest):
    1. Command-line overrides
    2. Environment variables
    3. Config file (~/.godot-mcp/config.yaml)
    4. Defaults

    Args:
        overrides: Values given on the command line (None values are skipped)

    Returns:
        BridgeConfig with values and sources
    """
    config = BridgeConfig()

    file_config = _read_config_file(get_config_path())
    for key in CONVERTERS:
        if key in file_config:
            _apply(config, key, file_config[key], "config file")

    for key, env_var in ENV_VARS.items():
        if os.environ.get(env_var):
            _apply(config, key, os.environ[env_var], "environment")

    for key, value in (overrides or {}).items():
        if key in CONVERTERS and value is not None:
            _apply(config, key, value, "command line")

    return config


def save_config(key: str, value: Any) -> None:
    """Save a config value to the config file.

    Args:
        key: Config key (url, timeout, max_retries, ...)
        value: Value to save

    Raises:
        KeyError: If the key is not a recognized setting
        ValueError: If the value cannot be converted for the key
    """
    if key not in CONVERTERS:
        raise KeyError(key)
    converted = CONVERTERS[key](value)

    config_path = get_config_path()
    existing = _read_config_file(config_path)
    existing[key] = converted

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False)


def unset_config(key: str) -> bool:
    """Remove a config value from the config file.

    Args:
        key: Config key to remove

    Returns:
        True if key was removed, False if not found

    Raises:
        KeyError: If the key is not a recognized setting
    """
    if key not in CONVERTERS:
        raise KeyError(key)

    config_path = get_config_path()
    existing = _read_config_file(config_path)
    if key not in existing:
        return False

    del existing[key]

    with open(config_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False)

    return True
