"""Shared modules for godot-mcp-bridge: logging setup and filesystem paths."""

from .logging import configure_logging, get_logger
from .paths import GODOT_MCP_DIR, LOG_DIR, ensure_dirs, get_log_file

__all__ = [
    # Paths
    "GODOT_MCP_DIR",
    "LOG_DIR",
    "ensure_dirs",
    "get_log_file",
    # Logging
    "configure_logging",
    "get_logger",
]
