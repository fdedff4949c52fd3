"""Path management for godot-mcp-bridge.

Manages the ~/.godot-mcp/ directory used for configuration and logs.
"""

from pathlib import Path

# Base directory for all bridge data
GODOT_MCP_DIR = Path.home() / ".godot-mcp"

# Log directory (same as base for simplicity)
LOG_DIR = GODOT_MCP_DIR


def ensure_dirs() -> None:
    """Create ~/.godot-mcp/ (mode 0o700) if missing."""
    GODOT_MCP_DIR.mkdir(mode=0o700, parents=True, exist_ok=True)


def get_log_file(name: str = "bridge") -> Path:
    """Get path to a log file.

    Args:
        name: Log file name (without extension)

    Returns:
        Path to the log file
    """
    return LOG_DIR / f"{name}.log"
