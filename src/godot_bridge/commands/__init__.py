"""CLI commands for godot-mcp-bridge."""
