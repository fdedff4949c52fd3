"""Process-wide access to the Godot connection.

The connection is created lazily on first use and cached. Collaborators are
handed the provider (or the connection it returns) at construction instead
of reaching for a module global.
"""

import logging
from typing import Callable, Optional

from ..config import BridgeConfig, load_config
from .connection import GodotConnection

logger = logging.getLogger(__name__)


class ConnectionProvider:
    """Creates the GodotConnection on first use and caches it."""

    def __init__(self, config_loader: Callable[[], BridgeConfig] = load_config):
        """Initialize ConnectionProvider.

        Args:
            config_loader: Called once, on first get(), to configure the connection
        """
        self._config_loader = config_loader
        self._connection: Optional[GodotConnection] = None

    @property
    def has_connection(self) -> bool:
        """Whether the connection has been created."""
        return self._connection is not None

    def get(self) -> GodotConnection:
        """Return the connection, creating it on first call."""
        if self._connection is None:
            config = self._config_loader()
            self._connection = GodotConnection.from_config(config)
        return self._connection

    async def reset(self) -> None:
        """Disconnect and forget the cached connection."""
        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.disconnect()


_default_provider = ConnectionProvider()


def get_godot_connection() -> GodotConnection:
    """Get the process-wide GodotConnection."""
    return _default_provider.get()


def get_default_provider() -> ConnectionProvider:
    """Get the process-wide ConnectionProvider."""
    return _default_provider
