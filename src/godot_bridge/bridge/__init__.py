"""Bridge module - persistent WebSocket link to the Godot editor.

Provides GodotConnection, which multiplexes JSON-RPC commands over a single
WebSocket with correlation, timeouts, keep-alive and automatic reconnection.
"""

from .connection import ConnectionState, GodotConnection
from .errors import (
    BridgeError,
    CommandTimeoutError,
    ConnectionClosedError,
    ConnectionFailedError,
    ConnectionLostError,
    RemoteCommandError,
    TransportNotOpenError,
    map_remote_error,
)
from .keepalive import KeepAlive
from .pending import PendingTable
from .provider import ConnectionProvider, get_godot_connection
from .relay import CommandRelay

__all__ = [
    "BridgeError",
    "CommandRelay",
    "CommandTimeoutError",
    "ConnectionClosedError",
    "ConnectionFailedError",
    "ConnectionLostError",
    "ConnectionProvider",
    "ConnectionState",
    "GodotConnection",
    "KeepAlive",
    "PendingTable",
    "RemoteCommandError",
    "TransportNotOpenError",
    "get_godot_connection",
    "map_remote_error",
]
