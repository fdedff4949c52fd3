"""Error taxonomy for the Godot bridge.

Every failure surfaced to a caller of the bridge is a BridgeError carrying a
JSON-RPC compatible error code, so the stdio relay can hand it back verbatim.
"""

from dataclasses import dataclass, field
from typing import Any

# JSON-RPC error codes
JSONRPC_PARSE_ERROR = -32700
JSONRPC_INVALID_REQUEST = -32600
JSONRPC_METHOD_NOT_FOUND = -32601
JSONRPC_INVALID_PARAMS = -32602
JSONRPC_INTERNAL_ERROR = -32603
JSONRPC_SERVER_ERROR = -32000  # -32000 to -32099 reserved for implementation-defined server errors

# Custom error codes for bridge
BRIDGE_CONNECTION_ERROR = -32002
BRIDGE_TIMEOUT_ERROR = -32003
BRIDGE_NOT_OPEN_ERROR = -32004
BRIDGE_CLOSED_ERROR = -32005
BRIDGE_LOST_ERROR = -32006


@dataclass
class BridgeError(Exception):
    """Base error class for bridge errors."""

    code: int
    message: str
    retryable: bool = False
    data: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def to_jsonrpc(self) -> dict[str, Any]:
        """Convert to JSON-RPC error object."""
        error = {"code": self.code, "message": self.message}
        if self.data:
            error["data"] = self.data
        return error


@dataclass
class ConnectionFailedError(BridgeError):
    """Initial connection to Godot could not be established."""

    code: int = BRIDGE_CONNECTION_ERROR
    message: str = "Connection failed"
    retryable: bool = True


@dataclass
class CommandTimeoutError(BridgeError):
    """No correlated response arrived within the command timeout."""

    code: int = BRIDGE_TIMEOUT_ERROR
    message: str = "Command timed out"
    retryable: bool = True


@dataclass
class TransportNotOpenError(BridgeError):
    """The WebSocket was not writable when the command was sent."""

    code: int = BRIDGE_NOT_OPEN_ERROR
    message: str = "WebSocket not connected"
    retryable: bool = True


@dataclass
class ConnectionClosedError(BridgeError):
    """The connection was deliberately closed while the command was pending."""

    code: int = BRIDGE_CLOSED_ERROR
    message: str = "Connection closed"
    retryable: bool = False


@dataclass
class ConnectionLostError(BridgeError):
    """The connection dropped unexpectedly while the command was pending."""

    code: int = BRIDGE_LOST_ERROR
    message: str = "Connection lost"
    retryable: bool = True


@dataclass
class RemoteCommandError(BridgeError):
    """Godot reported an error for the command."""

    code: int = JSONRPC_SERVER_ERROR
    message: str = "Unknown error"
    retryable: bool = False


def map_remote_error(error: Any) -> RemoteCommandError:
    """Map an error reported by Godot to RemoteCommandError.

    Args:
        error: JSON-RPC error object, or a bare message string from the
            legacy envelope

    Returns:
        RemoteCommandError with the remote message passed through
    """
    if isinstance(error, dict):
        data = error.get("data")
        code = error.get("code")
        return RemoteCommandError(
            code=code if isinstance(code, int) else JSONRPC_SERVER_ERROR,
            message=error.get("message") or "Unknown error",
            data=data if isinstance(data, dict) else ({"detail": data} if data else {}),
        )
    if isinstance(error, str) and error:
        return RemoteCommandError(message=error)
    return RemoteCommandError()
