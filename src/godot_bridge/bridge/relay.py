"""CommandRelay - Forwards JSON-RPC requests to Godot.

Receives JSON-RPC requests (e.g. from an agent on stdio), sends each one to
Godot through the GodotConnection, and builds the JSON-RPC response.
"""

import logging
from typing import Any

from .connection import GodotConnection
from .errors import (
    JSONRPC_INTERNAL_ERROR,
    JSONRPC_INVALID_REQUEST,
    BridgeError,
)

logger = logging.getLogger(__name__)


class CommandRelay:
    """Relays JSON-RPC requests to Godot commands."""

    def __init__(self, connection: GodotConnection):
        """Initialize CommandRelay.

        Args:
            connection: Connection used to reach Godot
        """
        self.connection = connection

    async def handle_request(self, request: Any) -> dict[str, Any] | None:
        """Handle an incoming JSON-RPC request.

        Args:
            request: JSON-RPC request object

        Returns:
            JSON-RPC response object, or None for notifications (no id)
        """
        if not isinstance(request, dict):
            return self._make_error_response(None, JSONRPC_INVALID_REQUEST, "Invalid Request")

        request_id = request.get("id")
        is_notification = "id" not in request
        method = request.get("method")
        params = request.get("params")
        if params is None:
            params = {}

        if not isinstance(method, str) or not method or not isinstance(params, dict):
            if is_notification:
                logger.warning(f"Dropping invalid notification: {request}")
                return None
            return self._make_error_response(request_id, JSONRPC_INVALID_REQUEST, "Invalid Request")

        logger.debug(f"Handling request: method={method} id={request_id} notification={is_notification}")

        try:
            result = await self.connection.send_command(method, params)
        except BridgeError as e:
            if is_notification:
                logger.warning(f"Error handling notification {method}: {e.message}")
                return None
            return self._make_error_response(request_id, e.code, e.message, e.data)
        except Exception as e:
            logger.exception(f"Error handling request {method}: {e}")
            if is_notification:
                return None
            return self._make_error_response(
                request_id, JSONRPC_INTERNAL_ERROR, f"Internal bridge error: {e}"
            )

        if is_notification:
            return None
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _make_error_response(
        self,
        request_id: Any,
        code: int,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create JSON-RPC error response."""
        error: dict[str, Any] = {"code": code, "message": message}
        if data:
            error["data"] = data
        return {"jsonrpc": "2.0", "id": request_id, "error": error}
