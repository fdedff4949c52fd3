"""Wire envelopes exchanged with the Godot editor plugin.

Outbound commands are JSON-RPC 2.0 requests. Inbound replies come in two
shapes: the JSON-RPC response envelope, and the older ``commandId``/``status``
envelope that earlier plugin versions still emit.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

LEGACY_STATUS_ERROR = "error"


@dataclass(frozen=True)
class Reply:
    """A response correlated to a pending command."""

    correlation_id: str
    result: Any = None
    error: Any = None
    legacy: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def build_request(method: str, params: dict[str, Any], request_id: str) -> dict[str, Any]:
    """Build a JSON-RPC request envelope.

    Args:
        method: Godot command name
        params: Command parameters
        request_id: Correlation id for the response

    Returns:
        JSON-RPC request object
    """
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "params": params,
        "id": request_id,
    }


def encode(envelope: dict[str, Any]) -> str:
    """Serialize an envelope to JSON text."""
    return json.dumps(envelope, separators=(",", ":"))


def decode_message(data: str | bytes) -> Optional[dict[str, Any]]:
    """Decode a raw frame into a payload object.

    Args:
        data: Text or binary frame contents

    Returns:
        Parsed object, or None if the frame is not a JSON object
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning(f"Dropping frame that is not valid UTF-8: {e}")
            return None

    logger.debug(f"Received raw response: {data}")

    try:
        payload = json.loads(data)
    except json.JSONDecodeError as e:
        logger.warning(f"Error parsing JSON: {e}")
        return None

    if not isinstance(payload, dict):
        logger.warning(f"Dropping non-object payload: {data}")
        return None
    return payload


def parse_reply(payload: dict[str, Any]) -> Optional[Reply]:
    """Classify an inbound payload.

    JSON-RPC responses are checked first, then the legacy envelope.

    Args:
        payload: Decoded inbound object

    Returns:
        Reply for correlated responses, None for notifications and
        unrecognized payloads
    """
    if payload.get("jsonrpc") == JSONRPC_VERSION:
        request_id = payload.get("id")
        if not request_id:
            logger.debug("JSON-RPC notification received (no ID)")
            return None
        return Reply(
            correlation_id=str(request_id),
            result=payload.get("result"),
            error=payload.get("error"),
        )

    command_id = payload.get("commandId")
    if command_id:
        logger.debug(f"Handling legacy format response with commandId: {command_id}")
        error = None
        if payload.get("status") == LEGACY_STATUS_ERROR:
            error = payload.get("message") or "Unknown error"
        return Reply(
            correlation_id=str(command_id),
            result=payload.get("result"),
            error=error,
            legacy=True,
        )

    logger.warning(
        "Response does not match any expected format. "
        "Neither JSON-RPC id nor legacy commandId found."
    )
    return None
