"""Unit tests for the bridge error taxonomy."""

import pytest

from godot_bridge.bridge.errors import (
    BRIDGE_CLOSED_ERROR,
    BRIDGE_CONNECTION_ERROR,
    BRIDGE_LOST_ERROR,
    BRIDGE_NOT_OPEN_ERROR,
    BRIDGE_TIMEOUT_ERROR,
    JSONRPC_SERVER_ERROR,
    BridgeError,
    CommandTimeoutError,
    ConnectionClosedError,
    ConnectionFailedError,
    ConnectionLostError,
    RemoteCommandError,
    TransportNotOpenError,
    map_remote_error,
)

pytestmark = [pytest.mark.bridge, pytest.mark.bridge_unit]


class TestErrorClasses:
    """Codes, defaults and retryability of bridge errors."""

    @pytest.mark.parametrize(
        ("error_class", "code", "retryable"),
        [
            (ConnectionFailedError, BRIDGE_CONNECTION_ERROR, True),
            (CommandTimeoutError, BRIDGE_TIMEOUT_ERROR, True),
            (TransportNotOpenError, BRIDGE_NOT_OPEN_ERROR, True),
            (ConnectionClosedError, BRIDGE_CLOSED_ERROR, False),
            (ConnectionLostError, BRIDGE_LOST_ERROR, True),
            (RemoteCommandError, JSONRPC_SERVER_ERROR, False),
        ],
    )
    def test_defaults(self, error_class, code, retryable):
        error = error_class()
        assert isinstance(error, BridgeError)
        assert error.code == code
        assert error.retryable is retryable

    def test_connection_closed_message(self):
        assert ConnectionClosedError().message == "Connection closed"

    def test_str_is_message(self):
        error = CommandTimeoutError(message="Command timed out: get_scene_tree")
        assert str(error) == "Command timed out: get_scene_tree"

    def test_can_be_raised_and_caught(self):
        with pytest.raises(BridgeError, match="bad state"):
            raise RemoteCommandError(message="bad state")

    def test_to_jsonrpc_without_data(self):
        error = ConnectionClosedError()
        assert error.to_jsonrpc() == {"code": BRIDGE_CLOSED_ERROR, "message": "Connection closed"}

    def test_to_jsonrpc_with_data(self):
        error = CommandTimeoutError(message="Command timed out: ping", data={"method": "ping"})
        assert error.to_jsonrpc()["data"] == {"method": "ping"}


class TestMapRemoteError:
    """Tests for mapping errors reported by Godot."""

    def test_jsonrpc_error_object(self):
        error = map_remote_error({"code": -32601, "message": "Method not found"})
        assert isinstance(error, RemoteCommandError)
        assert error.code == -32601
        assert error.message == "Method not found"

    def test_jsonrpc_error_keeps_data(self):
        error = map_remote_error({"message": "Node missing", "data": {"path": "/root/Foo"}})
        assert error.code == JSONRPC_SERVER_ERROR
        assert error.data == {"path": "/root/Foo"}

    def test_non_mapping_data_is_wrapped(self):
        error = map_remote_error({"message": "Oops", "data": "trace"})
        assert error.data == {"detail": "trace"}

    def test_error_object_without_message(self):
        error = map_remote_error({})
        assert error.message == "Unknown error"

    def test_legacy_message_string(self):
        error = map_remote_error("bad state")
        assert error.message == "bad state"
        assert error.code == JSONRPC_SERVER_ERROR

    @pytest.mark.parametrize("value", [None, "", 42])
    def test_unusable_error_gets_generic_message(self, value):
        assert map_remote_error(value).message == "Unknown error"
