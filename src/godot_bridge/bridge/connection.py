"""GodotConnection - Persistent WebSocket link to the Godot editor plugin.

Handles:
- Connecting with bounded retries on first use
- Correlating JSON-RPC commands with their (unordered) responses
- Keep-alive pings while connected
- Reconnecting indefinitely after an established session drops
- Deliberate shutdown that fails every pending command
"""

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import urlparse

import aiohttp

from .errors import (
    BridgeError,
    ConnectionClosedError,
    ConnectionFailedError,
    ConnectionLostError,
    TransportNotOpenError,
    map_remote_error,
)
from .keepalive import DEFAULT_PING_INTERVAL, KeepAlive
from .pending import PendingTable
from .protocol import build_request, decode_message, encode, parse_reply

if TYPE_CHECKING:
    from ..config import BridgeConfig

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_URL = "ws://127.0.0.1:9080"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 2.0

COMMAND_ID_PREFIX = "cmd_"


class ConnectionState(str, Enum):
    """Lifecycle states of the Godot connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class GodotConnection:
    """Single logical WebSocket connection to the Godot editor.

    Commands issued concurrently share the socket; each one is matched to
    its response by correlation id, whatever order responses arrive in.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        ping_interval: float = DEFAULT_PING_INTERVAL,
    ):
        """Initialize GodotConnection.

        Args:
            url: WebSocket URL of the Godot plugin (e.g., ws://127.0.0.1:9080)
            timeout: Command and handshake timeout in seconds
            max_retries: Extra connection attempts on connect() after the first
            retry_delay: Delay between connection attempts in seconds
            ping_interval: Seconds between keep-alive pings

        Raises:
            ValueError: If URL is not a ws:// or wss:// URL
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("ws", "wss") or not parsed.netloc:
            raise ValueError(f"Invalid URL: {url}")

        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.ping_interval = ping_interval

        self._state = ConnectionState.DISCONNECTED
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._keepalive = KeepAlive(interval=ping_interval)
        self._pending = PendingTable()
        self._command_id = 0

        logger.info(f"GodotConnection created with URL: {self.url}")

    @classmethod
    def from_config(cls, config: "BridgeConfig") -> "GodotConnection":
        """Create a connection from loaded configuration."""
        return cls(
            url=config.url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            ping_interval=config.ping_interval,
        )

    @property
    def state(self) -> ConnectionState:
        """Current lifecycle state."""
        return self._state

    @property
    def pending_count(self) -> int:
        """Number of commands awaiting a response."""
        return len(self._pending)

    @property
    def keepalive(self) -> KeepAlive:
        """Keep-alive ping timer."""
        return self._keepalive

    def is_connected(self) -> bool:
        """Whether the WebSocket is currently connected."""
        return self._state is ConnectionState.CONNECTED

    # -------------------------------------------------------------------------
    # Connecting
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Connect to the Godot WebSocket server.

        No-op when already connected. Concurrent callers share a single
        connection attempt.

        Raises:
            ConnectionFailedError: When every attempt failed
            ConnectionClosedError: When disconnect() interrupted the attempt
        """
        if self.is_connected():
            return

        task = self._connect_task
        if task is None or task.done():
            task = asyncio.create_task(self._connect_with_retries())
            self._connect_task = task

        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise ConnectionClosedError(message="Connection closed while connecting")
            raise

    async def _connect_with_retries(self) -> None:
        if self._state is not ConnectionState.RECONNECTING:
            self._state = ConnectionState.CONNECTING

        attempts = self.max_retries + 1
        last_error: Optional[BaseException] = None

        for attempt in range(attempts):
            logger.info(
                f"Connecting to Godot WebSocket server at {self.url}... "
                f"(Attempt {attempt + 1}/{attempts})"
            )
            try:
                await self._open_transport()
            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning(f"Connection attempt {attempt + 1} timed out after {self.timeout}s")
            except (aiohttp.ClientError, OSError) as e:
                last_error = e
                logger.warning(f"Connection attempt {attempt + 1} failed: {e}")
            else:
                self._state = ConnectionState.CONNECTED
                self._keepalive.start(self._ws)
                logger.info("Connected to Godot WebSocket server")
                return

            if attempt < attempts - 1:
                logger.info(f"Retrying in {self.retry_delay}s...")
                await asyncio.sleep(self.retry_delay)

        if self._state is ConnectionState.CONNECTING:
            self._state = ConnectionState.DISCONNECTED

        reason = "Connection timeout" if isinstance(last_error, asyncio.TimeoutError) else str(last_error)
        raise ConnectionFailedError(
            message=f"Could not connect to Godot at {self.url} after {attempts} attempts: {reason}",
            data={"url": self.url, "attempts": attempts, "original_error": reason},
        ) from last_error

    async def _open_transport(self) -> None:
        """Replace the transport with a freshly connected one."""
        await self._close_transport()

        session = aiohttp.ClientSession()
        try:
            ws = await asyncio.wait_for(session.ws_connect(self.url), timeout=self.timeout)
        except BaseException:
            await session.close()
            raise

        self._session = session
        self._ws = ws
        self._reader_task = asyncio.create_task(self._read_loop(ws))

    async def _close_transport(self) -> None:
        """Fully terminate the current transport, if any."""
        ws, session, reader = self._ws, self._session, self._reader_task
        self._ws = None
        self._session = None
        self._reader_task = None

        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            try:
                await reader
            except asyncio.CancelledError:
                pass
        if ws is not None:
            await ws.close()
        if session is not None:
            await session.close()

    # -------------------------------------------------------------------------
    # Inbound messages
    # -------------------------------------------------------------------------

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        """Dispatch frames until the socket closes, then report the drop."""
        try:
            async for message in ws:
                if message.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                    self._handle_message(message.data)
                elif message.type == aiohttp.WSMsgType.ERROR:
                    logger.error(f"WebSocket error: {ws.exception()}")
                    break
        except (aiohttp.ClientError, ConnectionError) as e:
            logger.error(f"WebSocket error: {e}")

        if ws is self._ws and self._state is ConnectionState.CONNECTED:
            logger.warning(f"Disconnected from Godot WebSocket server (code: {ws.close_code})")
            self._on_connection_lost()

    def _handle_message(self, data: str | bytes) -> None:
        """Resolve or reject the pending command a frame answers."""
        try:
            payload = decode_message(data)
            if payload is None:
                return

            reply = parse_reply(payload)
            if reply is None:
                return

            logger.debug(f"Pending commands: {self._pending.ids()}")
            if reply.ok:
                found = self._pending.resolve(reply.correlation_id, reply.result)
            else:
                found = self._pending.reject(reply.correlation_id, map_remote_error(reply.error))

            if found:
                logger.debug(f"Completed pending command for ID: {reply.correlation_id}")
            else:
                logger.warning(f"No pending command found for ID: {reply.correlation_id}")
        except Exception as e:
            logger.exception(f"Error processing message: {e}")

    # -------------------------------------------------------------------------
    # Reconnection
    # -------------------------------------------------------------------------

    def _on_connection_lost(self) -> None:
        self._keepalive.stop()
        self._state = ConnectionState.RECONNECTING

        failed = self._pending.fail_all(
            lambda: ConnectionLostError(message="Connection to Godot lost", data={"url": self.url})
        )
        if failed:
            logger.warning(f"Failed {failed} pending commands after connection loss")

        if self._reconnect_task is None or self._reconnect_task.done():
            self._reconnect_task = asyncio.create_task(self._reconnect_loop())

    async def _reconnect_loop(self) -> None:
        """Reconnect until it succeeds or the connection is closed."""
        logger.info("Attempting to reconnect...")
        await self._close_transport()

        while True:
            self._state = ConnectionState.RECONNECTING
            try:
                await self.connect()
            except BridgeError as e:
                logger.error(f"Failed to reconnect: {e.message}")
                await asyncio.sleep(self.retry_delay)
            else:
                logger.info("Reconnected to Godot WebSocket server")
                return

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def _next_command_id(self) -> str:
        command_id = f"{COMMAND_ID_PREFIX}{self._command_id}"
        self._command_id += 1
        return command_id

    async def send_command(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Send a command to Godot and wait for its result.

        Connects first if not connected.

        Args:
            method: Godot command name
            params: Command parameters

        Returns:
            The result Godot reported

        Raises:
            ConnectionFailedError: If connecting failed
            TransportNotOpenError: If the socket was not writable
            CommandTimeoutError: If no response arrived within the timeout
            RemoteCommandError: If Godot reported an error
            ConnectionClosedError: If disconnect() ran while waiting
            ConnectionLostError: If the socket dropped while waiting
        """
        if self._ws is None or not self.is_connected():
            await self.connect()

        command_id = self._next_command_id()
        request = build_request(method, params or {}, command_id)
        future = self._pending.register(command_id, method, self.timeout)

        ws = self._ws
        if ws is None or ws.closed:
            self._pending.discard(command_id)
            state = "closed" if ws is not None else "null"
            raise TransportNotOpenError(
                message=f"WebSocket not connected, state: {state}",
                data={"method": method, "id": command_id, "state": state},
            )

        try:
            await ws.send_str(encode(request))
        except (ConnectionError, aiohttp.ClientError) as e:
            self._pending.discard(command_id)
            raise TransportNotOpenError(
                message=f"WebSocket not connected, state: closing ({e})",
                data={"method": method, "id": command_id, "state": "closing"},
            ) from e

        logger.debug(f"Sent command {method} (ID: {command_id})")
        try:
            return await future
        finally:
            self._pending.discard(command_id)

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------

    async def disconnect(self) -> None:
        """Close the connection and fail every pending command.

        Does not trigger reconnection. Safe to call repeatedly.
        """
        self._keepalive.stop()
        self._state = ConnectionState.DISCONNECTED

        for task in (self._reconnect_task, self._connect_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except (asyncio.CancelledError, BridgeError):
                    pass
        self._reconnect_task = None
        self._connect_task = None

        failed = self._pending.fail_all(ConnectionClosedError)
        if failed:
            logger.info(f"Rejected {failed} pending commands on disconnect")

        await self._close_transport()
        self._state = ConnectionState.DISCONNECTED
        logger.info("Disconnected from Godot WebSocket server")
