"""Shared test fixtures for godot-mcp-bridge tests.

This module provides fixtures for testing the bridge:
- FakeWebSocket: In-memory stand-in for an aiohttp client WebSocket
- MockGodot: Simulates the Godot editor plugin's WebSocket server
- mock_godot: Real WebSocket server fixture for integration tests
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import pytest
from aiohttp import WSMsgType, web

# =============================================================================
# FakeWebSocket - In-memory transport for unit tests
# =============================================================================


class FakeWebSocket:
    """Records frames sent by the connection; never talks to a network."""

    def __init__(self) -> None:
        self.closed = False
        self.close_code: Optional[int] = None
        self.sent: list[dict[str, Any]] = []
        self.pings = 0
        self.send_error: Optional[BaseException] = None

    async def send_str(self, data: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(json.loads(data))

    async def ping(self, message: bytes = b"") -> None:
        self.pings += 1

    async def close(self) -> bool:
        self.closed = True
        self.close_code = 1000
        return True

    def exception(self) -> Optional[BaseException]:
        return None


@pytest.fixture
def fake_ws() -> FakeWebSocket:
    """Create a fake WebSocket."""
    return FakeWebSocket()


# =============================================================================
# MockGodot - Simulates the Godot editor plugin
# =============================================================================


def primary_reply(request: dict[str, Any]) -> Optional[dict[str, Any]]:
    """Answer every request with an empty JSON-RPC result."""
    return {"jsonrpc": "2.0", "id": request["id"], "result": {}}


@dataclass
class MockGodot:
    """WebSocket server that answers bridge commands like the Godot plugin."""

    url: str = ""
    accepting: bool = True
    requests: list[dict[str, Any]] = field(default_factory=list)
    connections: int = 0
    pings: int = 0
    # Builds the reply for a request; None means never reply
    reply: Callable[[dict[str, Any]], Optional[dict[str, Any]]] = primary_reply
    # Per-method reply delay in seconds
    delays: dict[str, float] = field(default_factory=dict)
    sockets: list[web.WebSocketResponse] = field(default_factory=list)

    async def handle_ws(self, request: web.Request) -> web.StreamResponse:
        """Handle the WebSocket upgrade and incoming frames."""
        if not self.accepting:
            return web.Response(status=503, text="Godot unavailable")

        ws = web.WebSocketResponse(autoping=False)
        await ws.prepare(request)
        self.connections += 1
        self.sockets.append(ws)

        tasks: set[asyncio.Task] = set()
        try:
            async for msg in ws:
                if msg.type == WSMsgType.PING:
                    self.pings += 1
                    await ws.pong(msg.data)
                elif msg.type == WSMsgType.TEXT:
                    data = json.loads(msg.data)
                    self.requests.append(data)
                    task = asyncio.create_task(self._respond(ws, data))
                    tasks.add(task)
                    task.add_done_callback(tasks.discard)
        finally:
            for task in tasks:
                task.cancel()
            if ws in self.sockets:
                self.sockets.remove(ws)
        return ws

    async def _respond(self, ws: web.WebSocketResponse, request: dict[str, Any]) -> None:
        delay = self.delays.get(request.get("method", ""), 0)
        if delay:
            await asyncio.sleep(delay)
        reply = self.reply(request)
        if reply is not None and not ws.closed:
            await ws.send_str(json.dumps(reply))

    async def send_raw(self, data: str) -> None:
        """Push an unsolicited frame to every connected client."""
        for ws in list(self.sockets):
            await ws.send_str(data)

    async def drop_connections(self) -> None:
        """Close every client socket from the server side."""
        for ws in list(self.sockets):
            await ws.close()


@pytest.fixture
async def mock_godot():
    """Start a mock Godot WebSocket server on a free port."""
    server = MockGodot()
    app = web.Application()
    app.router.add_get("/", server.handle_ws)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()

    port = site._server.sockets[0].getsockname()[1]
    server.url = f"ws://127.0.0.1:{port}"

    yield server

    await server.drop_connections()
    await runner.cleanup()
