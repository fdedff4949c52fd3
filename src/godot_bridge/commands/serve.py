"""Serve command - relay stdio JSON-RPC requests to Godot.

Reads newline-delimited JSON-RPC requests from stdin, sends each one to the
Godot editor over the bridge connection and writes the responses to stdout.
Requests are handled concurrently; responses are written as they complete.
"""

import asyncio
import json
import signal
import sys
from typing import Any, Callable

import click

from ..bridge.connection import GodotConnection
from ..bridge.errors import JSONRPC_PARSE_ERROR, BridgeError
from ..bridge.relay import CommandRelay
from ..shared.logging import get_logger

# Max time to wait for in-flight requests when stdin closes (seconds)
DEFAULT_DRAIN_TIMEOUT = 5.0

logger = get_logger(__name__)


def write_stdout(line: str) -> None:
    """Write one protocol line to stdout."""
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


async def connect_on_startup(connection: GodotConnection) -> bool:
    """Connect to Godot and send an initial ping.

    A failed connection is not fatal: the bridge keeps running and connects
    again when the first command arrives.

    Returns:
        True if connected
    """
    try:
        await connection.connect()
    except BridgeError as e:
        logger.warning("Could not connect to Godot", error=e.message)
        logger.warning("Will retry connection when commands are executed")
        return False

    logger.info("Successfully connected to Godot WebSocket server", url=connection.url)
    try:
        await connection.send_command("ping", {})
        logger.info("Sent initial ping command to Godot")
    except BridgeError as e:
        logger.warning("Failed to send ping command", error=e.message)
    return True


async def open_stdin_reader() -> asyncio.StreamReader:
    """Wrap stdin in an asyncio StreamReader."""
    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    loop = asyncio.get_running_loop()
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


async def stdio_loop(
    relay: CommandRelay,
    reader: asyncio.StreamReader,
    write: Callable[[str], None],
    shutdown_event: asyncio.Event,
    drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
) -> None:
    """Main stdio loop - read JSON-RPC lines, relay them, write responses."""
    in_flight: set[asyncio.Task] = set()

    async def handle(request: Any) -> None:
        response = await relay.handle_request(request)
        if response is not None:
            write(json.dumps(response))

    try:
        while not shutdown_event.is_set():
            try:
                raw = await asyncio.wait_for(reader.readline(), timeout=1.0)
            except asyncio.TimeoutError:
                # No input, check shutdown and continue
                continue

            if not raw:
                logger.info("stdin closed")
                break

            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                continue

            try:
                request = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Invalid JSON on stdin", error=str(e))
                write(
                    json.dumps(
                        {
                            "jsonrpc": "2.0",
                            "id": None,
                            "error": {"code": JSONRPC_PARSE_ERROR, "message": "Parse error"},
                        }
                    )
                )
                continue

            task = asyncio.create_task(handle(request))
            in_flight.add(task)
            task.add_done_callback(in_flight.discard)
    finally:
        if in_flight:
            logger.info("Waiting for in-flight requests", count=len(in_flight))
            await asyncio.wait(set(in_flight), timeout=drain_timeout)


async def run_serve(connection: GodotConnection) -> None:
    """Run the bridge until stdin closes or a shutdown signal arrives."""
    await connect_on_startup(connection)
    relay = CommandRelay(connection)

    shutdown_event = asyncio.Event()

    def signal_handler() -> None:
        logger.info("Received shutdown signal")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        reader = await open_stdin_reader()
        await stdio_loop(relay, reader, write_stdout, shutdown_event)
    finally:
        logger.info("Shutting down Godot bridge")
        await connection.disconnect()


@click.command("serve")
@click.pass_context
def serve_command(ctx: click.Context) -> None:
    """Relay JSON-RPC requests on stdin to the Godot editor.

    \b
    Example usage:
      godot-bridge serve
      godot-bridge --url ws://127.0.0.1:9080 -v serve

    Each stdin line is a JSON-RPC 2.0 request whose method and params are
    sent to Godot as a command; the response is written to stdout.
    """
    provider = ctx.obj["provider"]
    connection = provider.get()
    logger.info("Starting Godot bridge", url=connection.url)

    try:
        asyncio.run(run_serve(connection))
    except KeyboardInterrupt:
        logger.info("Bridge interrupted by user")
    logger.info("Godot bridge stopped")
