"""KeepAlive - Periodic WebSocket pings while connected.

Keeps intermediaries and the Godot plugin from reclaiming an idle socket.
Pings are protocol-level frames, not correlated commands.
"""

import asyncio
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Default intervals
DEFAULT_PING_INTERVAL = 20.0
DEFAULT_INITIAL_DELAY = 0.5  # First ping shortly after connecting


class KeepAlive:
    """Sends pings on an open WebSocket until stopped or the socket closes."""

    def __init__(
        self,
        interval: float = DEFAULT_PING_INTERVAL,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
    ):
        """Initialize KeepAlive.

        Args:
            interval: Seconds between pings after the first one
            initial_delay: Seconds before the first ping
        """
        self.interval = interval
        self.initial_delay = initial_delay

        self._task: Optional[asyncio.Task] = None
        self._ping_count = 0

    @property
    def is_running(self) -> bool:
        """Whether the ping timer is active."""
        return self._task is not None and not self._task.done()

    @property
    def ping_count(self) -> int:
        """Number of pings sent since creation."""
        return self._ping_count

    def start(self, ws: Any) -> None:
        """Start pinging ``ws``, replacing any running timer."""
        self.stop()
        logger.info(
            f"Starting keep-alive ping after {self.initial_delay}s, "
            f"then every {self.interval}s"
        )
        self._task = asyncio.create_task(self._run(ws))

    def stop(self) -> None:
        """Stop the ping timer."""
        if self._task is not None:
            if not self._task.done():
                logger.info("Stopping keep-alive ping")
                self._task.cancel()
            self._task = None

    async def _run(self, ws: Any) -> None:
        await asyncio.sleep(self.initial_delay)
        while True:
            if ws.closed:
                logger.info("WebSocket not open, stopping keep-alive ping")
                return
            try:
                await ws.ping()
            except (ConnectionError, RuntimeError) as e:
                logger.warning(f"Keep-alive ping failed, stopping: {e}")
                return
            self._ping_count += 1
            logger.debug(f"Keep-alive ping sent ({self._ping_count})")
            await asyncio.sleep(self.interval)
