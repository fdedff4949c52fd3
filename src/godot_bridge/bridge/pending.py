"""PendingTable - Commands awaiting a correlated response.

Each entry owns a future and a timeout handle. An entry leaves the table
exactly once: on a matching response, on its timeout, when its send fails,
or in a sweep on disconnect / connection loss.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .errors import BridgeError, CommandTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class PendingCommand:
    """A command sent to Godot whose outcome has not arrived yet."""

    correlation_id: str
    method: str
    future: asyncio.Future
    timer: Optional[asyncio.TimerHandle] = None

    def resolve(self, result: Any) -> None:
        if not self.future.done():
            self.future.set_result(result)

    def reject(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)


class PendingTable:
    """Pending commands keyed by correlation id."""

    def __init__(self) -> None:
        self._commands: dict[str, PendingCommand] = {}

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, correlation_id: object) -> bool:
        return correlation_id in self._commands

    def ids(self) -> list[str]:
        """Correlation ids currently pending."""
        return list(self._commands)

    def register(self, correlation_id: str, method: str, timeout: float) -> asyncio.Future:
        """Register a command and schedule its timeout.

        Args:
            correlation_id: Id the response will carry
            method: Command name (used in the timeout message)
            timeout: Seconds to wait for the response

        Returns:
            Future settled with the command outcome
        """
        loop = asyncio.get_running_loop()
        command = PendingCommand(
            correlation_id=correlation_id,
            method=method,
            future=loop.create_future(),
        )
        command.timer = loop.call_later(timeout, self._expire, correlation_id)
        self._commands[correlation_id] = command
        return command.future

    def pop(self, correlation_id: str) -> Optional[PendingCommand]:
        """Remove a command and cancel its timeout.

        Returns:
            The removed command, or None if it is not pending
        """
        command = self._commands.pop(correlation_id, None)
        if command is not None and command.timer is not None:
            command.timer.cancel()
        return command

    def discard(self, correlation_id: str) -> None:
        """Remove a command without settling it."""
        self.pop(correlation_id)

    def resolve(self, correlation_id: str, result: Any) -> bool:
        """Resolve a pending command with a result.

        Returns:
            True if a pending command matched
        """
        command = self.pop(correlation_id)
        if command is None:
            return False
        command.resolve(result)
        return True

    def reject(self, correlation_id: str, error: BaseException) -> bool:
        """Reject a pending command with an error.

        Returns:
            True if a pending command matched
        """
        command = self.pop(correlation_id)
        if command is None:
            return False
        command.reject(error)
        return True

    def fail_all(self, make_error: Callable[[], BridgeError]) -> int:
        """Reject every pending command.

        Args:
            make_error: Factory for the error given to each command

        Returns:
            Number of commands rejected
        """
        count = 0
        for correlation_id in self.ids():
            if self.reject(correlation_id, make_error()):
                count += 1
        return count

    def _expire(self, correlation_id: str) -> None:
        command = self._commands.pop(correlation_id, None)
        if command is None:
            return
        logger.error(f"Command timed out: {command.method} (ID: {correlation_id})")
        command.reject(
            CommandTimeoutError(
                message=f"Command timed out: {command.method}",
                data={"method": command.method, "id": correlation_id},
            )
        )
