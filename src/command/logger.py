"""Per-command log sink that feeds events into the notification dispatcher."""

from __future__ import annotations

from typing import Any

import structlog

from src.core.logging import stdlib_level
from src.core.types import Event, Severity
from src.notify.dispatcher import NotificationDispatcher
from src.notify.types import ChannelOutcome


class CommandLogger:
    """Writes every record to structlog, then dispatches it as an Event.

    Each level method returns the per-channel outcome map from the dispatcher.
    """

    def __init__(self, dispatcher: NotificationDispatcher, command: str) -> None:
        self._dispatcher = dispatcher
        self._command = command
        self._log = structlog.get_logger("command").bind(command=command)

    @property
    def command(self) -> str:
        return self._command

    async def log(
        self, severity: Severity, message: str, /, **context: Any
    ) -> dict[str, ChannelOutcome]:
        self._log.log(stdlib_level(severity), message, severity=severity.name, context=context)
        event = Event(severity=severity, message=message, context=context)
        return await self._dispatcher.dispatch(event)

    async def debug(self, message: str, /, **context: Any) -> dict[str, ChannelOutcome]:
        return await self.log(Severity.DEBUG, message, **context)

    async def info(self, message: str, /, **context: Any) -> dict[str, ChannelOutcome]:
        return await self.log(Severity.INFO, message, **context)

    async def notice(self, message: str, /, **context: Any) -> dict[str, ChannelOutcome]:
        return await self.log(Severity.NOTICE, message, **context)

    async def warning(self, message: str, /, **context: Any) -> dict[str, ChannelOutcome]:
        return await self.log(Severity.WARNING, message, **context)

    async def error(self, message: str, /, **context: Any) -> dict[str, ChannelOutcome]:
        return await self.log(Severity.ERROR, message, **context)

    async def critical(self, message: str, /, **context: Any) -> dict[str, ChannelOutcome]:
        return await self.log(Severity.CRITICAL, message, **context)

    async def alert(self, message: str, /, **context: Any) -> dict[str, ChannelOutcome]:
        return await self.log(Severity.ALERT, message, **context)

    async def emergency(self, message: str, /, **context: Any) -> dict[str, ChannelOutcome]:
        return await self.log(Severity.EMERGENCY, message, **context)
