"""Base class for console commands with logging and notifications wired in."""

from __future__ import annotations

import abc
import asyncio
import time

import structlog

from src.command.logger import CommandLogger
from src.command.reporting import format_bytes, peak_memory_bytes, report_exception
from src.core.config import Settings, get_settings
from src.notify.channels import RowCallback
from src.notify.dispatcher import NotificationDispatcher
from src.notify.factory import create_notification_stack


class LoggableCommand(abc.ABC):
    """A console command whose log records are routed to notification channels.

    Subclasses set ``name`` and implement ``handle()``. Inside ``handle()``
    ``self.logger`` is a :class:`CommandLogger`; anything logged at or above
    a channel's level is delivered through that channel.

    ``run()`` reports an uncaught exception as an ERROR event and returns a
    non-zero exit code instead of raising. Execution time and peak memory
    are logged when the command finishes either way.
    """

    name: str = "command"

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self.dispatcher: NotificationDispatcher | None = None
        self.logger: CommandLogger | None = None

    @abc.abstractmethod
    async def handle(self) -> None:
        """Command body."""

    def database_row_callback(self) -> RowCallback | None:
        """Optional hook returning extra keys to merge into stored rows."""
        return None

    def create_dispatcher(self) -> NotificationDispatcher:
        return create_notification_stack(
            self._settings,
            self.name,
            row_callback=self.database_row_callback(),
        )

    async def run(self) -> int:
        self.dispatcher = self.create_dispatcher()
        self.logger = CommandLogger(self.dispatcher, self.name)
        structlog.contextvars.bind_contextvars(command=self.name)

        started = time.perf_counter()
        exit_code = 0
        try:
            await self.logger.info(f"Command `{self.name}` initialized.")
            await self.handle()
        except Exception as exc:
            await report_exception(self.logger, exc)
            exit_code = 1
        finally:
            elapsed = round(time.perf_counter() - started, 3)
            await self.logger.info(f"Execution time: {elapsed} sec.")
            await self.logger.info(f"Memory peak usage: {format_bytes(peak_memory_bytes())}.")
            await self.dispatcher.close()
            structlog.contextvars.unbind_contextvars("command")

        return exit_code

    def execute(self) -> int:
        """Synchronous entry point for console scripts."""
        return asyncio.run(self.run())
