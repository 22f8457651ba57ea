"""Notification channels — per-channel enablement, level filter and delivery."""

from __future__ import annotations

import abc
from collections.abc import Callable, Iterable
from typing import Any

import structlog

from src.core.config import (
    DEFAULT_SENDER,
    DEFAULT_SUBJECT,
    DatabaseChannelConfig,
    DedupeConfig,
    EmailChannelConfig,
    MailConfig,
)
from src.core.exceptions import NotifyConfigError
from src.core.types import Event, Recipient, Severity
from src.notify.dedupe import DeduplicationGate
from src.notify.formatters import format_database_row, format_email
from src.notify.recipients import RecipientInput, normalize_recipients
from src.notify.store import NotificationStore, SqliteNotificationStore
from src.notify.transports import MailTransport, resolve_transport_kind, select_transport
from src.notify.types import FormattedMessage, TransportKind

logger = structlog.get_logger(__name__)

RowCallback = Callable[[dict[str, Any]], dict[str, Any]]

def _gate(dedupe: DedupeConfig | None) -> DeduplicationGate | None:
    if dedupe is None:
        return None
    return DeduplicationGate(window_secs=dedupe.window_secs)


class NotificationChannel(abc.ABC):
    """Base class for notification channels.

    ``name`` keys the outcome map. It defaults to the class attribute and can
    be overridden per instance.
    """

    name: str = "channel"

    def __init__(
        self,
        level: Severity = Severity.NOTICE,
        dedupe: DeduplicationGate | None = None,
        name: str | None = None,
    ) -> None:
        if name is not None:
            self.name = name
        self._level = level
        self._dedupe = dedupe

    def minimum_severity(self) -> Severity:
        return self._level

    @property
    def dedupe(self) -> DeduplicationGate | None:
        return self._dedupe

    @abc.abstractmethod
    def is_enabled(self) -> bool:
        """Whether this channel can deliver anything at all."""

    @abc.abstractmethod
    async def deliver(self, event: Event) -> bool:
        """Format and hand *event* to the transport. Returns True on success."""

    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class EmailChannel(NotificationChannel):
    """Mails HTML-formatted events to a validated recipient list.

    The transport is picked once from the mail driver. A disabled channel,
    an empty recipient list, or a ``none`` driver leaves it without a
    transport, and every dispatch becomes a no-op.
    """

    name = "email"

    def __init__(
        self,
        mail: MailConfig,
        recipients: RecipientInput | Iterable[RecipientInput] = None,
        *,
        enabled: bool = True,
        level: Severity = Severity.NOTICE,
        sender: Recipient = DEFAULT_SENDER,
        subject: str = DEFAULT_SUBJECT,
        environment: str = "production",
        command: str = "",
        dedupe: DeduplicationGate | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(level=level, dedupe=dedupe, name=name)
        self._enabled = enabled
        self._recipients = normalize_recipients(recipients)
        self._sender = sender
        self._subject = subject
        self._environment = environment
        self._command = command
        self._transport_kind = resolve_transport_kind(mail.driver)
        self._transport = self._create_transport(mail)

    @classmethod
    def from_config(
        cls,
        config: EmailChannelConfig,
        mail: MailConfig,
        environment: str,
        command: str,
    ) -> EmailChannel:
        return cls(
            mail,
            config.recipients,
            enabled=config.enabled,
            level=config.level,
            sender=config.sender,
            subject=config.subject,
            environment=environment,
            command=command,
            dedupe=_gate(config.dedupe),
        )

    def _create_transport(self, mail: MailConfig) -> MailTransport | None:
        if not self._enabled:
            return None
        if not self._recipients:
            logger.debug("email_channel_no_recipients", command=self._command)
            return None
        if self._transport_kind is None:
            return None
        return select_transport(self._transport_kind, mail, self._sender, self._recipients)

    @property
    def transport(self) -> MailTransport | None:
        return self._transport

    @property
    def transport_kind(self) -> TransportKind | None:
        return self._transport.kind if self._transport is not None else None

    def is_enabled(self) -> bool:
        return self._transport is not None

    def recipients(self) -> list[Recipient]:
        return list(self._recipients)

    def build_payload(self, event: Event) -> FormattedMessage:
        return format_email(event, self._subject, self._environment, self._command)

    async def deliver(self, event: Event) -> bool:
        if self._transport is None:
            return False
        return await self._transport.send(self.build_payload(event))

    async def close(self) -> None:
        if self._transport is not None:
            await self._transport.close()


class DatabaseChannel(NotificationChannel):
    """Persists events as rows in a durable store. Opt-in.

    A row callback returns keys to merge over the base row. Keys it adds
    become extra columns in the store.
    """

    name = "database"

    def __init__(
        self,
        store: NotificationStore | None,
        *,
        enabled: bool = False,
        level: Severity = Severity.NOTICE,
        dedupe: DeduplicationGate | None = None,
        row_callback: RowCallback | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(level=level, dedupe=dedupe, name=name)
        self._enabled = enabled
        self._store = store
        self._row_callback = row_callback

    @classmethod
    def from_config(
        cls,
        config: DatabaseChannelConfig,
        row_callback: RowCallback | None = None,
    ) -> DatabaseChannel:
        store = None
        if config.enabled:
            try:
                store = SqliteNotificationStore(config.path, config.table)
            except NotifyConfigError:
                logger.exception(
                    "database_channel_misconfigured", path=config.path, table=config.table
                )
        return cls(
            store,
            enabled=config.enabled,
            level=config.level,
            dedupe=_gate(config.dedupe),
            row_callback=row_callback,
        )

    @property
    def store(self) -> NotificationStore | None:
        return self._store

    def is_enabled(self) -> bool:
        return self._enabled and self._store is not None

    def build_payload(self, event: Event) -> dict[str, Any]:
        row = format_database_row(event)
        if self._row_callback is not None:
            row = {**row, **self._row_callback(row)}
        return row

    async def deliver(self, event: Event) -> bool:
        if self._store is None:
            return False
        await self._store.insert(self.build_payload(event))
        return True

    async def close(self) -> None:
        if self._store is not None:
            await self._store.close()
