"""Notification routing — channels, deduplication, formatting and dispatch."""

from src.notify.channels import DatabaseChannel, EmailChannel, NotificationChannel
from src.notify.dedupe import DeduplicationGate, fingerprint
from src.notify.dispatcher import NotificationDispatcher
from src.notify.factory import create_notification_stack
from src.notify.formatters import format_database_row, format_email, render_html
from src.notify.recipients import normalize_recipients
from src.notify.store import NotificationStore, SqliteNotificationStore
from src.notify.transports import (
    MailTransport,
    MandrillTransport,
    NativeMailTransport,
    SmtpTransport,
    resolve_transport_kind,
    select_transport,
)
from src.notify.types import ChannelOutcome, FormattedMessage, TransportKind

__all__ = [
    "ChannelOutcome",
    "DatabaseChannel",
    "DeduplicationGate",
    "EmailChannel",
    "FormattedMessage",
    "MailTransport",
    "MandrillTransport",
    "NativeMailTransport",
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationStore",
    "SmtpTransport",
    "SqliteNotificationStore",
    "TransportKind",
    "create_notification_stack",
    "fingerprint",
    "format_database_row",
    "format_email",
    "normalize_recipients",
    "render_html",
    "resolve_transport_kind",
    "select_transport",
]
