"""Convenience factory for wiring the notification stack."""

from __future__ import annotations

import time

import structlog

from src.core.config import Settings
from src.notify.channels import DatabaseChannel, EmailChannel, RowCallback
from src.notify.dispatcher import Clock, NotificationDispatcher

logger = structlog.get_logger(__name__)


def create_notification_stack(
    settings: Settings,
    command: str,
    row_callback: RowCallback | None = None,
    clock: Clock = time.time,
) -> NotificationDispatcher:
    """Build a dispatcher with email and database channels from config.

    Both channels are always registered; a channel that config leaves
    unusable reports DISABLED on every dispatch.
    """
    email = EmailChannel.from_config(
        settings.notifications.email,
        settings.mail,
        environment=settings.app.environment,
        command=command,
    )
    database = DatabaseChannel.from_config(
        settings.notifications.database,
        row_callback=row_callback,
    )

    logger.debug(
        "notification_stack_created",
        command=command,
        email=email.is_enabled(),
        email_transport=email.transport_kind,
        database=database.is_enabled(),
    )

    return NotificationDispatcher(channels=[email, database], clock=clock)
