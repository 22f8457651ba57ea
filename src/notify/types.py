"""Domain types for the notification subsystem."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from src.core.types import Severity


class TransportKind(StrEnum):
    """Mail delivery strategy, resolved once from the configured driver."""

    TEMPLATED = "TEMPLATED"  # SMTP with a pre-built message template
    BULK_API = "BULK_API"    # Mandrill HTTP API
    NATIVE = "NATIVE"        # local sendmail binary


class ChannelOutcome(StrEnum):
    """Result of evaluating one channel for one event."""

    SENT = "SENT"
    FAILED = "FAILED"
    DISABLED = "DISABLED"
    FILTERED = "FILTERED"
    SUPPRESSED = "SUPPRESSED"


class FormattedMessage(BaseModel):
    """Rendered email ready to hand to a mail transport."""

    severity: Severity
    subject: str
    body: str
    content_type: str = "text/html"
    charset: str = "utf-8"
