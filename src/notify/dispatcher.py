"""Central notification dispatcher — routes events to channels."""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from src.core.types import Event
from src.notify.channels import NotificationChannel
from src.notify.types import ChannelOutcome

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


class NotificationDispatcher:
    """Routes log events to notification channels.

    - Each channel is evaluated on its own: enabled, level, dedupe, deliver.
    - A failing channel is reported as FAILED and never stops the others.
    - Nothing raised by a channel escapes ``dispatch``.
    - Channel names key the outcome map and must be unique.
    """

    def __init__(
        self,
        channels: list[NotificationChannel] | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._channels: list[NotificationChannel] = []
        self._clock = clock
        for ch in channels or []:
            self.add_channel(ch)

    @property
    def channels(self) -> list[NotificationChannel]:
        return list(self._channels)

    def add_channel(self, channel: NotificationChannel) -> None:
        if any(ch.name == channel.name for ch in self._channels):
            raise ValueError(f"Duplicate notification channel name: {channel.name!r}")
        self._channels.append(channel)

    async def dispatch(self, event: Event) -> dict[str, ChannelOutcome]:
        """Evaluate every channel for *event* and return per-channel outcomes."""
        now = self._clock()
        outcomes: dict[str, ChannelOutcome] = {}
        for ch in self._channels:
            outcomes[ch.name] = await self._dispatch_to_channel(ch, event, now)
        return outcomes

    async def _dispatch_to_channel(
        self, ch: NotificationChannel, event: Event, now: float
    ) -> ChannelOutcome:
        try:
            if not ch.is_enabled():
                return ChannelOutcome.DISABLED

            if event.severity < ch.minimum_severity():
                return ChannelOutcome.FILTERED

            if ch.dedupe is not None and ch.dedupe.should_suppress(event, now):
                return ChannelOutcome.SUPPRESSED

            sent = await ch.deliver(event)
        except Exception:
            logger.exception(
                "channel_dispatch_error",
                channel=ch.name,
                level=event.level_name,
                message=event.message,
            )
            return ChannelOutcome.FAILED

        if not sent:
            logger.warning("channel_delivery_failed", channel=ch.name, level=event.level_name)
            return ChannelOutcome.FAILED
        return ChannelOutcome.SENT

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        for ch in self._channels:
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=ch.name)
