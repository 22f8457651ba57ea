"""In-process deduplication gate for noisy repeated events."""

from __future__ import annotations

import hashlib

import structlog

from src.core.types import Event

logger = structlog.get_logger(__name__)


def fingerprint(event: Event) -> str:
    """Coarse identity of an event: level name and message, context ignored."""
    key = f"{event.level_name}:{event.message}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


class DeduplicationGate:
    """Suppresses an event when the same fingerprint was let through recently.

    State lives in memory and belongs to a single channel. It does not
    survive a restart and is not shared between processes.
    """

    def __init__(self, window_secs: float = 60.0) -> None:
        self._window_secs = window_secs
        # fingerprint -> time the last allowed event was recorded.
        self._last_sent: dict[str, float] = {}

    @property
    def window_secs(self) -> float:
        return self._window_secs

    def should_suppress(self, event: Event, now: float) -> bool:
        self._prune(now)

        key = fingerprint(event)
        last = self._last_sent.get(key)
        if last is not None and now - last < self._window_secs:
            logger.debug(
                "notification_suppressed",
                level=event.level_name,
                message=event.message,
                since_last_secs=round(now - last, 3),
            )
            return True

        self._last_sent[key] = now
        return False

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, sent_at in self._last_sent.items()
            if now - sent_at >= self._window_secs
        ]
        for key in expired:
            del self._last_sent[key]

    def __len__(self) -> int:
        return len(self._last_sent)
