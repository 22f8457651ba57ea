"""Exception hierarchy for the notifier."""

from __future__ import annotations

from typing import Any


class NotifyError(Exception):
    """Base exception for all notifier errors."""


class NotifyConfigError(NotifyError):
    """Configuration that cannot produce a usable channel or store."""


class CommandRuntimeError(NotifyError):
    """Command failure carrying structured context for the error report."""

    def __init__(self, message: str = "", context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = dict(context or {})
