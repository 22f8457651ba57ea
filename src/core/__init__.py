"""Core module — config, types, logging, exceptions."""

from src.core.config import Settings, get_settings, load_settings, reset_settings
from src.core.exceptions import CommandRuntimeError, NotifyConfigError, NotifyError
from src.core.logging import setup_logging, stdlib_level
from src.core.types import Event, Recipient, Severity

__all__ = [
    "CommandRuntimeError",
    "Event",
    "NotifyConfigError",
    "NotifyError",
    "Recipient",
    "Settings",
    "Severity",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
    "stdlib_level",
]
