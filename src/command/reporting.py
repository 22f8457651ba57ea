"""Exception reporting and process-completion metrics for commands."""

from __future__ import annotations

import resource
import sys
import traceback
from typing import Any

from src.command.logger import CommandLogger
from src.core.exceptions import CommandRuntimeError
from src.notify.types import ChannelOutcome

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: int, precision: int = 2) -> str:
    """Human-readable byte count, e.g. ``1536`` -> ``"1.5 KB"``."""
    value = float(max(size, 0))
    unit = 0
    while value >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, precision):g} {_BYTE_UNITS[unit]}"


def peak_memory_bytes() -> int:
    """Peak resident set size of this process."""
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere.
    return peak if sys.platform == "darwin" else peak * 1024


def exception_context(exc: BaseException) -> dict[str, Any]:
    """Structured context describing where *exc* was raised."""
    frames = traceback.extract_tb(exc.__traceback__)
    origin = frames[-1] if frames else None
    context: dict[str, Any] = {
        "code": getattr(exc, "code", None) or getattr(exc, "errno", None) or 0,
        "message": str(exc),
        "type": type(exc).__name__,
        "file": origin.filename if origin else None,
        "line": origin.lineno if origin else None,
    }
    if isinstance(exc, CommandRuntimeError) and exc.context:
        context["context"] = exc.context
    return context


async def report_exception(
    cmd_logger: CommandLogger, exc: BaseException
) -> dict[str, ChannelOutcome]:
    """Log *exc* as an ERROR event so it reaches the notification channels."""
    return await cmd_logger.error(str(exc) or type(exc).__name__, **exception_context(exc))
