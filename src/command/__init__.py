"""Console command lifecycle — log sink, exception reporting, metrics."""

from src.command.loggable import LoggableCommand
from src.command.logger import CommandLogger
from src.command.reporting import exception_context, format_bytes, report_exception

__all__ = [
    "CommandLogger",
    "LoggableCommand",
    "exception_context",
    "format_bytes",
    "report_exception",
]
