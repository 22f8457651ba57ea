"""Tests for exception reporting helpers and byte formatting."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.command.logger import CommandLogger
from src.command.reporting import (
    exception_context,
    format_bytes,
    peak_memory_bytes,
    report_exception,
)
from src.core.exceptions import CommandRuntimeError
from src.core.types import Event, Severity
from src.notify.dispatcher import NotificationDispatcher


def _raise(exc: Exception) -> Exception:
    try:
        raise exc
    except Exception as caught:
        return caught


class TestFormatBytes:
    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, "0 B"),
            (512, "512 B"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (20 * 1024 * 1024, "20 MB"),
            (3 * 1024**3 + 1024**3 // 4, "3.25 GB"),
            (-5, "0 B"),
        ],
    )
    def test_format(self, size: int, expected: str) -> None:
        assert format_bytes(size) == expected

    def test_peak_memory_positive(self) -> None:
        assert peak_memory_bytes() > 0


class TestExceptionContext:
    def test_plain_exception(self) -> None:
        exc = _raise(ValueError("bad value"))
        ctx = exception_context(exc)
        assert ctx["message"] == "bad value"
        assert ctx["type"] == "ValueError"
        assert ctx["code"] == 0
        assert ctx["file"].endswith("test_reporting.py")
        assert isinstance(ctx["line"], int)
        assert "context" not in ctx

    def test_errno_used_as_code(self) -> None:
        exc = _raise(FileNotFoundError(2, "No such file"))
        assert exception_context(exc)["code"] == 2

    def test_runtime_error_context_attached(self) -> None:
        exc = _raise(CommandRuntimeError("import failed", context={"row": 17}))
        assert exception_context(exc)["context"] == {"row": 17}

    def test_runtime_error_without_context(self) -> None:
        exc = _raise(CommandRuntimeError("import failed"))
        assert "context" not in exception_context(exc)

    def test_unraised_exception(self) -> None:
        ctx = exception_context(RuntimeError("never raised"))
        assert ctx["file"] is None
        assert ctx["line"] is None


class TestReportException:
    async def test_reported_as_error_event(self) -> None:
        dispatcher = NotificationDispatcher()
        dispatcher.dispatch = AsyncMock(return_value={})  # type: ignore[method-assign]
        log = CommandLogger(dispatcher, "cmd")

        await report_exception(log, _raise(CommandRuntimeError("boom", context={"k": "v"})))

        event: Event = dispatcher.dispatch.call_args[0][0]
        assert event.severity is Severity.ERROR
        assert event.message == "boom"
        assert event.context["message"] == "boom"
        assert event.context["context"] == {"k": "v"}
