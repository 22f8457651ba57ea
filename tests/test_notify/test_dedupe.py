"""Tests for DeduplicationGate — window boundaries, fingerprinting, pruning."""

from __future__ import annotations

from src.core.types import Event, Severity
from src.notify.dedupe import DeduplicationGate, fingerprint


def _ev(message: str = "Disk almost full", severity: Severity = Severity.WARNING, **ctx: object) -> Event:
    return Event(severity=severity, message=message, context=dict(ctx), timestamp=0.0)


class TestFingerprint:
    def test_context_ignored(self) -> None:
        assert fingerprint(_ev(path="/a")) == fingerprint(_ev(path="/b"))

    def test_level_matters(self) -> None:
        assert fingerprint(_ev(severity=Severity.ERROR)) != fingerprint(_ev())

    def test_message_matters(self) -> None:
        assert fingerprint(_ev("one")) != fingerprint(_ev("two"))


class TestWindow:
    def test_repeat_within_window_suppressed(self) -> None:
        gate = DeduplicationGate(window_secs=60)
        assert gate.should_suppress(_ev(), now=0.0) is False
        assert gate.should_suppress(_ev(), now=30.0) is True

    def test_repeat_after_window_allowed(self) -> None:
        gate = DeduplicationGate(window_secs=60)
        assert gate.should_suppress(_ev(), now=0.0) is False
        assert gate.should_suppress(_ev(), now=61.0) is False

    def test_exact_window_boundary_allowed(self) -> None:
        gate = DeduplicationGate(window_secs=60)
        gate.should_suppress(_ev(), now=0.0)
        assert gate.should_suppress(_ev(), now=60.0) is False

    def test_suppressed_event_does_not_extend_window(self) -> None:
        gate = DeduplicationGate(window_secs=60)
        gate.should_suppress(_ev(), now=0.0)
        assert gate.should_suppress(_ev(), now=50.0) is True
        # Window still anchored at t=0.
        assert gate.should_suppress(_ev(), now=65.0) is False

    def test_different_messages_independent(self) -> None:
        gate = DeduplicationGate(window_secs=60)
        assert gate.should_suppress(_ev("one"), now=0.0) is False
        assert gate.should_suppress(_ev("two"), now=1.0) is False

    def test_context_difference_still_suppressed(self) -> None:
        gate = DeduplicationGate(window_secs=60)
        gate.should_suppress(_ev(row=1), now=0.0)
        assert gate.should_suppress(_ev(row=2), now=1.0) is True

    def test_zero_window_never_suppresses(self) -> None:
        gate = DeduplicationGate(window_secs=0)
        assert gate.should_suppress(_ev(), now=0.0) is False
        assert gate.should_suppress(_ev(), now=0.0) is False


class TestPruning:
    def test_expired_entries_removed(self) -> None:
        gate = DeduplicationGate(window_secs=10)
        gate.should_suppress(_ev("one"), now=0.0)
        gate.should_suppress(_ev("two"), now=5.0)
        assert len(gate) == 2
        gate.should_suppress(_ev("three"), now=12.0)
        # "one" aged out, "two" still live.
        assert len(gate) == 2

    def test_window_secs_property(self) -> None:
        assert DeduplicationGate(window_secs=42).window_secs == 42
