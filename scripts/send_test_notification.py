#!/usr/bin/env python3
"""Test notification CLI — push one event through the configured channels.

Usage::

    # NOTICE event through the default config
    python scripts/send_test_notification.py

    # Custom config and level
    python scripts/send_test_notification.py --config config/settings.yaml --level ERROR

    # Name the originating command shown in the email subject
    python scripts/send_test_notification.py --command reports:daily --message "Disk full"

    # JSON output
    python scripts/send_test_notification.py --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import structlog

from src.core.config import load_settings
from src.core.logging import setup_logging
from src.core.types import Event, Severity
from src.notify.factory import create_notification_stack
from src.notify.types import ChannelOutcome

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Dispatch a single event and print per-channel outcomes."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    try:
        severity = Severity.parse(args.level)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    dispatcher = create_notification_stack(settings, args.command)
    event = Event(
        severity=severity,
        message=args.message,
        context={"source": "send_test_notification"},
    )
    try:
        outcomes = await dispatcher.dispatch(event)
    finally:
        await dispatcher.close()

    logger.info("test_notification_dispatched", outcomes=dict(outcomes))

    if args.json:
        print(json.dumps({name: str(o) for name, o in outcomes.items()}, indent=2))
    else:
        for name, outcome in outcomes.items():
            print(f"{name:<10}  {outcome}")

    return 0 if ChannelOutcome.FAILED not in outcomes.values() else 1


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Send a test notification through the configured channels.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--level",
        default="NOTICE",
        help="Severity of the test event (default: NOTICE)",
    )
    parser.add_argument(
        "--command",
        default="send-test-notification",
        help="Command name used in the email subject",
    )
    parser.add_argument(
        "--message",
        default="Test notification",
        help="Event message",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print outcomes as JSON",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
