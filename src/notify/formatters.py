"""Pure functions that render Events for each channel's transport."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from html import escape as html_escape
from typing import Any

from src.core.types import Event, Severity
from src.notify.types import FormattedMessage

# Heading colours keyed by severity.
_LEVEL_COLORS: dict[Severity, str] = {
    Severity.DEBUG: "#cccccc",
    Severity.INFO: "#468847",
    Severity.NOTICE: "#3a87ad",
    Severity.WARNING: "#c09853",
    Severity.ERROR: "#f0ad4e",
    Severity.CRITICAL: "#ff7708",
    Severity.ALERT: "#c12a19",
    Severity.EMERGENCY: "#000000",
}


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, sort_keys=True, default=str, ensure_ascii=False)


def render_subject(
    template: str, event: Event, environment: str, command: str
) -> str:
    """Fill the subject template.

    Placeholders: ``{environment}`` (upper-cased), ``{command}``, ``{level_name}``.
    """
    return template.format(
        environment=environment.upper(),
        command=command,
        level_name=event.level_name,
    )


def _row(label: str, value: str, pre: bool = False) -> str:
    cell = f"<pre>{html_escape(value)}</pre>" if pre else html_escape(value)
    return (
        "<tr style=\"padding: 4px; text-align: left;\">\n"
        f"<th style=\"vertical-align: top; background: #ccc; color: #000;\" width=\"100\">"
        f"{html_escape(label)}:</th>\n"
        f"<td style=\"padding: 4px; text-align: left; vertical-align: top;"
        f" background: #eee; color: #000;\">{cell}</td>\n"
        "</tr>"
    )


def render_html(event: Event, title: str = "") -> str:
    """Render *event* as a standalone HTML document."""
    color = _LEVEL_COLORS.get(event.severity, "#cccccc")
    rows = [
        _row("Message", event.message),
        _row("Level", event.level_name),
        _row("Time", _iso(event.timestamp)),
    ]
    if event.context:
        rows.extend(
            _row(str(key), _stringify(value), pre=not isinstance(value, str))
            for key, value in event.context.items()
        )

    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{html_escape(title or event.level_name)}</title>\n"
        "</head>\n<body>\n"
        f"<h1 style=\"background: {color}; color: #ffffff; padding: 5px;\""
        f" class=\"monolog-output\">{html_escape(event.level_name)}</h1>\n"
        "<table cellspacing=\"1\" width=\"100%\" class=\"monolog-output\">\n"
        + "\n".join(rows)
        + "\n</table>\n</body>\n</html>\n"
    )


def format_email(
    event: Event, subject_template: str, environment: str, command: str
) -> FormattedMessage:
    """Convert an Event to a FormattedMessage for a mail transport."""
    subject = render_subject(subject_template, event, environment, command)
    return FormattedMessage(
        severity=event.severity,
        subject=subject,
        body=render_html(event, title=subject),
    )


def format_database_row(event: Event) -> dict[str, Any]:
    """Convert an Event to a row for the notifications table."""
    return {
        "level": int(event.severity),
        "level_name": event.level_name,
        "message": event.message,
        "context": json.dumps(dict(event.context), default=str, ensure_ascii=False),
        "created_at": _iso(event.timestamp),
    }
