"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator

from src.core.types import Recipient, Severity

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

DEFAULT_SUBJECT = "[{environment}] {level_name} in `{command}` command"

DEFAULT_SENDER = Recipient(address="no-reply@example.com", name="Command Notification")


class AppConfig(BaseModel):
    """Application identity."""

    environment: str = "production"


class MailConfig(BaseModel):
    """Mail delivery configuration.

    ``driver`` picks the transport once at startup: ``mail``/``smtp``/
    ``sendmail`` send through SMTP, ``mandrill`` uses the Mandrill API,
    ``none``/``null`` disables email, anything else pipes to sendmail.
    """

    driver: str = "smtp"
    host: str = "localhost"
    port: int = 25
    username: str = ""
    password: SecretStr = SecretStr("")
    use_tls: bool = False
    timeout_secs: float = 10.0
    sendmail_path: str = "/usr/sbin/sendmail"
    mandrill_secret: SecretStr = SecretStr("")
    mandrill_url: str = "https://mandrillapp.com/api/1.0/messages/send.json"


class DedupeConfig(BaseModel):
    """Suppress repeats of the same (level, message) within a window."""

    window_secs: int = Field(default=60, ge=0)


class _ChannelConfig(BaseModel):
    enabled: bool = False
    level: Severity = Severity.NOTICE
    dedupe: DedupeConfig | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> Severity:
        return Severity.parse(value)


class EmailChannelConfig(_ChannelConfig):
    """Email notification channel configuration."""

    enabled: bool = True
    recipients: Recipient | list[Recipient] = Field(default_factory=Recipient)
    sender: Recipient = DEFAULT_SENDER
    subject: str = DEFAULT_SUBJECT


class DatabaseChannelConfig(_ChannelConfig):
    """Database notification channel configuration (opt-in)."""

    path: str = "storage/notifications.sqlite"
    table: str = "command_notifications"


class NotificationsConfig(BaseModel):
    """Container for all channel configurations."""

    email: EmailChannelConfig = EmailChannelConfig()
    database: DatabaseChannelConfig = DatabaseChannelConfig()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    app: AppConfig = AppConfig()
    mail: MailConfig = MailConfig()
    notifications: NotificationsConfig = NotificationsConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
