"""Mail transports — SMTP, Mandrill API and local sendmail delivery."""

from __future__ import annotations

import abc
import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr

import aiohttp
import structlog

from src.core.config import MailConfig
from src.core.types import Recipient
from src.notify.types import FormattedMessage, TransportKind

logger = structlog.get_logger(__name__)

_TEMPLATED_DRIVERS = frozenset({"mail", "smtp", "sendmail"})
_BULK_API_DRIVERS = frozenset({"mandrill"})
_DISABLED_DRIVERS = frozenset({"none", "null"})


def resolve_transport_kind(driver: str) -> TransportKind | None:
    """Map a configured mail driver to a transport kind.

    Returns None when mail is switched off. Unrecognised drivers fall back
    to NATIVE so a usable transport always exists.
    """
    name = driver.strip().lower()
    if name in _DISABLED_DRIVERS:
        return None
    if name in _TEMPLATED_DRIVERS:
        return TransportKind.TEMPLATED
    if name in _BULK_API_DRIVERS:
        return TransportKind.BULK_API
    return TransportKind.NATIVE


def to_rfc2822(recipients: Recipient | list[Recipient]) -> str:
    """Format one or more recipients as an RFC 2822 address list."""
    if isinstance(recipients, Recipient):
        recipients = [recipients]
    return ", ".join(formataddr((r.name or "", r.address or "")) for r in recipients)


class MailTransport(abc.ABC):
    """Base class for mail delivery strategies."""

    kind: TransportKind

    def __init__(self, sender: Recipient, recipients: list[Recipient]) -> None:
        self._sender = sender
        self._recipients = list(recipients)
        # Headers shared by every message this transport sends.
        self._template_headers: dict[str, str] = {
            "From": to_rfc2822(sender),
            "To": to_rfc2822(self._recipients),
        }

    @property
    def recipients(self) -> list[Recipient]:
        return list(self._recipients)

    def compose(self, msg: FormattedMessage) -> EmailMessage:
        """Build a MIME message from the template headers and *msg*."""
        message = EmailMessage()
        for header, value in self._template_headers.items():
            message[header] = value
        message["Subject"] = msg.subject
        subtype = msg.content_type.split("/", 1)[-1]
        message.set_content(msg.body, subtype=subtype, charset=msg.charset)
        return message

    @abc.abstractmethod
    async def send(self, msg: FormattedMessage) -> bool:
        """Deliver a formatted message. Returns True on success."""

    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class SmtpTransport(MailTransport):
    """Sends a copy of the templated message through an SMTP relay."""

    kind = TransportKind.TEMPLATED

    def __init__(
        self, config: MailConfig, sender: Recipient, recipients: list[Recipient]
    ) -> None:
        super().__init__(sender, recipients)
        self._host = config.host
        self._port = config.port
        self._username = config.username
        self._password = config.password.get_secret_value()
        self._use_tls = config.use_tls
        self._timeout = config.timeout_secs

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            if self._use_tls:
                server.starttls(context=ssl.create_default_context())
            if self._username:
                server.login(self._username, self._password)
            server.send_message(message)

    async def send(self, msg: FormattedMessage) -> bool:
        message = self.compose(msg)
        try:
            await asyncio.to_thread(self._deliver, message)
        except Exception:
            logger.exception("smtp_send_error", host=self._host, port=self._port)
            return False
        return True


class MandrillTransport(MailTransport):
    """Delivers through the Mandrill ``messages/send`` HTTP API."""

    kind = TransportKind.BULK_API

    def __init__(
        self, config: MailConfig, sender: Recipient, recipients: list[Recipient]
    ) -> None:
        super().__init__(sender, recipients)
        self._secret = config.mandrill_secret.get_secret_value()
        self._url = config.mandrill_url
        self._timeout = aiohttp.ClientTimeout(total=config.timeout_secs)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def build_payload(self, msg: FormattedMessage) -> dict:
        return {
            "key": self._secret,
            "message": {
                "html": msg.body,
                "subject": msg.subject,
                "from_email": self._sender.address,
                "from_name": self._sender.name or "",
                "to": [
                    {"email": r.address, "name": r.name or "", "type": "to"}
                    for r in self._recipients
                ],
                "headers": {"Content-Type": f"{msg.content_type}; charset={msg.charset}"},
            },
        }

    async def send(self, msg: FormattedMessage) -> bool:
        payload = self.build_payload(msg)
        try:
            session = self._get_session()
            async with session.post(self._url, json=payload) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    logger.warning(
                        "mandrill_send_failed",
                        status=resp.status,
                        body=body[:200],
                    )
                    return False
                results = await resp.json()
        except Exception:
            logger.exception("mandrill_send_error")
            return False

        rejected = [
            r for r in results or []
            if isinstance(r, dict) and r.get("status") in ("rejected", "invalid")
        ]
        if rejected:
            logger.warning(
                "mandrill_recipients_rejected",
                rejected=[r.get("email") for r in rejected],
                reasons=[r.get("reject_reason") for r in rejected],
            )
            return False
        return True

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


class NativeMailTransport(MailTransport):
    """Pipes the message to the local ``sendmail`` binary."""

    kind = TransportKind.NATIVE

    def __init__(
        self, config: MailConfig, sender: Recipient, recipients: list[Recipient]
    ) -> None:
        super().__init__(sender, recipients)
        self._sendmail_path = config.sendmail_path

    async def send(self, msg: FormattedMessage) -> bool:
        message = self.compose(msg)
        try:
            process = await asyncio.create_subprocess_exec(
                self._sendmail_path,
                "-t",
                "-i",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await process.communicate(message.as_bytes())
        except Exception:
            logger.exception("sendmail_send_error", path=self._sendmail_path)
            return False

        if process.returncode != 0:
            logger.warning(
                "sendmail_send_failed",
                returncode=process.returncode,
                stderr=stderr.decode(errors="replace")[:200],
            )
            return False
        return True


_TRANSPORTS: dict[TransportKind, type[MailTransport]] = {
    TransportKind.TEMPLATED: SmtpTransport,
    TransportKind.BULK_API: MandrillTransport,
    TransportKind.NATIVE: NativeMailTransport,
}


def select_transport(
    kind: TransportKind,
    config: MailConfig,
    sender: Recipient,
    recipients: list[Recipient],
) -> MailTransport:
    """Construct the transport for *kind*."""
    return _TRANSPORTS[kind](config, sender, recipients)
