"""Recipient normalization — drops empty and malformed addresses."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from email_validator import EmailNotValidError, validate_email

from src.core.types import Recipient

RecipientInput = Recipient | Mapping[str, Any] | str | None


def is_valid_address(address: str | None) -> bool:
    """Syntactic email check; no DNS or deliverability lookups."""
    if not address:
        return False
    try:
        validate_email(address, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _flatten(raw: RecipientInput | Iterable[RecipientInput]) -> list[RecipientInput]:
    if raw is None or isinstance(raw, (Recipient, Mapping, str)):
        return [raw]
    return list(raw)


def _coerce(item: RecipientInput) -> Recipient | None:
    if item is None:
        return None
    if isinstance(item, Recipient):
        return item
    return Recipient.model_validate(item)


def normalize_recipients(
    raw: RecipientInput | Iterable[RecipientInput],
) -> list[Recipient]:
    """Return the valid recipients from *raw*, in input order.

    A single recipient and a sequence of recipients are handled the same way.
    Running the result through again returns an equal list.
    """
    result: list[Recipient] = []
    for item in _flatten(raw):
        recipient = _coerce(item)
        if recipient is not None and is_valid_address(recipient.address):
            result.append(recipient)
    return result
