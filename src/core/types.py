"""Domain types shared across the notifier — severity levels and log events."""

from __future__ import annotations

import time
from collections.abc import Mapping
from enum import IntEnum
from types import MappingProxyType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


class Severity(IntEnum):
    """Log severity — ordered so comparisons work naturally.

    Numeric codes follow the syslog-derived values used by Monolog so that
    persisted rows stay comparable with existing notification tables.
    """

    DEBUG = 100
    INFO = 200
    NOTICE = 250
    WARNING = 300
    ERROR = 400
    CRITICAL = 500
    ALERT = 550
    EMERGENCY = 600

    @classmethod
    def parse(cls, value: Severity | int | str) -> Severity:
        """Resolve a severity from a member, numeric code, or case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        if name.isdigit():
            return cls(int(name))
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown severity: {value!r}") from None


class Event(BaseModel):
    """A single severity-tagged log event. Immutable once created.

    ``context`` is copied into a read-only mapping. Values nested inside it
    are not frozen.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str
    context: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    timestamp: float = Field(default_factory=time.time)

    @field_validator("context")
    @classmethod
    def _freeze_context(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @field_serializer("context")
    def _serialize_context(self, v: Mapping[str, Any]) -> dict[str, Any]:
        return dict(v)

    @property
    def level_name(self) -> str:
        return self.severity.name


class Recipient(BaseModel):
    """An email recipient. A bare string is shorthand for ``{"address": ...}``."""

    model_config = ConfigDict(frozen=True)

    address: str | None = None
    name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"address": data}
        return data
