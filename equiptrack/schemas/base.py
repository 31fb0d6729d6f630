"""
Base schema classes with custom serialization.

Dates go over the wire as plain ISO dates (``YYYY-MM-DD``) because they
represent calendar days. Timestamps are emitted in UTC with millisecond
precision and a ``Z`` suffix, the same shape JavaScript's
``toISOString()`` produces, so web clients can parse them directly.
"""

from datetime import date, datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer


def serialize_datetime_js(dt: datetime | None) -> str | None:
    """Serialize a timestamp as ``2025-12-08T09:01:16.715Z``."""
    if dt is None:
        return None

    # Assume UTC for naive datetimes
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    formatted = dt.strftime("%Y-%m-%dT%H:%M:%S")
    ms = dt.microsecond // 1000
    return f"{formatted}.{ms:03d}Z"


def serialize_date_simple(d: date | None) -> str | None:
    """Serialize date as simple ISO date string (YYYY-MM-DD)."""
    if d is None:
        return None
    return d.isoformat()


def blank_to_none(value: Any) -> Any:
    """Treat empty form values as "not set"."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Annotated types for Pydantic v2 serialization
DateTimeJS = Annotated[datetime, PlainSerializer(serialize_datetime_js, return_type=str)]
DateSimple = Annotated[date, PlainSerializer(serialize_date_simple, return_type=str)]

# Request-side date that accepts "" as None
OptionalDate = Annotated[Optional[date], BeforeValidator(blank_to_none)]


class BaseSchema(BaseModel):
    """
    Base schema class with standard configuration.
    Use DateTimeJS or DateSimple types for fields.
    """

    model_config = ConfigDict(
        from_attributes=True,
    )


class RequestSchema(BaseModel):
    """Base class for request bodies: trims strings and stores enums as values."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        use_enum_values=True,
        validate_default=True,
        extra="ignore",
    )
