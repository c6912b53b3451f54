from __future__ import annotations

import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_HHMM = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be less than {max_len} characters")
    return value


def require_enum(value, enum_cls: Type[E], field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name}. Must be one of: {allowed}")


def require_hhmm(value: Optional[str], field_name: str) -> str:
    """Validate a time of day and return it zero-padded ("9:05" -> "09:05").

    Stored times are compared as strings, which only orders correctly when padded.
    """

    v = (value or "").strip()
    if not _HHMM.match(v):
        raise ValidationError(f"Invalid {field_name} format. Use HH:MM")
    hours, minutes = v.split(":")
    return f"{int(hours):02d}:{minutes}"


def require_time_order(start, end, message: str = "End time must be after start time") -> None:
    if not start < end:
        raise ValidationError(message)


def _parse_iso(value, field_name: str) -> datetime:
    v = (value or "").strip() if isinstance(value, str) else ""
    if not v:
        raise ValidationError(f"{field_name} is required")
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}")


def parse_date_value(value, field_name: str) -> date:
    """Accept a date, a datetime or an ISO string ("2024-01-10" or a full timestamp).

    The calendar day is taken as written; an offset never moves it to another day.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return _parse_iso(value, field_name).date()


def parse_datetime_value(value, field_name: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing "Z" is treated as UTC.

    Aware values are converted to naive UTC so they compare with stored DATETIME columns.
    """

    dt = value if isinstance(value, datetime) else _parse_iso(value, field_name)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
