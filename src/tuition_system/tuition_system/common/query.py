"""Query-string parsing for list and analytics endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional

from ..core.exceptions import ValidationError
from .validators import parse_date_value


@dataclass(frozen=True)
class DateRange:
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class AttendanceFilters:
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None
    subject_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def _opt(args: Mapping[str, str], key: str) -> Optional[str]:
    value = args.get(key)
    value = value.strip() if value else ""
    return value or None


def parse_date_range(args: Mapping[str, str]) -> DateRange:
    start_s = _opt(args, "startDate")
    end_s = _opt(args, "endDate")
    start = parse_date_value(start_s, "startDate") if start_s else None
    end = parse_date_value(end_s, "endDate") if end_s else None
    if start and end and start > end:
        raise ValidationError("startDate must not be after endDate")
    return DateRange(start=start, end=end)


def parse_attendance_filters(args: Mapping[str, str]) -> AttendanceFilters:
    rng = parse_date_range(args)
    return AttendanceFilters(
        teacher_id=_opt(args, "teacherId"),
        student_id=_opt(args, "studentId"),
        subject_id=_opt(args, "subjectId"),
        start_date=rng.start,
        end_date=rng.end,
    )


def parse_limit(args: Mapping[str, str], default: int, *, key: str = "limit") -> int:
    raw = _opt(args, key)
    if raw is None:
        return default
    try:
        limit = int(raw)
    except ValueError:
        raise ValidationError(f"Invalid {key}")
    if limit <= 0:
        raise ValidationError(f"{key} must be a positive number")
    return limit


def optional_param(args: Mapping[str, str], key: str) -> Optional[str]:
    return _opt(args, key)
