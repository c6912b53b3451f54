from __future__ import annotations

from datetime import date
from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    USER = "user"


class Weekday(str, Enum):
    """Day of week a timetable entry recurs on."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return list(cls)[day.weekday()]


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class ClassDuration(str, Enum):
    """Canonical set of class lengths."""

    MIN_30 = "30min"
    MIN_45 = "45min"
    HR_1 = "1hr"
    HR_1_5 = "1.5hr"
    HR_1_75 = "1.75hr"
    HR_2 = "2hr"
    HR_2_5 = "2.5hr"
    HR_3 = "3hr"
