from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Weekday


@dataclass(frozen=True)
class TimetableEntry:
    """Domain entity: a weekly recurring class slot.

    start_time/end_time are zero-padded "HH:MM" strings, so plain string
    comparison orders them chronologically. The *_name fields are filled by
    joined reads and left as None otherwise.
    """

    entry_id: str
    student_id: str
    teacher_id: str
    subject_id: str
    day: Weekday
    start_time: str
    end_time: str
    notes: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    student_name: Optional[str] = None
    teacher_name: Optional[str] = None
    subject_name: Optional[str] = None


@dataclass(frozen=True)
class NewTimetableEntry:
    student_id: str
    teacher_id: str
    subject_id: str
    day: Weekday
    start_time: str
    end_time: str
    notes: Optional[str] = None
