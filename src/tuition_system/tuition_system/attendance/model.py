from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class ClassAttendanceRecord:
    """Domain entity: one delivered class, immutable once marked.

    `duration` stays a plain string so rows written with a value outside the
    current duration set can still be read and aggregated.
    """

    attendance_id: str
    teacher_id: str
    student_id: str
    subject_id: str
    class_date: date
    start_time: str
    duration: str
    timetable_id: Optional[str] = None
    notes: Optional[str] = None
    marked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    teacher_name: Optional[str] = None
    student_name: Optional[str] = None
    subject_name: Optional[str] = None


@dataclass(frozen=True)
class NewClassAttendance:
    teacher_id: str
    student_id: str
    subject_id: str
    class_date: date
    start_time: str
    duration: str
    marked_at: datetime
    timetable_id: Optional[str] = None
    notes: Optional[str] = None
