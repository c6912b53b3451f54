from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from .model import ClassAttendanceRecord


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def attendance_to_json(r: ClassAttendanceRecord) -> dict:
    return {
        "id": r.attendance_id,
        "teacherId": r.teacher_id,
        "teacherName": r.teacher_name,
        "studentId": r.student_id,
        "studentName": r.student_name,
        "subjectId": r.subject_id,
        "subjectName": r.subject_name,
        "timetableId": r.timetable_id,
        "classDate": r.class_date.strftime("%Y-%m-%d"),
        "startTime": r.start_time,
        "duration": r.duration,
        "notes": r.notes,
        "markedAt": _iso(r.marked_at),
        "createdAt": _iso(r.created_at),
    }
