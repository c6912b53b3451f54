from __future__ import annotations

from .model import TimetableEntry


def timetable_to_json(e: TimetableEntry) -> dict:
    return {
        "id": e.entry_id,
        "studentId": e.student_id,
        "studentName": e.student_name,
        "teacherId": e.teacher_id,
        "teacherName": e.teacher_name,
        "subjectId": e.subject_id,
        "subjectName": e.subject_name,
        "day": e.day.value,
        "startTime": e.start_time,
        "endTime": e.end_time,
        "notes": e.notes,
        "isActive": e.is_active,
        "createdAt": e.created_at.isoformat() if e.created_at else None,
        "updatedAt": e.updated_at.isoformat() if e.updated_at else None,
        "deletedAt": e.deleted_at.isoformat() if e.deleted_at else None,
    }
