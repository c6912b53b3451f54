from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.query import AttendanceFilters
from ..common.validators import parse_date_value, require_hhmm
from ..core.constants import ATTENDANCE_ALREADY_MARKED, MARKABLE_DURATIONS
from ..core.enums import Role, Weekday
from ..core.exceptions import AuthorizationError, ConflictError, ValidationError
from ..timetable.model import TimetableEntry
from ..timetable.repository import TimetableRepository
from .model import ClassAttendanceRecord, NewClassAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Class attendance marking and the read paths around it."""

    def __init__(self, attendance: AttendanceRepository, timetable: TimetableRepository):
        self._attendance = attendance
        self._timetable = timetable

    def check_if_class_marked(
        self,
        *,
        teacher_id: str,
        student_id: str,
        subject_id: str,
        class_date,
    ) -> Optional[ClassAttendanceRecord]:
        return self._attendance.find_marked(
            teacher_id=teacher_id,
            student_id=student_id,
            subject_id=subject_id,
            class_date=parse_date_value(class_date, "classDate"),
        )

    def mark(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        student_id: Optional[str],
        subject_id: Optional[str],
        class_date,
        start_time: Optional[str],
        duration: Optional[str],
        timetable_id: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ClassAttendanceRecord:
        """Record a delivered class for the calling teacher.

        At most one record per teacher, student, subject and calendar day.
        """

        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can mark attendance")

        if not student_id or not subject_id or not class_date or not start_time or not duration:
            raise ValidationError("Missing required fields")

        allowed = [d.value for d in MARKABLE_DURATIONS]
        if duration not in allowed:
            raise ValidationError(f"Invalid duration. Must be one of: {', '.join(allowed)}")

        new = NewClassAttendance(
            teacher_id=current_user_id,
            student_id=str(student_id).strip(),
            subject_id=str(subject_id).strip(),
            timetable_id=timetable_id or None,
            class_date=parse_date_value(class_date, "classDate"),
            start_time=require_hhmm(start_time, "start time"),
            duration=duration,
            notes=(notes or "").strip() or None,
            marked_at=now or now_local(),
        )

        def guard(existing: Optional[ClassAttendanceRecord]) -> None:
            if existing:
                logger.warning(
                    "Duplicate attendance for teacher %s student %s on %s",
                    new.teacher_id,
                    new.student_id,
                    new.class_date,
                )
                raise ConflictError(ATTENDANCE_ALREADY_MARKED)

        record = self._attendance.create_if_unmarked(new, guard=guard)
        logger.info("Marked attendance %s (%s, %s)", record.attendance_id, record.class_date, record.duration)
        return record

    def list_records(
        self,
        *,
        current_user_id: str,
        current_role: Role,
        filters: AttendanceFilters,
    ) -> Sequence[ClassAttendanceRecord]:
        if current_role == Role.TEACHER:
            if filters.teacher_id and filters.teacher_id != current_user_id:
                raise AuthorizationError("You can only view your own attendance records")
            filters = replace(filters, teacher_id=current_user_id)
        elif current_role == Role.STUDENT:
            filters = replace(filters, student_id=current_user_id)
        return self._attendance.list_records(filters)

    def today_scheduled_classes(self, teacher_id: str, *, today: Optional[date] = None) -> list[TimetableEntry]:
        weekday = Weekday.of(today or now_local().date())
        return [e for e in self._timetable.list_for_teacher(teacher_id) if e.day == weekday]
