from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from ..common.query import AttendanceFilters
from .model import ClassAttendanceRecord, NewClassAttendance

# Receives the record already marked for the same teacher/student/subject/day, or None.
MarkGuard = Callable[[Optional[ClassAttendanceRecord]], None]


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: str) -> Optional[ClassAttendanceRecord]:
        raise NotImplementedError

    def find_marked(
        self,
        *,
        teacher_id: str,
        student_id: str,
        subject_id: str,
        class_date: date,
    ) -> Optional[ClassAttendanceRecord]:
        raise NotImplementedError

    def create_if_unmarked(self, new: NewClassAttendance, *, guard: MarkGuard) -> ClassAttendanceRecord:
        """Atomically look up the same-day record, run `guard`, then insert.

        A concurrent insert that slips past the guard surfaces as ConflictError.
        """

        raise NotImplementedError

    def list_records(self, filters: AttendanceFilters) -> Sequence[ClassAttendanceRecord]:
        """Records matching every given filter, newest class date first, joined with names."""

        raise NotImplementedError
