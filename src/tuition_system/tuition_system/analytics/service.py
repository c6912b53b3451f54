from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..attendance.model import ClassAttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.serializers import attendance_to_json
from ..common.datetime_utils import iter_days, month_key, now_local
from ..common.query import AttendanceFilters
from ..core.constants import DEFAULT_MISSED_LOOKBACK_DAYS, DEFAULT_TOP_TEACHERS_LIMIT, RECENT_CLASSES_LIMIT
from ..core.enums import Weekday
from ..core.exceptions import ValidationError
from ..timetable.model import TimetableEntry
from ..timetable.repository import TimetableRepository
from .calculator.base import HoursCalculator
from .calculator.lenient_calculator import LenientHoursCalculator

logger = logging.getLogger(__name__)


def attendance_rate(attended: int, scheduled: int) -> str:
    if scheduled == 0:
        return "0"
    return f"{100 * attended / scheduled:.1f}"


def find_missed_classes(
    entries: Sequence[TimetableEntry],
    records: Sequence[ClassAttendanceRecord],
    *,
    start: date,
    end: date,
    today: date,
) -> list[dict]:
    """Scheduled (day, entry) pairs before `today` with no matching attendance.

    A class counts as held when a record exists for the same student and
    subject on exactly that calendar date.
    """

    held = {(r.student_id, r.subject_id, r.class_date) for r in records}

    missed = []
    for day in iter_days(start, end):
        if day >= today:
            break
        weekday = Weekday.of(day)
        for e in entries:
            if e.day != weekday:
                continue
            if (e.student_id, e.subject_id, day) in held:
                continue
            missed.append(
                {
                    "date": day.strftime("%Y-%m-%d"),
                    "day": weekday.value,
                    "timetableId": e.entry_id,
                    "studentId": e.student_id,
                    "studentName": e.student_name,
                    "teacherId": e.teacher_id,
                    "teacherName": e.teacher_name,
                    "subjectId": e.subject_id,
                    "subjectName": e.subject_name,
                    "startTime": e.start_time,
                    "endTime": e.end_time,
                }
            )
    return missed


class AnalyticsService:
    """Read-side aggregation over class attendance and timetable rows.

    Everything is fetched in bulk and grouped in memory; dict insertion order
    keeps every breakdown in the order rows came back from the repository.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        timetable: TimetableRepository,
        *,
        calculator: Optional[HoursCalculator] = None,
    ):
        self._attendance = attendance
        self._timetable = timetable
        self._calculator = calculator or LenientHoursCalculator()

    def _total_hours(self, records: Sequence[ClassAttendanceRecord]) -> float:
        return sum(self._calculator.hours(r.duration) for r in records)

    @staticmethod
    def _missed_window(start: Optional[date], end: Optional[date], today: date) -> tuple[date, date]:
        end = end or today
        start = start or end - timedelta(days=DEFAULT_MISSED_LOOKBACK_DAYS)
        return start, end

    @staticmethod
    def _duration_breakdown(records: Sequence[ClassAttendanceRecord]) -> dict[str, int]:
        breakdown: dict[str, int] = {}
        for r in records:
            breakdown[r.duration] = breakdown.get(r.duration, 0) + 1
        return breakdown

    def _subject_breakdown(self, records: Sequence[ClassAttendanceRecord]) -> list[dict]:
        by_subject: dict[str, dict] = {}
        for r in records:
            s = by_subject.get(r.subject_id)
            if not s:
                s = {"subjectId": r.subject_id, "subjectName": r.subject_name, "classes": 0, "hours": 0.0}
                by_subject[r.subject_id] = s
            s["classes"] += 1
            s["hours"] += self._calculator.hours(r.duration)
        return list(by_subject.values())

    def _counterpart_breakdown(self, records: Sequence[ClassAttendanceRecord], *, side: str) -> list[dict]:
        """Per student (side="student") or per teacher (side="teacher") totals."""

        out: dict[str, dict] = {}
        for r in records:
            key = getattr(r, f"{side}_id")
            row = out.get(key)
            if not row:
                row = {
                    f"{side}Id": key,
                    f"{side}Name": getattr(r, f"{side}_name"),
                    "classes": 0,
                    "hours": 0.0,
                    "subjects": [],
                }
                out[key] = row
            row["classes"] += 1
            row["hours"] += self._calculator.hours(r.duration)
            subject = r.subject_name or r.subject_id
            if subject not in row["subjects"]:
                row["subjects"].append(subject)
        return list(out.values())

    def teacher_detailed_stats(
        self,
        teacher_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        if not teacher_id:
            raise ValidationError("Teacher ID is required")
        today = (now or now_local()).date()

        records = self._attendance.list_records(
            AttendanceFilters(teacher_id=teacher_id, start_date=start, end_date=end)
        )
        entries = self._timetable.list_for_teacher(teacher_id)

        miss_start, miss_end = self._missed_window(start, end, today)
        missed = find_missed_classes(
            entries,
            self._attendance.list_records(
                AttendanceFilters(teacher_id=teacher_id, start_date=miss_start, end_date=miss_end)
            ),
            start=miss_start,
            end=miss_end,
            today=today,
        )

        return {
            "teacherId": teacher_id,
            "totalClasses": len(records),
            "totalHours": self._total_hours(records),
            "uniqueStudents": len({r.student_id for r in records}),
            "uniqueSubjects": len({r.subject_id for r in records}),
            "durationBreakdown": self._duration_breakdown(records),
            "studentWiseBreakdown": self._counterpart_breakdown(records, side="student"),
            "subjectWiseBreakdown": self._subject_breakdown(records),
            "missedClasses": missed,
            "missedClassesCount": len(missed),
            "scheduledClassesPerWeek": len(entries),
            "attendanceRate": attendance_rate(len(records), len(entries)),
        }

    def student_detailed_stats(
        self,
        student_id: str,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        if not student_id:
            raise ValidationError("Student ID is required")
        today = (now or now_local()).date()

        records = self._attendance.list_records(
            AttendanceFilters(student_id=student_id, start_date=start, end_date=end)
        )
        entries = self._timetable.list_for_student(student_id)

        miss_start, miss_end = self._missed_window(start, end, today)
        missed = find_missed_classes(
            entries,
            self._attendance.list_records(
                AttendanceFilters(student_id=student_id, start_date=miss_start, end_date=miss_end)
            ),
            start=miss_start,
            end=miss_end,
            today=today,
        )

        months: dict[str, dict] = {}
        for r in records:
            key = month_key(r.class_date)
            m = months.setdefault(key, {"month": key, "classes": 0, "hours": 0.0})
            m["classes"] += 1
            m["hours"] += self._calculator.hours(r.duration)

        return {
            "studentId": student_id,
            "totalClasses": len(records),
            "totalHours": self._total_hours(records),
            "uniqueTeachers": len({r.teacher_id for r in records}),
            "uniqueSubjects": len({r.subject_id for r in records}),
            "durationBreakdown": self._duration_breakdown(records),
            "teacherWiseBreakdown": self._counterpart_breakdown(records, side="teacher"),
            "subjectWiseBreakdown": self._subject_breakdown(records),
            "monthlyTrend": [months[k] for k in sorted(months)],
            "recentClasses": [attendance_to_json(r) for r in records[:RECENT_CLASSES_LIMIT]],
            "missedClasses": missed,
            "missedClassesCount": len(missed),
            "scheduledClassesPerWeek": len(entries),
            "attendanceRate": attendance_rate(len(records), len(entries)),
        }

    def overall_stats(self, *, start: Optional[date] = None, end: Optional[date] = None) -> dict:
        records = self._attendance.list_records(AttendanceFilters(start_date=start, end_date=end))
        return {
            "totalClasses": len(records),
            "totalHours": self._total_hours(records),
            "totalTeachers": len({r.teacher_id for r in records}),
            "totalStudents": len({r.student_id for r in records}),
            "totalSubjects": len({r.subject_id for r in records}),
        }

    def top_teachers(
        self,
        *,
        limit: int = DEFAULT_TOP_TEACHERS_LIMIT,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[dict]:
        records = self._attendance.list_records(AttendanceFilters(start_date=start, end_date=end))

        by_teacher: dict[str, dict] = {}
        students: dict[str, set] = {}
        for r in records:
            t = by_teacher.get(r.teacher_id)
            if not t:
                t = {"teacherId": r.teacher_id, "teacherName": r.teacher_name, "totalClasses": 0, "totalHours": 0.0}
                by_teacher[r.teacher_id] = t
                students[r.teacher_id] = set()
            t["totalClasses"] += 1
            t["totalHours"] += self._calculator.hours(r.duration)
            students[r.teacher_id].add(r.student_id)

        ranked = []
        for teacher_id, t in by_teacher.items():
            t["uniqueStudents"] = len(students[teacher_id])
            ranked.append(t)
        # sorted() is stable, so ties keep repository order
        ranked = sorted(ranked, key=lambda x: x["totalClasses"], reverse=True)
        return ranked[:limit]

    def missed_classes(
        self,
        teacher_id: str,
        *,
        start: date,
        end: date,
        now: Optional[datetime] = None,
    ) -> list[dict]:
        if start > end:
            raise ValidationError("startDate must not be after endDate")
        today = (now or now_local()).date()
        entries = self._timetable.list_for_teacher(teacher_id)
        records = self._attendance.list_records(AttendanceFilters(teacher_id=teacher_id, start_date=start, end_date=end))
        missed = find_missed_classes(entries, records, start=start, end=end, today=today)
        logger.debug("Teacher %s: %d missed classes between %s and %s", teacher_id, len(missed), start, end)
        return missed
