from __future__ import annotations

import uuid
from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..common.query import AttendanceFilters
from ..core.constants import ATTENDANCE_ALREADY_MARKED
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone, is_duplicate_key, lock_users, to_hhmm
from .model import ClassAttendanceRecord, NewClassAttendance
from .repository import AttendanceRepository, MarkGuard

_SELECT = """
    SELECT
        ca.id, ca.teacher_id, ca.student_id, ca.subject_id, ca.timetable_id,
        ca.class_date, ca.start_time, ca.duration, ca.notes, ca.marked_at, ca.created_at,
        te.name AS teacher_name,
        st.name AS student_name,
        sub.name AS subject_name
    FROM class_attendance ca
    LEFT JOIN users te ON te.id = ca.teacher_id
    LEFT JOIN users st ON st.id = ca.student_id
    LEFT JOIN subjects sub ON sub.id = ca.subject_id
"""


def _to_record(r: dict) -> ClassAttendanceRecord:
    return ClassAttendanceRecord(
        attendance_id=str(r["id"]),
        teacher_id=str(r["teacher_id"]),
        student_id=str(r["student_id"]),
        subject_id=str(r["subject_id"]),
        timetable_id=str(r["timetable_id"]) if r.get("timetable_id") else None,
        class_date=r["class_date"],
        start_time=to_hhmm(r["start_time"]),
        duration=str(r["duration"]),
        notes=r.get("notes"),
        marked_at=r.get("marked_at"),
        created_at=r.get("created_at"),
        teacher_name=r.get("teacher_name"),
        student_name=r.get("student_name"),
        subject_name=r.get("subject_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _get(cur, attendance_id: str) -> Optional[ClassAttendanceRecord]:
        cur.execute(_SELECT + " WHERE ca.id=%s", (attendance_id,))
        r = fetchone(cur)
        return _to_record(r) if r else None

    @staticmethod
    def _find(cur, *, teacher_id: str, student_id: str, subject_id: str, class_date: date):
        cur.execute(
            _SELECT
            + """
            WHERE ca.teacher_id=%s AND ca.student_id=%s AND ca.subject_id=%s AND ca.class_date=%s
            LIMIT 1
            """,
            (teacher_id, student_id, subject_id, class_date),
        )
        r = fetchone(cur)
        return _to_record(r) if r else None

    def get_by_id(self, attendance_id: str) -> Optional[ClassAttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, attendance_id)

    def find_marked(
        self,
        *,
        teacher_id: str,
        student_id: str,
        subject_id: str,
        class_date: date,
    ) -> Optional[ClassAttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._find(
                cur,
                teacher_id=teacher_id,
                student_id=student_id,
                subject_id=subject_id,
                class_date=class_date,
            )

    def create_if_unmarked(self, new: NewClassAttendance, *, guard: MarkGuard) -> ClassAttendanceRecord:
        attendance_id = str(uuid.uuid4())
        with db_transaction(self._conn_factory) as (_, cur):
            lock_users(cur, [new.teacher_id, new.student_id])
            guard(
                self._find(
                    cur,
                    teacher_id=new.teacher_id,
                    student_id=new.student_id,
                    subject_id=new.subject_id,
                    class_date=new.class_date,
                )
            )
            try:
                cur.execute(
                    """
                    INSERT INTO class_attendance(
                        id, teacher_id, student_id, subject_id, timetable_id,
                        class_date, start_time, duration, notes, marked_at, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        attendance_id,
                        new.teacher_id,
                        new.student_id,
                        new.subject_id,
                        new.timetable_id,
                        new.class_date,
                        new.start_time,
                        new.duration,
                        new.notes,
                        new.marked_at,
                        new.marked_at,
                    ),
                )
            except mysql.connector.IntegrityError as err:
                if is_duplicate_key(err):
                    raise ConflictError(ATTENDANCE_ALREADY_MARKED) from err
                raise
            return self._get(cur, attendance_id)

    def list_records(self, filters: AttendanceFilters) -> Sequence[ClassAttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []
        if filters.teacher_id:
            clauses.append("ca.teacher_id=%s")
            params.append(filters.teacher_id)
        if filters.student_id:
            clauses.append("ca.student_id=%s")
            params.append(filters.student_id)
        if filters.subject_id:
            clauses.append("ca.subject_id=%s")
            params.append(filters.subject_id)
        if filters.start_date:
            clauses.append("ca.class_date >= %s")
            params.append(filters.start_date)
        if filters.end_date:
            clauses.append("ca.class_date <= %s")
            params.append(filters.end_date)

        where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + where + " ORDER BY ca.class_date DESC, ca.marked_at DESC", tuple(params))
            return [_to_record(r) for r in fetchall(cur)]
