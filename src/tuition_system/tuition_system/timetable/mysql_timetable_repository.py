from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone, lock_users, to_hhmm
from .model import NewTimetableEntry, TimetableEntry
from .repository import CreateGuard, TimetableRepository, UpdateGuard

_SELECT = """
    SELECT
        tt.id, tt.student_id, tt.teacher_id, tt.subject_id, tt.day,
        tt.start_time, tt.end_time, tt.notes, tt.is_active,
        tt.created_at, tt.updated_at, tt.deleted_at,
        st.name AS student_name,
        te.name AS teacher_name,
        sub.name AS subject_name
    FROM timetable tt
    LEFT JOIN users st ON st.id = tt.student_id
    LEFT JOIN users te ON te.id = tt.teacher_id
    LEFT JOIN subjects sub ON sub.id = tt.subject_id
"""

_ORDER = (
    " ORDER BY FIELD(tt.day, 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday'),"
    " tt.start_time ASC"
)

_UPDATABLE = {
    "teacher_id": "teacher_id",
    "subject_id": "subject_id",
    "day": "day",
    "start_time": "start_time",
    "end_time": "end_time",
    "notes": "notes",
    "is_active": "is_active",
}


def _to_entry(r: dict) -> TimetableEntry:
    return TimetableEntry(
        entry_id=str(r["id"]),
        student_id=str(r["student_id"]),
        teacher_id=str(r["teacher_id"]),
        subject_id=str(r["subject_id"]),
        day=Weekday(r["day"]),
        start_time=to_hhmm(r["start_time"]),
        end_time=to_hhmm(r["end_time"]),
        notes=r.get("notes"),
        is_active=bool(r.get("is_active", True)),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        deleted_at=r.get("deleted_at"),
        student_name=r.get("student_name"),
        teacher_name=r.get("teacher_name"),
        subject_name=r.get("subject_name"),
    )


def _db_value(value):
    if isinstance(value, Weekday):
        return value.value
    if isinstance(value, bool):
        return 1 if value else 0
    return value


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _get(cur, entry_id: str) -> Optional[TimetableEntry]:
        cur.execute(_SELECT + " WHERE tt.id=%s AND tt.deleted_at IS NULL", (entry_id,))
        r = fetchone(cur)
        return _to_entry(r) if r else None

    @staticmethod
    def _active_for_student(cur, student_id: str) -> list[TimetableEntry]:
        cur.execute(
            _SELECT + " WHERE tt.student_id=%s AND tt.deleted_at IS NULL AND tt.is_active=1" + _ORDER,
            (student_id,),
        )
        return [_to_entry(r) for r in fetchall(cur)]

    def get_by_id(self, entry_id: str) -> Optional[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, entry_id)

    def list_for_student(self, student_id: str) -> Sequence[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._active_for_student(cur, student_id)

    def list_for_teacher(self, teacher_id: str) -> Sequence[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE tt.teacher_id=%s AND tt.deleted_at IS NULL AND tt.is_active=1" + _ORDER,
                (teacher_id,),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def create_entries(
        self,
        *,
        student_id: str,
        entries: Sequence[NewTimetableEntry],
        guard: CreateGuard,
    ) -> list[TimetableEntry]:
        now = now_local()
        with db_transaction(self._conn_factory) as (_, cur):
            lock_users(cur, [student_id, *(e.teacher_id for e in entries)])
            guard(self._active_for_student(cur, student_id))

            ids: list[str] = []
            for e in entries:
                entry_id = str(uuid.uuid4())
                cur.execute(
                    """
                    INSERT INTO timetable(
                        id, student_id, teacher_id, subject_id, day, start_time, end_time,
                        notes, is_active, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1,%s,%s)
                    """,
                    (
                        entry_id,
                        student_id,
                        e.teacher_id,
                        e.subject_id,
                        e.day.value,
                        e.start_time,
                        e.end_time,
                        e.notes,
                        now,
                        now,
                    ),
                )
                ids.append(entry_id)

            return [self._get(cur, entry_id) for entry_id in ids]

    def update_entry(self, entry_id: str, *, changes: dict, guard: UpdateGuard) -> Optional[TimetableEntry]:
        with db_transaction(self._conn_factory) as (_, cur):
            current = self._get(cur, entry_id)
            if not current:
                return None

            lock_users(cur, [current.student_id, changes.get("teacher_id")])
            # Re-read under the lock; a concurrent delete may have won.
            current = self._get(cur, entry_id)
            if not current:
                return None

            fields = {k: v for k, v in changes.items() if k in _UPDATABLE}
            merged = replace(current, **fields)
            others = [e for e in self._active_for_student(cur, current.student_id) if e.entry_id != entry_id]
            guard(merged, others)

            sets = [f"{_UPDATABLE[k]}=%s" for k in fields] + ["updated_at=%s"]
            params = [_db_value(v) for v in fields.values()] + [now_local(), entry_id]
            cur.execute(f"UPDATE timetable SET {', '.join(sets)} WHERE id=%s", tuple(params))
            return self._get(cur, entry_id)

    def soft_delete(self, entry_id: str) -> Optional[TimetableEntry]:
        now = now_local()
        with db_cursor(self._conn_factory) as (_, cur):
            current = self._get(cur, entry_id)
            if not current:
                return None
            cur.execute(
                "UPDATE timetable SET deleted_at=%s, updated_at=%s WHERE id=%s AND deleted_at IS NULL",
                (now, now, entry_id),
            )
            return replace(current, deleted_at=now, updated_at=now)
