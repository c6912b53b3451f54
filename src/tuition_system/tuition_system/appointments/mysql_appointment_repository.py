from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import AppointmentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, db_transaction, fetchall, fetchone, in_clause, lock_users
from .model import Appointment, AppointmentFilters, NewAppointment
from .repository import AppointmentRepository, CreateGuard, UpdateGuard

_COLUMNS = """
    id, student_id, teacher_id, start_time, end_time, status, notes,
    punch_in_time, created_at, updated_at, deleted_at
"""

_UPDATABLE = {"status", "notes", "punch_in_time", "start_time", "end_time"}


def _to_appointment(r: dict) -> Appointment:
    return Appointment(
        appointment_id=str(r["id"]),
        student_id=str(r["student_id"]),
        teacher_id=str(r["teacher_id"]),
        start_time=r["start_time"],
        end_time=r["end_time"],
        status=AppointmentStatus(r["status"]),
        notes=r.get("notes"),
        punch_in_time=r.get("punch_in_time"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        deleted_at=r.get("deleted_at"),
    )


class MySQLAppointmentRepository(AppointmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _get(cur, appointment_id: str) -> Optional[Appointment]:
        cur.execute(f"SELECT {_COLUMNS} FROM appointments WHERE id=%s AND deleted_at IS NULL", (appointment_id,))
        r = fetchone(cur)
        return _to_appointment(r) if r else None

    @staticmethod
    def _involving(cur, participants: Sequence[str]) -> list[Appointment]:
        placeholders, params = in_clause(sorted(set(participants)))
        cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM appointments
            WHERE deleted_at IS NULL
              AND (student_id IN ({placeholders}) OR teacher_id IN ({placeholders}))
            """,
            params + params,
        )
        return [_to_appointment(r) for r in fetchall(cur)]

    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, appointment_id)

    def list_appointments(self, filters: AppointmentFilters) -> Sequence[Appointment]:
        clauses = ["deleted_at IS NULL"]
        params: list[object] = []
        if filters.student_id:
            clauses.append("student_id=%s")
            params.append(filters.student_id)
        if filters.teacher_id:
            clauses.append("teacher_id=%s")
            params.append(filters.teacher_id)
        if filters.status:
            clauses.append("status=%s")
            params.append(filters.status.value)
        if filters.start_date:
            clauses.append("start_time >= %s")
            params.append(filters.start_date)
        if filters.end_date:
            clauses.append("start_time <= %s")
            params.append(filters.end_date)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM appointments WHERE {where} ORDER BY start_time ASC", tuple(params))
            return [_to_appointment(r) for r in fetchall(cur)]

    def create(self, new: NewAppointment, *, guard: CreateGuard) -> Appointment:
        appointment_id = str(uuid.uuid4())
        now = now_local()
        participants = [new.student_id, new.teacher_id]
        with db_transaction(self._conn_factory) as (_, cur):
            lock_users(cur, participants)
            guard(self._involving(cur, participants))
            cur.execute(
                """
                INSERT INTO appointments(
                    id, student_id, teacher_id, start_time, end_time, status, notes, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    appointment_id,
                    new.student_id,
                    new.teacher_id,
                    new.start_time,
                    new.end_time,
                    new.status.value,
                    new.notes,
                    now,
                    now,
                ),
            )
            return self._get(cur, appointment_id)

    def update(self, appointment_id: str, *, changes: dict, guard: UpdateGuard) -> Optional[Appointment]:
        with db_transaction(self._conn_factory) as (_, cur):
            current = self._get(cur, appointment_id)
            if not current:
                return None

            lock_users(cur, current.participants)
            current = self._get(cur, appointment_id)
            if not current:
                return None

            fields = {k: v for k, v in changes.items() if k in _UPDATABLE}
            merged = replace(current, **fields)
            others = [a for a in self._involving(cur, current.participants) if a.appointment_id != appointment_id]
            guard(merged, others)

            sets = [f"{k}=%s" for k in fields] + ["updated_at=%s"]
            params = [v.value if isinstance(v, AppointmentStatus) else v for v in fields.values()]
            params += [now_local(), appointment_id]
            cur.execute(f"UPDATE appointments SET {', '.join(sets)} WHERE id=%s", tuple(params))
            return self._get(cur, appointment_id)

    def soft_delete(self, appointment_id: str) -> Optional[Appointment]:
        now = now_local()
        with db_cursor(self._conn_factory) as (_, cur):
            current = self._get(cur, appointment_id)
            if not current:
                return None
            cur.execute(
                "UPDATE appointments SET deleted_at=%s, updated_at=%s WHERE id=%s AND deleted_at IS NULL",
                (now, now, appointment_id),
            )
            return replace(current, deleted_at=now, updated_at=now)
