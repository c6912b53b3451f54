from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Subject
from .repository import SubjectRepository

_COLUMNS = "id, name, description, created_at, updated_at"


def _to_subject(row: dict) -> Subject:
    return Subject(
        subject_id=str(row["id"]),
        name=row["name"],
        description=row.get("description"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get(self, cur, subject_id: str) -> Optional[Subject]:
        cur.execute(f"SELECT {_COLUMNS} FROM subjects WHERE id=%s", (subject_id,))
        row = fetchone(cur)
        return _to_subject(row) if row else None

    def get_by_id(self, subject_id: str) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, subject_id)

    def list_all(self) -> Sequence[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM subjects ORDER BY name ASC")
            return [_to_subject(r) for r in fetchall(cur)]

    def create(self, *, name: str, description: Optional[str] = None) -> Subject:
        subject_id = str(uuid.uuid4())
        now = now_local()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO subjects(id, name, description, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (subject_id, name, description, now, now),
            )
            return self._get(cur, subject_id)

    def update(self, subject_id: str, *, changes: dict) -> Optional[Subject]:
        allowed = {k: v for k, v in changes.items() if k in {"name", "description"}}
        with db_cursor(self._conn_factory) as (_, cur):
            if not self._get(cur, subject_id):
                return None
            sets = [f"{col}=%s" for col in allowed] + ["updated_at=%s"]
            params = list(allowed.values()) + [now_local(), subject_id]
            cur.execute(f"UPDATE subjects SET {', '.join(sets)} WHERE id=%s", tuple(params))
            return self._get(cur, subject_id)

    def delete(self, subject_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM subjects WHERE id=%s", (subject_id,))
            return cur.rowcount > 0
