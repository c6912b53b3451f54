from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "id, name, email, role, banned, ban_reason"


def _to_user(row: dict) -> User:
    return User(
        user_id=str(row["id"]),
        name=row["name"],
        email=row["email"],
        role=Role(row["role"]),
        banned=bool(row.get("banned", False)),
        ban_reason=row.get("ban_reason"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def search(self, *, query: str, role: Role, limit: int) -> Sequence[User]:
        pattern = f"%{query.lower()}%"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE role=%s AND (LOWER(name) LIKE %s OR LOWER(email) LIKE %s)
                ORDER BY name ASC
                LIMIT %s
                """,
                (role.value, pattern, pattern, int(limit)),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def list_by_role(self, *, role: Optional[Role], limit: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            if role is None:
                cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY name ASC LIMIT %s", (int(limit),))
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM users WHERE role=%s ORDER BY name ASC LIMIT %s",
                    (role.value, int(limit)),
                )
            return [_to_user(r) for r in fetchall(cur)]

    def update_name(self, user_id: str, *, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET name=%s WHERE id=%s", (name, user_id))
            return cur.rowcount > 0

    def set_banned(self, user_id: str, *, banned: bool, reason: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET banned=%s, ban_reason=%s WHERE id=%s",
                (1 if banned else 0, reason if banned else None, user_id),
            )
            return cur.rowcount > 0
