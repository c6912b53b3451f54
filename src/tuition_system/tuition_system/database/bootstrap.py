from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Mapping

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def split_statements(sql: str) -> Iterator[str]:
    """Yield the statements of a schema file.

    Lines starting with "--" are dropped. A ';' only ends a statement when it
    sits outside a quoted literal.
    """

    body = "\n".join(ln for ln in sql.splitlines() if not ln.lstrip().startswith("--"))
    current: list[str] = []
    quote = None
    prev = ""
    for ch in body:
        if quote:
            if ch == quote and prev != "\\":
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(current).strip()
            current = []
            prev = ch
            if stmt:
                yield stmt
            continue
        current.append(ch)
        prev = ch

    tail = "".join(current).strip()
    if tail:
        yield tail


def ensure_database_exists(config: DBConfig) -> None:
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping, *, schema_path: str | Path) -> None:
    """Create the target database if needed and run every statement of schema.sql against it.

    CREATE DATABASE / USE lines inside the file are ignored so the same file
    serves both the main and the test database.
    """

    config = DBConfig.from_mapping(db_config)
    ensure_database_exists(config)

    schema_path = Path(schema_path)
    sql = schema_path.read_text(encoding="utf-8")
    sql = _USE_DB.sub("", _CREATE_DB.sub("", sql))

    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor()
        count = 0
        for stmt in split_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %s to %s (%d statements)", schema_path.name, config.describe(), count)


def list_tables(db_config: Mapping) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
