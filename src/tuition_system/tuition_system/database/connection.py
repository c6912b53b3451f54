from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_mapping(cls, raw: Mapping) -> "DBConfig":
        """Build from a settings DB_CONFIG dict; missing keys fall back to local defaults."""

        return cls(
            host=str(raw.get("host", "localhost")),
            port=int(raw.get("port", 3306)),
            user=str(raw.get("user", "root")),
            password=str(raw.get("password", "")),
            database=str(raw.get("database", "tuition_db")),
        )

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Opens a fresh connection per unit of work (one request, one transaction)."""

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self, *, with_database: bool = True):
        kwargs = dict(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            charset="utf8mb4",
            autocommit=False,
        )
        if with_database:
            kwargs["database"] = self._config.database
        return mysql.connector.connect(**kwargs)
