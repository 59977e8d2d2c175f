from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "zeitkonto")),
        )


class DatabaseConnection:
    """DB connection factory, built once by the container.

    Note: We create short-lived connections per operation. Inside
    ``unit_of_work()`` every repository call on the same thread shares one
    connection and commits once at the end.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    @property
    def config(self) -> DBConfig:
        return self._config

    @property
    def active_connection(self):
        return getattr(self._local, "conn", None)

    def connect(self, *, with_database: bool = True):
        kwargs = {
            "host": self._config.host,
            "port": int(self._config.port),
            "user": self._config.user,
            "password": self._config.password,
            "use_pure": True,
        }
        if with_database:
            kwargs["database"] = self._config.database
        return mysql.connector.connect(**kwargs)

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        if self.active_connection is not None:
            # Nested: the outermost unit commits.
            yield
            return

        conn = self.connect()
        self._local.conn = conn
        try:
            yield
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            conn.close()
