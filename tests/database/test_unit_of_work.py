from __future__ import annotations

import pytest

from src.zeitkonto.zeitkonto.database.connection import DatabaseConnection, DBConfig
from src.zeitkonto.zeitkonto.database.mysql_base import db_cursor


class _FakeCursor:
    def __init__(self, conn):
        self._conn = conn

    def execute(self, sql, params=None):
        self._conn.statements.append(sql)

    def close(self):
        pass


class _FakeConnection:
    def __init__(self):
        self.statements = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, dictionary=False):
        return _FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


@pytest.fixture
def opened(monkeypatch):
    connections = []

    def connect(self, *, with_database=True):
        conn = _FakeConnection()
        connections.append(conn)
        return conn

    monkeypatch.setattr(DatabaseConnection, "connect", connect)
    return connections


@pytest.fixture
def factory():
    return DatabaseConnection(DBConfig.from_dict({}))


def test_each_cursor_commits_on_its_own(factory, opened):
    for stmt in ("UPDATE a", "UPDATE b"):
        with db_cursor(factory) as (_, cur):
            cur.execute(stmt)

    assert [c.commits for c in opened] == [1, 1]
    assert all(c.closed for c in opened)


def test_unit_of_work_shares_one_connection(factory, opened):
    with factory.unit_of_work():
        with db_cursor(factory) as (_, cur):
            cur.execute("UPDATE a")
        with factory.unit_of_work():
            with db_cursor(factory) as (_, cur):
                cur.execute("UPDATE b")
        assert opened[0].commits == 0

    assert len(opened) == 1
    assert opened[0].statements == ["UPDATE a", "UPDATE b"]
    assert opened[0].commits == 1
    assert opened[0].closed
    assert factory.active_connection is None


def test_unit_of_work_rolls_back_everything(factory, opened):
    with pytest.raises(RuntimeError):
        with factory.unit_of_work():
            with db_cursor(factory) as (_, cur):
                cur.execute("UPDATE a")
            raise RuntimeError("Verbindung verloren")

    assert opened[0].commits == 0
    assert opened[0].rollbacks == 1
    assert opened[0].closed
    assert factory.active_connection is None
