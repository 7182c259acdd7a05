import sqlite3

import pytest


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = -1
        self._row = None

    def execute(self, sql, params=None):
        normalized = " ".join(sql.split())
        self.conn.executed.append((normalized, params))
        for needle in self.conn.fail_on:
            if needle in normalized:
                raise RuntimeError(f"simulated failure on {needle}")
        self._row = None
        for needle, row in self.conn.rows.items():
            if needle in normalized:
                self._row = row
        self.rowcount = self.conn.rowcount

    def fetchone(self):
        return self._row

    def fetchall(self):
        return [] if self._row is None else [self._row]

    def close(self):
        self.conn.closed_cursors += 1


class FakeConnection:
    """Records every statement; ``rows`` maps a SQL substring to the row
    ``fetchone`` returns, ``fail_on`` lists substrings that raise."""

    def __init__(self, rows=None, fail_on=(), rowcount=1):
        self.rows = dict(rows or {})
        self.fail_on = tuple(fail_on)
        self.rowcount = rowcount
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.closed_cursors = 0
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True

    def statements(self, needle):
        return [(sql, params) for sql, params in self.executed if needle in sql]


@pytest.fixture
def make_fake_connection():
    return FakeConnection


@pytest.fixture
def sqlite_connection():
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    yield conn
    conn.close()


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME_ENV_FILE", str(tmp_path / "missing.env"))
    for name in ("HOME_DB_ENGINE", "SQLITE_DB_PATH", "DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD"):
        monkeypatch.delenv(name, raising=False)
