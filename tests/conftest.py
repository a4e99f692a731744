"""Shared fixtures: an in-memory stand-in for an Oracle catalog connection."""

from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

Rows = Union[List[tuple], Callable[[Dict[str, Any]], List[tuple]]]


def normalize_sql(sql: str) -> str:
    return " ".join(sql.split()).lower()


class FakeLob:
    """Mimics an oracledb LOB, which must be read() to get its text."""

    def __init__(self, text: str):
        self.text = text

    def read(self) -> str:
        return self.text


class FakeCursor:
    def __init__(self, catalog: "FakeCatalog"):
        self.catalog = catalog
        self.closed = False
        self._rows: List[tuple] = []

    def execute(self, sql: str, parameters: Optional[Dict[str, Any]] = None, **binds: Any) -> None:
        binds = dict(parameters or {}, **binds)
        self.catalog.executed.append((normalize_sql(sql), binds))
        if self.catalog.error is not None:
            raise self.catalog.error
        self._rows = self.catalog.respond(sql, binds)

    def fetchall(self) -> List[tuple]:
        rows, self._rows = self._rows, []
        return rows

    def fetchone(self) -> Optional[tuple]:
        return self._rows.pop(0) if self._rows else None

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, catalog: "FakeCatalog"):
        self.catalog = catalog
        self.closed = False

    def cursor(self) -> FakeCursor:
        cursor = FakeCursor(self.catalog)
        self.catalog.cursors.append(cursor)
        return cursor

    def close(self) -> None:
        self.closed = True


class FakeCatalog:
    """
    Connection provider answering queries by SQL fragment.

    Register answers with ``on(fragment, rows)``; the first fragment found in
    the whitespace-normalized, lower-cased SQL wins. Unmatched queries return
    no rows. Setting ``error`` makes every query raise it.
    """

    def __init__(self):
        self.responses: List[Tuple[str, Rows]] = []
        self.executed: List[Tuple[str, Dict[str, Any]]] = []
        self.cursors: List[FakeCursor] = []
        self.connections: List[FakeConnection] = []
        self.error: Optional[BaseException] = None

    def on(self, fragment: str, rows: Rows) -> "FakeCatalog":
        self.responses.append((normalize_sql(fragment), rows))
        return self

    def respond(self, sql: str, binds: Dict[str, Any]) -> List[tuple]:
        text = normalize_sql(sql)
        for fragment, rows in self.responses:
            if fragment in text:
                return list(rows(binds) if callable(rows) else rows)
        return []

    def queries_containing(self, fragment: str) -> List[Tuple[str, Dict[str, Any]]]:
        fragment = normalize_sql(fragment)
        return [(sql, binds) for sql, binds in self.executed if fragment in sql]

    @contextmanager
    def connection(self):
        conn = FakeConnection(self)
        self.connections.append(conn)
        try:
            yield conn
        finally:
            conn.close()


@pytest.fixture
def catalog():
    """An empty fake catalog; tests register the answers they need."""
    return FakeCatalog()
