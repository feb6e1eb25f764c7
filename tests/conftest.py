"""
Pytest configuration and fixtures for the PostgreSQL metrics plugin.

The database is never contacted: psycopg2.connect is patched with a fake
connection whose cursors answer from a statement -> rows table.
"""

import pytest
from typing import Any, Callable, Dict, List, Union
from unittest.mock import MagicMock, patch

import psycopg2

from postgres_metrics.core.db import ConnectionParams
from postgres_metrics.core.queries import QueryDefinition


# =============================================================================
# FAKE DATABASE
# =============================================================================

class FakeCursor:
    """
    Cursor that answers execute() from a statement -> rows mapping.

    A mapping value may be a list of rows, an exception to raise, or a
    callable run at execute time that returns the rows.
    """

    def __init__(self, results: Dict[str, Union[List[tuple], Exception, Callable]]):
        self.results = results
        self.executed = []
        self.fetched = 0
        self._rows = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, statement, params=None):
        self.executed.append(statement)
        result = self.results.get(statement, [])
        if isinstance(result, Exception):
            raise result
        if callable(result):
            result = result()
        self._rows = list(result)

    def fetchone(self):
        if self._rows is None:
            raise psycopg2.ProgrammingError("no results to fetch")
        if self.fetched >= len(self._rows):
            return None
        self.fetched += 1
        return self._rows[self.fetched - 1]


class FakeConnection:
    """Connection handing out FakeCursors and recording close()."""

    def __init__(self, results: Dict[str, Union[List[tuple], Exception]]):
        self.results = results
        self.cursors = []
        self.closed = False
        self.session = {}

    def cursor(self):
        cur = FakeCursor(self.results)
        self.cursors.append(cur)
        return cur

    def set_session(self, **kwargs):
        self.session.update(kwargs)

    def close(self):
        self.closed = True

    @property
    def executed(self) -> List[str]:
        return [stmt for cur in self.cursors for stmt in cur.executed]


@pytest.fixture
def fake_connection_factory():
    """
    Factory fixture for fake connections.

    Usage:
        def test_something(fake_connection_factory):
            conn = fake_connection_factory({"select 1": [(1,)]})
    """
    def _create(results: Dict[str, Any] = None) -> FakeConnection:
        return FakeConnection(results or {})
    return _create


@pytest.fixture
def patch_connect(fake_connection_factory):
    """
    Patch psycopg2.connect to return a fake connection.

    Usage:
        def test_something(patch_connect):
            conn, connect = patch_connect({"select 1": [(1,)]})
    """
    patchers = []

    def _patch(results: Dict[str, Any] = None, error: Exception = None):
        conn = fake_connection_factory(results)
        connect = MagicMock(return_value=conn)
        if error is not None:
            connect.side_effect = error
        patcher = patch("postgres_metrics.core.db.psycopg2.connect", connect)
        patcher.start()
        patchers.append(patcher)
        return conn, connect

    yield _patch

    for patcher in patchers:
        patcher.stop()


# =============================================================================
# PLUGIN FIXTURES
# =============================================================================

@pytest.fixture
def connection_params() -> ConnectionParams:
    """Connection descriptor pointing at a local server."""
    return ConnectionParams(
        username="mackerel",
        host="localhost",
        port="5432",
        password="s3cret",
        sslmode="disable",
        connect_timeout=5,
    )


@pytest.fixture
def sample_results() -> Dict[str, List[tuple]]:
    """Rows for the default query set: count=5, sum=42.0."""
    return {
        "select count(*) from sample": [(5,)],
        "select sum(column2) from sample": [(42.0,)],
    }


@pytest.fixture
def query_factory():
    """Factory for QueryDefinitions with sensible defaults."""
    def _create(name: str = "q", **overrides) -> QueryDefinition:
        base = {
            "name": name,
            "statement": f"select {name}",
            "result_key": name,
            "default_value": 0,
        }
        base.update(overrides)
        return QueryDefinition(**base)
    return _create
