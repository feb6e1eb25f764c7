"""
Unit tests for connection handling.
"""

import psycopg2
import pytest

from postgres_metrics.core.db import ConnectionParams, get_connection, make_connect_kwargs
from postgres_metrics.core.errors import DataSourceConnectionError


class TestMakeConnectKwargs:

    @pytest.mark.unit
    def test_basic_kwargs(self, connection_params):
        kwargs = make_connect_kwargs(connection_params)

        assert kwargs["host"] == "localhost"
        assert kwargs["port"] == "5432"
        assert kwargs["user"] == "mackerel"
        assert kwargs["password"] == "s3cret"
        assert kwargs["sslmode"] == "disable"
        assert kwargs["connect_timeout"] == 5
        assert kwargs["options"] == "-c statement_timeout=5000"
        assert "dbname" not in kwargs

    @pytest.mark.unit
    def test_no_password(self):
        kwargs = make_connect_kwargs(ConnectionParams(username="mackerel"))
        assert "password" not in kwargs

    @pytest.mark.unit
    def test_database_and_extra_options(self):
        params = ConnectionParams(
            username="mackerel",
            database="app",
            extra_options={"application_name": "mackerel", "sslmode": "require"},
        )
        kwargs = make_connect_kwargs(params)

        assert kwargs["dbname"] == "app"
        assert kwargs["application_name"] == "mackerel"
        # extra options win over computed values
        assert kwargs["sslmode"] == "require"

    @pytest.mark.unit
    @pytest.mark.parametrize("timeout", [0, -5])
    def test_rejects_unbounded_timeout(self, timeout):
        """libpq treats 0 as no limit; below one second is refused."""
        with pytest.raises(ValueError, match="connect_timeout"):
            ConnectionParams(username="mackerel", connect_timeout=timeout)

    @pytest.mark.unit
    def test_password_not_in_repr(self, connection_params):
        assert "s3cret" not in repr(connection_params)


class TestGetConnection:

    @pytest.mark.unit
    def test_closes_on_success(self, patch_connect, connection_params):
        conn, _ = patch_connect()

        with get_connection(connection_params) as got:
            assert got is conn
            assert not conn.closed

        assert conn.closed

    @pytest.mark.unit
    def test_closes_on_error(self, patch_connect, connection_params):
        conn, _ = patch_connect()

        with pytest.raises(RuntimeError):
            with get_connection(connection_params):
                raise RuntimeError("boom")

        assert conn.closed

    @pytest.mark.unit
    def test_connect_failure(self, patch_connect, connection_params, caplog):
        patch_connect(error=psycopg2.OperationalError("timeout expired"))

        with pytest.raises(DataSourceConnectionError, match="timeout expired"):
            with get_connection(connection_params):
                pass

        assert "s3cret" not in caplog.text

    @pytest.mark.unit
    def test_is_builtin_connection_error(self, patch_connect, connection_params):
        patch_connect(error=psycopg2.OperationalError("refused"))

        with pytest.raises(ConnectionError):
            with get_connection(connection_params):
                pass
