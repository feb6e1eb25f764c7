"""
Database connection handling for the PostgreSQL plugin.

One connection per invocation, opened from a ConnectionParams descriptor
and always closed when the caller's block exits.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import psycopg2

from postgres_metrics.config.settings import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_SSLMODE,
)
from postgres_metrics.core.errors import DataSourceConnectionError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionParams:
    """Opaque connection descriptor handed over by the CLI."""
    username: str
    host: str = DEFAULT_HOST
    port: str = DEFAULT_PORT
    password: Optional[str] = field(default=None, repr=False)
    sslmode: str = DEFAULT_SSLMODE
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    database: Optional[str] = None
    extra_options: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # 0 means "wait forever" to libpq and disables statement_timeout
        if int(self.connect_timeout) < 1:
            raise ValueError(
                f"connect_timeout must be at least 1 second, got {self.connect_timeout}"
            )


def make_connect_kwargs(params: ConnectionParams) -> Dict[str, Any]:
    """
    Build keyword arguments for psycopg2.connect().

    Every statement gets a server-side statement_timeout equal to the
    connect timeout, so a slow query fails instead of hanging. Entries in
    extra_options override the computed values.

    Args:
        params: Connection descriptor

    Returns:
        Dict suitable for psycopg2.connect(**kwargs)
    """
    kwargs = {
        "host": params.host,
        "port": params.port,
        "user": params.username,
        "sslmode": params.sslmode,
        "connect_timeout": params.connect_timeout,
        "options": f"-c statement_timeout={int(params.connect_timeout) * 1000}",
    }
    if params.password:
        kwargs["password"] = params.password
    if params.database:
        kwargs["dbname"] = params.database
    kwargs.update(params.extra_options)
    return kwargs


@contextmanager
def get_connection(params: ConnectionParams, logger: Optional[logging.Logger] = None):
    """
    Get a read-only database connection as a context manager.

    Usage:
        with get_connection(params) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")

    Raises:
        DataSourceConnectionError: If the connection cannot be established
    """
    logger = logger or _logger
    conn = None
    try:
        try:
            conn = psycopg2.connect(**make_connect_kwargs(params))
            conn.set_session(readonly=True)
        except psycopg2.Error as e:
            logger.error("Failed to connect to %s:%s as %s: %s",
                         params.host, params.port, params.username, e)
            raise DataSourceConnectionError(
                f"cannot connect to {params.host}:{params.port}: {e}"
            ) from e
        logger.debug("Connected to %s:%s", params.host, params.port)
        yield conn
    finally:
        if conn:
            conn.close()
