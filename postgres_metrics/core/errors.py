"""
Plugin error taxonomy.

Fatal errors abort the run before anything is emitted. RowDecodeError is
the only recoverable one: the fetcher skips the offending row and moves on.
"""

from typing import Optional


class PluginError(Exception):
    """Base class for every error raised by the plugin."""


class DataSourceConnectionError(PluginError, ConnectionError):
    """The database could not be reached."""


class QueryExecutionError(PluginError):
    """A statement from the query set failed to run."""

    def __init__(self, message: str, query_name: Optional[str] = None):
        super().__init__(message)
        self.query_name = query_name


class RowDecodeError(PluginError, ValueError):
    """A returned column could not be read as a finite number."""


class TransportWriteError(PluginError, OSError):
    """The output stream refused the write (closed pipe, full disk, ...)."""


class QuerySetError(PluginError, ValueError):
    """The query set is malformed, e.g. two queries share a result key."""


class DeltaFileError(PluginError):
    """The delta-tracking file could not be written."""
