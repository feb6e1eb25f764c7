"""Core plugin components."""

from .errors import (
    PluginError,
    DataSourceConnectionError,
    QueryExecutionError,
    RowDecodeError,
    TransportWriteError,
    QuerySetError,
    DeltaFileError,
)

from .db import ConnectionParams, get_connection, make_connect_kwargs

from .queries import QUERY_SET, QueryDefinition, validate_query_set, result_keys

from .fetcher import (
    decode_value,
    fetch_scalar,
    fetch_fragments,
    fetch_metrics,
    merge_stat,
    merge_fragments,
)

from .graphs import (
    GraphDefinition,
    MetricDefinition,
    graph_definitions,
    graph_metric_names,
    metric_key_prefix,
)

from .emitter import emit, emit_schema, format_value

from .source import MetricSource, PostgresPlugin

from .runner import PluginRunner, save_values

__all__ = [
    # Errors
    "PluginError",
    "DataSourceConnectionError",
    "QueryExecutionError",
    "RowDecodeError",
    "TransportWriteError",
    "QuerySetError",
    "DeltaFileError",
    # Database
    "ConnectionParams",
    "get_connection",
    "make_connect_kwargs",
    # Queries
    "QUERY_SET",
    "QueryDefinition",
    "validate_query_set",
    "result_keys",
    # Fetcher / merger
    "decode_value",
    "fetch_scalar",
    "fetch_fragments",
    "fetch_metrics",
    "merge_stat",
    "merge_fragments",
    # Graphs
    "GraphDefinition",
    "MetricDefinition",
    "graph_definitions",
    "graph_metric_names",
    "metric_key_prefix",
    # Emission
    "emit",
    "emit_schema",
    "format_value",
    # Sources
    "MetricSource",
    "PostgresPlugin",
    "PluginRunner",
    "save_values",
]
