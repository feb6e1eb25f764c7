"""
PostgreSQL metrics plugin for mackerel-agent.

Runs a fixed set of aggregate queries against one PostgreSQL server and
prints the results (or their graph definitions) in the agent's plugin
format.

Quick Start:
    from postgres_metrics import ConnectionParams, PostgresPlugin, PluginRunner

    plugin = PostgresPlugin(ConnectionParams(username="postgres"))
    PluginRunner(plugin).run()
"""

__version__ = "1.0.0"

from .core import (
    ConnectionParams,
    PostgresPlugin,
    MetricSource,
    PluginRunner,
    PluginError,
    QUERY_SET,
    graph_definitions,
    fetch_metrics,
    merge_fragments,
    emit,
    emit_schema,
)

__all__ = [
    "__version__",
    "ConnectionParams",
    "PostgresPlugin",
    "MetricSource",
    "PluginRunner",
    "PluginError",
    "QUERY_SET",
    "graph_definitions",
    "fetch_metrics",
    "merge_fragments",
    "emit",
    "emit_schema",
]
