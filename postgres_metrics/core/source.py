"""
Metric sources.

MetricSource is the contract the runner consumes; PostgresPlugin is the
PostgreSQL implementation built on the fetcher and graph registry.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

from postgres_metrics.config.settings import DEFAULT_PREFIX
from postgres_metrics.core.db import ConnectionParams
from postgres_metrics.core.fetcher import fetch_metrics
from postgres_metrics.core.graphs import GraphDefinition, graph_definitions, metric_key_prefix
from postgres_metrics.core.queries import QUERY_SET, Number, QueryDefinition, validate_query_set


class MetricSource(ABC):
    """Something that can produce a metric snapshot and describe its graphs."""

    @abstractmethod
    def metric_key_prefix(self) -> str:
        """Prefix for every emitted metric name."""

    @abstractmethod
    def fetch_metrics(self) -> Dict[str, Number]:
        """Collect one snapshot."""

    @abstractmethod
    def graph_definition(self) -> Dict[str, GraphDefinition]:
        """Graph schema for the snapshot keys."""


class PostgresPlugin(MetricSource):
    """Runs the aggregate query set against one PostgreSQL server."""

    def __init__(self, params: ConnectionParams, prefix: str = DEFAULT_PREFIX,
                 query_set: Sequence[QueryDefinition] = QUERY_SET,
                 logger: Optional[logging.Logger] = None):
        self.params = params
        self.prefix = prefix
        self.query_set = validate_query_set(query_set)
        self.logger = logger or logging.getLogger(__name__)

    def metric_key_prefix(self) -> str:
        return metric_key_prefix(self.prefix)

    def fetch_metrics(self) -> Dict[str, Number]:
        return fetch_metrics(self.params, self.query_set, logger=self.logger)

    def graph_definition(self) -> Dict[str, GraphDefinition]:
        return graph_definitions(self.metric_key_prefix())
