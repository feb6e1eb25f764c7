"""
Graph schema registry.

Static description of how metric keys group into graphs on the
monitoring side. Definitions are rebuilt on each call with the
prefix-decorated labels; the underlying constants never change.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from postgres_metrics.config.settings import DEFAULT_PREFIX

# Units accepted by the monitoring agent
UNITS = [
    "float",
    "integer",
    "percentage",
    "seconds",
    "milliseconds",
    "bytes",
    "bytes/sec",
    "bits/sec",
    "iops",
]


@dataclass(frozen=True)
class MetricDefinition:
    """One line on a graph."""
    name: str
    label: str
    stacked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "label": self.label, "stacked": self.stacked}


@dataclass(frozen=True)
class GraphDefinition:
    """A display graph: label, unit and its metrics in order."""
    label: str
    unit: str
    metrics: List[MetricDefinition] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "unit": self.unit,
            "metrics": [m.to_dict() for m in self.metrics],
        }


# =============================================================================
# GRAPH DEFINITIONS
# =============================================================================

# graph id -> (label suffix, unit, [(metric name, metric label), ...])
GRAPHS = {
    "Count": ("Count", "integer", [("count", "Count")]),
    "Sum": ("Sum", "integer", [("sum", "Count")]),
}


def metric_key_prefix(prefix: str = "") -> str:
    """Return the prefix, or the default one when empty or blank."""
    if not prefix or not prefix.strip():
        return DEFAULT_PREFIX
    return prefix.strip()


def title_prefix(prefix: str) -> str:
    """
    Upper-case the first letter of every word.

    Word boundaries are any character that is not a letter, digit or
    underscore; the rest of each word is left as is ("myDB.prod" ->
    "MyDB.Prod").
    """
    return re.sub(r"(^|[^0-9A-Za-z_])([a-z])",
                  lambda m: m.group(1) + m.group(2).upper(), prefix)


def graph_definitions(prefix: str = "") -> Dict[str, GraphDefinition]:
    """
    Build the graph schema for a metric key prefix.

    Args:
        prefix: Metric key prefix; blank falls back to the default

    Returns:
        Dict of graph id to GraphDefinition, in display order
    """
    label_prefix = title_prefix(metric_key_prefix(prefix))

    return {
        graph_id: GraphDefinition(
            label=f"{label_prefix} {suffix}",
            unit=unit,
            metrics=[MetricDefinition(name=name, label=label) for name, label in metrics],
        )
        for graph_id, (suffix, unit, metrics) in GRAPHS.items()
    }


def graph_metric_names(graphs: Dict[str, GraphDefinition]) -> Set[str]:
    """Every metric name referenced by the given graphs."""
    return {metric.name for graph in graphs.values() for metric in graph.metrics}
