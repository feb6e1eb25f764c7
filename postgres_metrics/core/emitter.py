"""
Emitter - writes metric values and graph definitions for the agent.

Values are tab-separated lines:

    <prefix>.<graph id>.<metric name>\t<value>\t<unix seconds>

Graph definitions are a header line followed by one JSON document.
"""

import json
import logging
import sys
import time
from decimal import Decimal
from typing import Dict, List, Optional, TextIO

from postgres_metrics.core.errors import TransportWriteError
from postgres_metrics.core.graphs import GraphDefinition, metric_key_prefix
from postgres_metrics.core.queries import Number

_logger = logging.getLogger(__name__)

SCHEMA_HEADER = "# mackerel-agent-plugin"


def format_value(value: Number) -> str:
    """
    Render a value as a plain number.

    Integers print as integers; floats use the shortest round-trip form
    and never exponent notation (42.0, 0.1, 100000000000000000000.0).
    """
    if isinstance(value, int):
        return str(value)

    text = repr(float(value))
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
        if "." not in text:
            text += ".0"
    return text


def render_metric_lines(snapshot: Dict[str, Number],
                        schema: Dict[str, GraphDefinition],
                        prefix: str,
                        timestamp: int,
                        logger: Optional[logging.Logger] = None) -> List[str]:
    """
    Render every snapshot value as an output line.

    Graph metrics come first, in schema order. Snapshot keys that no graph
    references follow as <prefix>.<key> so nothing is dropped.

    Returns:
        Lines without trailing newlines
    """
    logger = logger or _logger
    prefix = metric_key_prefix(prefix)
    lines = []
    assigned = set()

    for graph_id, graph in schema.items():
        for metric in graph.metrics:
            if metric.name not in snapshot:
                logger.debug("No value for %s.%s", graph_id, metric.name)
                continue
            assigned.add(metric.name)
            value = format_value(snapshot[metric.name])
            lines.append(f"{prefix}.{graph_id}.{metric.name}\t{value}\t{timestamp}")

    for key, raw in snapshot.items():
        if key in assigned:
            continue
        logger.debug("Metric %s is not in any graph, emitting unassigned", key)
        lines.append(f"{prefix}.{key}\t{format_value(raw)}\t{timestamp}")

    return lines


def _write(out: TextIO, text: str) -> None:
    try:
        out.write(text)
        out.flush()
    except (OSError, ValueError) as e:
        # ValueError: write to a closed stream
        raise TransportWriteError(f"cannot write output: {e}") from e


def emit(snapshot: Dict[str, Number],
         schema: Dict[str, GraphDefinition],
         prefix: str,
         timestamp: Optional[int] = None,
         out: Optional[TextIO] = None,
         logger: Optional[logging.Logger] = None) -> List[str]:
    """
    Write the snapshot to the output stream.

    All lines are rendered before the single write, so a failure never
    leaves half a snapshot behind on our side.

    Args:
        snapshot: Merged metric values
        schema: Graph definitions used to build metric names
        prefix: Metric key prefix
        timestamp: Unix seconds; defaults to now
        out: Output stream; defaults to sys.stdout

    Returns:
        Emitted lines

    Raises:
        TransportWriteError: If the stream cannot be written
    """
    logger = logger or _logger
    out = out if out is not None else sys.stdout
    if timestamp is None:
        timestamp = int(time.time())

    lines = render_metric_lines(snapshot, schema, prefix, timestamp, logger=logger)
    if lines:
        _write(out, "\n".join(lines) + "\n")
    logger.debug("Emitted %d metric lines", len(lines))
    return lines


def schema_document(schema: Dict[str, GraphDefinition], prefix: str) -> Dict[str, Dict]:
    """Graph definitions keyed by <prefix>.<graph id>, as plain dicts."""
    prefix = metric_key_prefix(prefix)
    return {
        "graphs": {
            f"{prefix}.{graph_id}": graph.to_dict()
            for graph_id, graph in schema.items()
        }
    }


def emit_schema(schema: Dict[str, GraphDefinition],
                prefix: str,
                out: Optional[TextIO] = None) -> str:
    """
    Write the graph definitions document.

    Returns:
        The written text

    Raises:
        TransportWriteError: If the stream cannot be written
    """
    out = out if out is not None else sys.stdout
    text = SCHEMA_HEADER + "\n" + json.dumps(schema_document(schema, prefix)) + "\n"
    _write(out, text)
    return text
