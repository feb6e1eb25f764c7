"""
Plugin runner - drives a MetricSource through one invocation.

Either prints the graph definitions (agent meta mode) or fetches one
snapshot, prints it and optionally records it in the delta file.
"""

import json
import logging
import os
import sys
import tempfile as _tempfile
import time
from typing import Dict, List, Optional, TextIO

from postgres_metrics.core.emitter import emit, emit_schema
from postgres_metrics.core.errors import DeltaFileError
from postgres_metrics.core.queries import Number
from postgres_metrics.core.source import MetricSource


def save_values(path: str, snapshot: Dict[str, Number], timestamp: int) -> None:
    """
    Record the emitted snapshot for the agent's delta tracking.

    Writes {"_lastTime": timestamp, <key>: <value>, ...} through a sibling
    temporary file and os.replace so readers never see a partial file.

    Raises:
        DeltaFileError: If the file cannot be written
    """
    data = {"_lastTime": timestamp}
    data.update(snapshot)

    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        fd, tmp_path = _tempfile.mkstemp(prefix=".postgres-metrics-", dir=directory)
        with os.fdopen(fd, "w") as f:
            json.dump(data, f)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        raise DeltaFileError(f"cannot write delta file {path}: {e}") from e
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)


class PluginRunner:
    """Generic host for a MetricSource."""

    def __init__(self, source: MetricSource, tempfile: Optional[str] = None,
                 out: Optional[TextIO] = None,
                 logger: Optional[logging.Logger] = None):
        self.source = source
        self.tempfile = tempfile
        self.out = out
        self.logger = logger or logging.getLogger(__name__)

    def output_values(self, timestamp: Optional[int] = None) -> List[str]:
        """Fetch one snapshot and write it. Nothing is written if the fetch fails."""
        if timestamp is None:
            timestamp = int(time.time())

        snapshot = self.source.fetch_metrics()
        lines = emit(
            snapshot,
            self.source.graph_definition(),
            self.source.metric_key_prefix(),
            timestamp=timestamp,
            out=self.out if self.out is not None else sys.stdout,
            logger=self.logger,
        )

        if self.tempfile:
            save_values(self.tempfile, snapshot, timestamp)
        return lines

    def output_definitions(self) -> str:
        """Write the graph definitions document."""
        return emit_schema(
            self.source.graph_definition(),
            self.source.metric_key_prefix(),
            out=self.out if self.out is not None else sys.stdout,
        )

    def run(self, graphdef: bool = False) -> None:
        if graphdef:
            self.output_definitions()
        else:
            self.output_values()
