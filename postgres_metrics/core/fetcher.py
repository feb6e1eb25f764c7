"""
Fetcher - runs the query set over a single connection and merges results.

Each query produces one fragment ({result_key: value}). Fragments are
merged in query-set order into the metric snapshot.
"""

import logging
import math
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

import psycopg2

from postgres_metrics.core.db import ConnectionParams, get_connection
from postgres_metrics.core.errors import QueryExecutionError, RowDecodeError
from postgres_metrics.core.queries import QUERY_SET, Number, QueryDefinition

_logger = logging.getLogger(__name__)


def decode_value(raw: Any) -> Number:
    """
    Read a column value as a finite number.

    Integers are kept as int; Decimal, float and numeric text become float.

    Raises:
        RowDecodeError: On NULL, booleans, non-numeric text or NaN/Infinity
    """
    if raw is None:
        raise RowDecodeError("NULL value")
    if isinstance(raw, bool):
        raise RowDecodeError(f"boolean value {raw!r}")
    if isinstance(raw, int):
        return raw

    if isinstance(raw, (float, Decimal)):
        value = float(raw)
    elif isinstance(raw, (str, bytes)):
        try:
            value = float(raw)
        except ValueError:
            raise RowDecodeError(f"non-numeric value {raw!r}") from None
    else:
        raise RowDecodeError(f"unsupported column type {type(raw).__name__}")

    if not math.isfinite(value):
        raise RowDecodeError(f"non-finite value {raw!r}")
    return value


def fetch_scalar(conn, query: QueryDefinition,
                 logger: Optional[logging.Logger] = None) -> Dict[str, Number]:
    """
    Run one query and return its fragment.

    The first row whose first column decodes wins. Undecodable rows are
    logged and skipped; with no usable row the query's default is used.

    Args:
        conn: Open psycopg2 connection
        query: Query to run

    Returns:
        Single-key dict {query.result_key: value}

    Raises:
        QueryExecutionError: If the statement fails to run
    """
    logger = logger or _logger

    try:
        with conn.cursor() as cur:
            cur.execute(query.statement)
            # Rows are pulled one at a time; reading stops at the first usable one
            for row in iter(cur.fetchone, None):
                try:
                    value = decode_value(row[0] if row else None)
                except RowDecodeError as e:
                    logger.warning("Failed to scan %s row: %s", query.name, e)
                    continue
                return {query.result_key: value}
    except psycopg2.Error as e:
        logger.error("Failed to select (%s). %s", query.name, e)
        raise QueryExecutionError(f"query {query.name!r} failed: {e}", query.name) from e

    logger.debug("No usable row for %s, using default %r", query.name, query.default_value)
    return {query.result_key: query.default_value}


def fetch_fragments(params: ConnectionParams,
                    query_set: Sequence[QueryDefinition] = QUERY_SET,
                    logger: Optional[logging.Logger] = None) -> List[Dict[str, Number]]:
    """
    Open one connection and run every query in order.

    Args:
        params: Connection descriptor
        query_set: Queries to run, in merge order

    Returns:
        One fragment per query, in query-set order

    Raises:
        DataSourceConnectionError: If the database cannot be reached
        QueryExecutionError: If any statement fails (no partial result)
    """
    logger = logger or _logger
    fragments = []

    with get_connection(params, logger=logger) as conn:
        for query in query_set:
            fragments.append(fetch_scalar(conn, query, logger=logger))

    return fragments


def merge_stat(dst: Dict[str, Number], src: Dict[str, Number]) -> None:
    """Copy every key of src into dst, overwriting existing ones."""
    for key, value in src.items():
        dst[key] = value


def merge_fragments(fragments: Iterable[Dict[str, Number]]) -> Dict[str, Number]:
    """
    Merge fragments into a single snapshot.

    Later fragments overwrite earlier ones on a shared key.
    """
    stat = {}
    for fragment in fragments:
        merge_stat(stat, fragment)
    return stat


def fetch_metrics(params: ConnectionParams,
                  query_set: Sequence[QueryDefinition] = QUERY_SET,
                  logger: Optional[logging.Logger] = None) -> Dict[str, Number]:
    """Fetch and merge: the full snapshot for one invocation."""
    return merge_fragments(fetch_fragments(params, query_set, logger=logger))
