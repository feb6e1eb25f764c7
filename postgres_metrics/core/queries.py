"""
Query set - the aggregate statements the plugin runs on every invocation.

Each query yields at most one scalar, stored under its result_key.
"""

from dataclasses import dataclass
from typing import List, Sequence, Union

from postgres_metrics.core.errors import QuerySetError

Number = Union[int, float]


@dataclass(frozen=True)
class QueryDefinition:
    """A named aggregate query and the metric key it fills."""
    name: str
    statement: str
    result_key: str
    default_value: Number = 0


def validate_query_set(query_set: Sequence[QueryDefinition]) -> List[QueryDefinition]:
    """
    Check that no two queries write the same metric key.

    Args:
        query_set: Queries in execution order

    Returns:
        The queries as a list, unchanged

    Raises:
        QuerySetError: On a duplicated result_key or query name
    """
    seen_keys = {}
    seen_names = set()
    for query in query_set:
        if query.result_key in seen_keys:
            raise QuerySetError(
                f"queries {seen_keys[query.result_key]!r} and {query.name!r} "
                f"both produce {query.result_key!r}"
            )
        if query.name in seen_names:
            raise QuerySetError(f"duplicate query name {query.name!r}")
        seen_keys[query.result_key] = query.name
        seen_names.add(query.name)
    return list(query_set)


QUERY_SET = tuple(validate_query_set([
    QueryDefinition(
        name="count",
        statement="select count(*) from sample",
        result_key="count",
        default_value=0,
    ),
    QueryDefinition(
        name="sum",
        statement="select sum(column2) from sample",
        result_key="sum",
        default_value=0,
    ),
]))


def result_keys(query_set: Sequence[QueryDefinition] = QUERY_SET) -> List[str]:
    """Metric keys the given query set can produce, in order."""
    return [q.result_key for q in query_set]
