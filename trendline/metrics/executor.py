"""
Query Executors

The engine hands QueryDescriptions to an executor and gets plain dict
rows back. SQLQueryExecutor runs them against the configured database
through the db layer.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from ..db import connect as db_connect
from ..db import execute
from .models import QueryDescription, validate_identifier

logger = logging.getLogger(__name__)


class QueryExecutor(ABC):
    """Boundary between the engine and the storage backend."""

    @abstractmethod
    def first(self, query: QueryDescription) -> dict[str, Any] | None:
        """Return the first row, or None when the query matches nothing."""
        pass

    @abstractmethod
    def all(self, query: QueryDescription) -> list[dict[str, Any]]:
        """Return every row, in the order the backend produced them."""
        pass


def render_sql(query: QueryDescription, limit: int | None = None) -> tuple[str, dict[str, Any]]:
    """Render a QueryDescription to SQL with :named parameters."""
    if not query.table:
        raise ValueError("QueryDescription has no table")
    validate_identifier(query.table)

    sql = f"SELECT {', '.join(query.select)} FROM {query.table}"
    params: dict[str, Any] = {}

    clauses = []
    for i, predicate in enumerate(query.filters):
        if predicate.op == "=":
            params[f"p{i}"] = predicate.value
            clauses.append(f"{predicate.expression} = :p{i}")
        elif predicate.op == "between":
            low, high = predicate.value
            params[f"p{i}_low"] = low
            params[f"p{i}_high"] = high
            clauses.append(f"{predicate.expression} BETWEEN :p{i}_low AND :p{i}_high")
        else:
            raise ValueError(f"Unsupported predicate operator '{predicate.op}'")

    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    if query.group_by:
        sql += f" GROUP BY {query.group_by}"
    if query.order_by:
        sql += f" ORDER BY {query.order_by} ASC"
    if limit is not None:
        sql += f" LIMIT {int(limit)}"

    return sql, params


class SQLQueryExecutor(QueryExecutor):
    """Runs queries on a DB-API connection obtained from `connect`."""

    def __init__(self, connect: Callable[[], Any] = db_connect):
        self._connect = connect

    def _fetch(self, query: QueryDescription, limit: int | None = None) -> list[dict[str, Any]]:
        sql, params = render_sql(query, limit=limit)
        logger.debug("Executing metrics query: %s %r", sql, params)

        con = self._connect()
        try:
            cur = execute(con, sql, params)
            columns = [desc[0] for desc in cur.description]
            return [dict(zip(columns, row)) for row in cur.fetchall()]
        finally:
            con.close()

    def first(self, query: QueryDescription) -> dict[str, Any] | None:
        rows = self._fetch(query, limit=1)
        return rows[0] if rows else None

    def all(self, query: QueryDescription) -> list[dict[str, Any]]:
        return self._fetch(query)
