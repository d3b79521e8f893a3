"""
Metrics Module

Aggregate metrics and time-bucketed trend series over a relational table:
- Relative periods (last N days/weeks/months/years from an anchor)
- Explicit date ranges split into day/week/month/year buckets
- Gap filling against the calendar-derived bucket list
- Locale-aware labels
"""

from .builder import Metrics
from .buckets import bucket_keys, window_bounds
from .composer import QueryComposer
from .config import MetricsSettings, load_settings
from .dialects import (
    DateExtractor,
    MySQLExtractor,
    PostgresExtractor,
    SQLiteExtractor,
    get_extractor,
)
from .engine import MetricsEngine
from .errors import InvalidAggregate, InvalidDateFormat, InvalidPeriod, MetricsError
from .executor import QueryExecutor, SQLQueryExecutor
from .labels import LabelFormatter
from .models import (
    Aggregate,
    AggregateRequest,
    Anchor,
    Bucket,
    ExplicitPeriod,
    MissingDataPolicy,
    Period,
    Predicate,
    QueryDescription,
    RelativePeriod,
)
from .reconciler import reconcile

__all__ = [
    "Metrics",
    "MetricsEngine",
    "MetricsSettings",
    "load_settings",
    "bucket_keys",
    "window_bounds",
    "QueryComposer",
    "DateExtractor",
    "SQLiteExtractor",
    "PostgresExtractor",
    "MySQLExtractor",
    "get_extractor",
    "QueryExecutor",
    "SQLQueryExecutor",
    "LabelFormatter",
    "reconcile",
    "Aggregate",
    "AggregateRequest",
    "Anchor",
    "Bucket",
    "ExplicitPeriod",
    "MissingDataPolicy",
    "Period",
    "Predicate",
    "QueryDescription",
    "RelativePeriod",
    "MetricsError",
    "InvalidPeriod",
    "InvalidAggregate",
    "InvalidDateFormat",
]
