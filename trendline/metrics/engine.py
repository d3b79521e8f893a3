"""
Metrics Engine

Facade over composition, execution, reconciliation and label formatting.
Each call performs at most one executor round trip and keeps no state.
"""

import logging
from dataclasses import replace
from typing import Any

from .buckets import bucket_keys
from .composer import QueryComposer
from .config import MetricsSettings, load_settings
from .dialects import DateExtractor, get_extractor
from .executor import QueryExecutor, SQLQueryExecutor
from .labels import LabelFormatter
from .models import (
    AggregateRequest,
    Bucket,
    ExplicitPeriod,
    MissingDataPolicy,
    Period,
    PeriodSpec,
    RelativePeriod,
)
from .reconciler import normalize_value, reconcile, rows_to_buckets

logger = logging.getLogger(__name__)


def flatten(buckets: list[Bucket]) -> dict[str, list]:
    """Split buckets into parallel labels/data lists, preserving order."""
    return {
        "labels": [bucket.label for bucket in buckets],
        "data": [bucket.value for bucket in buckets],
    }


class MetricsEngine:
    """Computes single aggregates and bucketed trend series."""

    def __init__(
        self,
        executor: QueryExecutor,
        extractor: DateExtractor | None = None,
        settings: MetricsSettings | None = None,
    ):
        self.settings = settings or load_settings()
        self.executor = executor
        self.extractor = extractor or get_extractor(self.settings.backend)
        self.composer = QueryComposer(self.extractor)

    @classmethod
    def from_settings(cls, settings: MetricsSettings | None = None) -> "MetricsEngine":
        """Engine backed by the configured database."""
        settings = settings or load_settings()
        return cls(SQLQueryExecutor(), get_extractor(settings.backend), settings)

    def week_of(self, d) -> int:
        return self.extractor.week_of(d)

    def formatter(self, request: AggregateRequest, spec: PeriodSpec | None) -> LabelFormatter:
        if isinstance(spec, ExplicitPeriod):
            return LabelFormatter(spec.granularity, locale=request.locale, iso_format=spec.iso_format)
        if isinstance(spec, RelativePeriod):
            return LabelFormatter(spec.granularity, anchor=spec.anchor, locale=request.locale)
        return LabelFormatter(Period.YEAR, locale=request.locale, iso_format=self.settings.date_format)

    def metrics(self, request: AggregateRequest, spec: PeriodSpec | None = None) -> Any:
        """
        Compute one aggregate value over the period.

        Returns 0 when the backend returns no row or a NULL aggregate.
        """
        query = self.composer.compose_metric(request, spec)
        logger.debug("Computing %s(%s) on %s", request.function.value, request.value_expr, request.table)

        row = self.executor.first(query)
        if row is None or row.get("data") is None:
            return 0
        return normalize_value(row["data"])

    def trends(
        self,
        request: AggregateRequest,
        spec: PeriodSpec | None = None,
        policy: MissingDataPolicy | None = None,
    ) -> dict[str, list]:
        """
        Compute a labelled series for charting.

        With the policy enabled, the series has exactly one bucket per
        expected key whatever rows came back. Forced labels only apply
        when grouping by a label column; calendar series ignore them.
        Otherwise the rows are returned as-is, already ordered by label.

        Returns:
            {"labels": [...], "data": [...]} with equal-length lists
        """
        policy = policy or MissingDataPolicy()
        query = self.composer.compose_trend(request, spec)
        logger.debug("Computing %s(%s) trend on %s", request.function.value, request.value_expr, request.table)

        rows = self.executor.all(query)

        if request.label_column is not None:
            if policy.enabled and policy.labels is not None:
                buckets = reconcile(rows, policy.labels, policy.default_value)
            else:
                buckets = rows_to_buckets(rows, normalize=False)
            return flatten([replace(bucket, label=str(bucket.key)) for bucket in buckets])

        if policy.enabled and spec is not None:
            buckets = reconcile(rows, bucket_keys(spec, self.week_of), policy.default_value)
        else:
            buckets = rows_to_buckets(rows)

        formatter = self.formatter(request, spec)
        return flatten([replace(bucket, label=formatter.format(bucket.key)) for bucket in buckets])
