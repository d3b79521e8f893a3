"""Tests for the metrics engine facade."""

from datetime import date

import pytest

from trendline.metrics.config import MetricsSettings
from trendline.metrics.dialects import SQLiteExtractor
from trendline.metrics.engine import MetricsEngine, flatten
from trendline.metrics.executor import QueryExecutor
from trendline.metrics.models import (
    Aggregate,
    AggregateRequest,
    Anchor,
    Bucket,
    ExplicitPeriod,
    MissingDataPolicy,
    Period,
    RelativePeriod,
)


class FakeExecutor(QueryExecutor):
    """Returns canned rows and records every query it receives."""

    def __init__(self, rows=None, row=None):
        self.rows = rows or []
        self.row = row
        self.queries = []

    def first(self, query):
        self.queries.append(query)
        return self.row

    def all(self, query):
        self.queries.append(query)
        return list(self.rows)


def make_engine(executor, **settings):
    return MetricsEngine(executor, SQLiteExtractor(), MetricsSettings(**settings))


REQUEST = AggregateRequest(Aggregate.COUNT, table="orders")
JANUARY = RelativePeriod(Period.MONTH, Anchor(2024, 1, 20, 3), window=0)


# ---------------------------------------------------------------------------
# metrics()
# ---------------------------------------------------------------------------

class TestMetrics:
    def test_no_row_returns_zero(self):
        executor = FakeExecutor(row=None)
        assert make_engine(executor).metrics(REQUEST, JANUARY) == 0
        assert len(executor.queries) == 1
        assert executor.queries[0].group_by is None

    def test_null_aggregate_returns_zero(self):
        assert make_engine(FakeExecutor(row={"data": None})).metrics(REQUEST, JANUARY) == 0

    def test_returns_aggregate_value(self):
        assert make_engine(FakeExecutor(row={"data": 42})).metrics(REQUEST, JANUARY) == 42


# ---------------------------------------------------------------------------
# trends()
# ---------------------------------------------------------------------------

class TestTrends:
    def test_empty_month_is_filled_with_anchor_month(self):
        executor = FakeExecutor(rows=[])
        result = make_engine(executor).trends(REQUEST, JANUARY, MissingDataPolicy(enabled=True, default_value=0))

        assert result == {"labels": ["January"], "data": [0]}
        assert len(executor.queries) == 1

    def test_explicit_range_scenario(self):
        executor = FakeExecutor(rows=[
            {"label": "2024-01-01", "data": 5},
            {"label": "2024-01-03", "data": 2},
        ])
        spec = ExplicitPeriod("2024-01-01", "2024-01-03", Period.DAY)
        result = make_engine(executor).trends(REQUEST, spec, MissingDataPolicy(enabled=True))

        assert result == {
            "labels": ["2024-01-01", "2024-01-02", "2024-01-03"],
            "data": [5, 0, 2],
        }

    def test_without_fill_rows_are_returned_as_is(self):
        executor = FakeExecutor(rows=[{"label": 3, "data": 1}, {"label": 5, "data": 2}])
        spec = RelativePeriod(Period.MONTH, Anchor(2024, 6, 15, 24), window=6)
        result = make_engine(executor).trends(REQUEST, spec)

        assert result == {"labels": ["March", "May"], "data": [1, 2]}

    def test_fill_uses_calendar_not_row_count(self):
        executor = FakeExecutor(rows=[{"label": 4, "data": 9}, {"label": 11, "data": 1}])
        spec = RelativePeriod(Period.MONTH, Anchor(2024, 6, 15, 24), window=3)
        result = make_engine(executor).trends(REQUEST, spec, MissingDataPolicy(enabled=True, default_value=-1))

        assert result["labels"] == ["March", "April", "May", "June"]
        assert result["data"] == [-1, 9, -1, -1]

    def test_day_labels_are_weekdays(self):
        executor = FakeExecutor(rows=[{"label": 2, "data": 4}])
        spec = RelativePeriod(Period.DAY, Anchor(2024, 1, 3, 1), window=7)
        result = make_engine(executor).trends(REQUEST, spec, MissingDataPolicy(enabled=True))

        assert result == {"labels": ["Monday", "Tuesday", "Wednesday"], "data": [0, 4, 0]}

    def test_week_and_year_labels(self):
        weekly = RelativePeriod(Period.WEEK, Anchor(2024, 6, 15, 24), window=1)
        yearly = RelativePeriod(Period.YEAR, Anchor(2024, 6, 15, 24), window=2)
        engine = make_engine(FakeExecutor(rows=[]))
        policy = MissingDataPolicy(enabled=True)

        assert engine.trends(REQUEST, weekly, policy)["labels"] == ["Week 24"]
        assert engine.trends(REQUEST, yearly, policy)["labels"] == ["2022", "2023", "2024"]

    def test_locale_comes_from_request(self):
        request = AggregateRequest(Aggregate.COUNT, table="orders", locale="fr")
        result = make_engine(FakeExecutor()).trends(request, JANUARY, MissingDataPolicy(enabled=True))
        assert result["labels"] == ["janvier"]

    def test_label_set_mode_skips_calendar(self):
        request = AggregateRequest(Aggregate.COUNT, table="orders", label_column="status")
        executor = FakeExecutor(rows=[{"label": "paid", "data": 3}, {"label": "void", "data": 8}])
        policy = MissingDataPolicy(enabled=True, default_value=0, labels=["paid", "pending"])
        result = make_engine(executor).trends(request, JANUARY, policy)

        assert result == {"labels": ["paid", "pending"], "data": [3, 0]}

    def test_forced_labels_ignored_without_label_column(self):
        executor = FakeExecutor(rows=[{"label": 1, "data": 3}, {"label": 2, "data": 1}])
        spec = RelativePeriod(Period.MONTH, Anchor(2024, 6, 30, 26), window=12)
        policy = MissingDataPolicy(enabled=True, default_value=0, labels=["January", "February"])
        result = make_engine(executor).trends(REQUEST, spec, policy)

        assert result["labels"][:3] == ["January", "February", "March"]
        assert result["data"] == [3, 1, 0, 0, 0, 0]

    def test_label_column_without_fill_keeps_raw_labels(self):
        request = AggregateRequest(Aggregate.COUNT, table="orders", label_column="status")
        executor = FakeExecutor(rows=[{"label": "paid", "data": 3}, {"label": "12", "data": 1}])
        result = make_engine(executor).trends(request, JANUARY)

        assert result == {"labels": ["paid", "12"], "data": [3, 1]}

    def test_all_time_trend_groups_by_year(self):
        executor = FakeExecutor(rows=[{"label": 2023, "data": 1}, {"label": 2024, "data": 6}])
        result = make_engine(executor).trends(REQUEST, None, MissingDataPolicy(enabled=True))

        assert result == {"labels": ["2023", "2024"], "data": [1, 6]}

    def test_labels_and_data_have_equal_length(self):
        executor = FakeExecutor(rows=[{"label": d, "data": d} for d in range(1, 40)])
        spec = RelativePeriod(Period.DAY, Anchor(2024, 6, 15, 24), window=10)
        result = make_engine(executor).trends(REQUEST, spec, MissingDataPolicy(enabled=True))

        assert len(result["labels"]) == len(result["data"]) == 11


def test_default_extractor_follows_settings():
    engine = MetricsEngine(FakeExecutor(), settings=MetricsSettings(backend="postgres"))
    assert engine.extractor.backend == "postgres"


def test_week_of_delegates_to_extractor():
    engine = make_engine(FakeExecutor())
    assert engine.week_of(date(2027, 1, 1)) == 0


def test_flatten_preserves_order():
    buckets = [Bucket(key=2, value=20, label="b"), Bucket(key=1, value=10, label="a")]
    assert flatten(buckets) == {"labels": ["b", "a"], "data": [20, 10]}
