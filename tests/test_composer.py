"""Tests for query composition."""

import pytest

from trendline.metrics.composer import QueryComposer
from trendline.metrics.dialects import MySQLExtractor, SQLiteExtractor
from trendline.metrics.models import (
    Aggregate,
    AggregateRequest,
    Anchor,
    ExplicitPeriod,
    Period,
    Predicate,
    RelativePeriod,
)

ANCHOR = Anchor(2024, 6, 15, 24)


@pytest.fixture
def composer():
    return QueryComposer(MySQLExtractor())


@pytest.fixture
def request_():
    return AggregateRequest(Aggregate.SUM, "amount", table="orders")


def test_metric_query_has_no_grouping(composer, request_):
    query = composer.compose_metric(request_, RelativePeriod(Period.MONTH, ANCHOR, window=0))

    assert query.table == "orders"
    assert query.select == ("sum(orders.amount) AS data",)
    assert query.group_by is None
    assert query.order_by is None


def test_trend_query_groups_and_orders_by_label(composer, request_):
    query = composer.compose_trend(request_, RelativePeriod(Period.MONTH, ANCHOR, window=0))

    assert query.select == ("sum(orders.amount) AS data", "MONTH(orders.created_at) AS label")
    assert query.group_by == "label"
    assert query.order_by == "label"


def test_compose_switches_on_trend_flag(composer, request_):
    spec = RelativePeriod(Period.YEAR, ANCHOR)
    assert composer.compose(request_, spec, trend=False) == composer.compose_metric(request_, spec)
    assert composer.compose(request_, spec) == composer.compose_trend(request_, spec)


@pytest.mark.parametrize("window", [0, 1])
def test_day_filters_equality_on_anchor_day(composer, request_, window):
    query = composer.compose_trend(request_, RelativePeriod(Period.DAY, ANCHOR, window=window))

    assert query.filters == (
        Predicate("YEAR(orders.created_at)", "=", 2024),
        Predicate("MONTH(orders.created_at)", "=", 6),
        Predicate("DAYOFMONTH(orders.created_at)", "=", 15),
    )


def test_day_window_uses_enumerated_bounds(composer, request_):
    query = composer.compose_trend(request_, RelativePeriod(Period.DAY, ANCHOR, window=30))

    assert query.filters[-1] == Predicate("DAYOFMONTH(orders.created_at)", "between", (1, 15))
    assert query.select[1] == "DAYOFMONTH(orders.created_at) AS label"


def test_week_filters_year_month_then_week_range(composer, request_):
    query = composer.compose_trend(request_, RelativePeriod(Period.WEEK, ANCHOR, window=5))

    assert query.filters == (
        Predicate("YEAR(orders.created_at)", "=", 2024),
        Predicate("MONTH(orders.created_at)", "=", 6),
        Predicate("WEEK(orders.created_at, 3)", "between", (22, 24)),
    )


def test_month_filters_year_but_not_month(composer, request_):
    query = composer.compose_trend(request_, RelativePeriod(Period.MONTH, ANCHOR, window=3))

    assert query.filters == (
        Predicate("YEAR(orders.created_at)", "=", 2024),
        Predicate("MONTH(orders.created_at)", "between", (3, 6)),
    )


def test_year_has_no_outer_year_filter(composer, request_):
    query = composer.compose_trend(request_, RelativePeriod(Period.YEAR, ANCHOR, window=2))

    assert query.filters == (Predicate("YEAR(orders.created_at)", "between", (2022, 2024)),)


def test_explicit_range_filters_and_groups_by_date(composer, request_):
    spec = ExplicitPeriod("2024-01-01", "2024-03-31", Period.MONTH)
    query = composer.compose_trend(request_, spec)

    assert query.filters == (Predicate("DATE(orders.created_at)", "between", ("2024-01-01", "2024-03-31")),)
    assert query.select[1] == "DATE(orders.created_at) AS label"


def test_label_column_replaces_grouping_expression(composer):
    request = AggregateRequest(Aggregate.COUNT, table="orders", label_column="status")
    query = composer.compose_trend(request, RelativePeriod(Period.MONTH, ANCHOR, window=0))

    assert query.select == ("count(orders.id) AS data", "orders.status AS label")
    assert query.group_by == "label"
    assert query.filters[0] == Predicate("YEAR(orders.created_at)", "=", 2024)


def test_all_time_request_has_no_filters(composer, request_):
    assert composer.compose_metric(request_, None).filters == ()
    assert composer.compose_trend(request_, None).select[1] == "YEAR(orders.created_at) AS label"


def test_sqlite_week_bounds_follow_sqlite_numbering():
    composer = QueryComposer(SQLiteExtractor())
    anchor = Anchor(2027, 1, 20, 3)
    query = composer.compose_trend(AggregateRequest(table="t"), RelativePeriod(Period.WEEK, anchor, window=5))

    assert query.filters[-1] == Predicate("CAST(strftime('%W', t.created_at) AS INTEGER)", "between", (0, 3))
