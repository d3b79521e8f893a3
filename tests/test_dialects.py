"""Tests for backend date extraction fragments."""

from datetime import date

import pytest

from trendline.metrics.dialects import (
    MySQLExtractor,
    PostgresExtractor,
    SQLiteExtractor,
    get_extractor,
)
from trendline.metrics.models import Period


@pytest.mark.parametrize(
    ("backend", "cls"),
    [
        ("sqlite", SQLiteExtractor),
        ("postgres", PostgresExtractor),
        ("MySQL", MySQLExtractor),
    ],
)
def test_get_extractor_selects_by_backend(backend, cls):
    assert isinstance(get_extractor(backend), cls)


def test_get_extractor_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported backend 'oracle'"):
        get_extractor("oracle")


def test_sqlite_fragments_are_integer_casts():
    ex = SQLiteExtractor()
    assert ex.month("orders.created_at") == "CAST(strftime('%m', orders.created_at) AS INTEGER)"
    assert ex.week("t.d") == "CAST(strftime('%W', t.d) AS INTEGER)"
    assert ex.date("t.d") == "date(t.d)"


def test_postgres_fragments_use_extract():
    ex = PostgresExtractor()
    assert ex.year("t.d") == "CAST(EXTRACT(YEAR FROM t.d) AS INTEGER)"
    assert ex.weekday("t.d") == "CAST(EXTRACT(DOW FROM t.d) AS INTEGER)"
    assert ex.date("t.d") == "CAST(t.d AS DATE)"


def test_mysql_fragments_use_native_functions():
    ex = MySQLExtractor()
    assert ex.day("t.d") == "DAYOFMONTH(t.d)"
    assert ex.week("t.d") == "WEEK(t.d, 3)"
    assert ex.weekday("t.d") == "(DAYOFWEEK(t.d) - 1)"


@pytest.mark.parametrize(
    ("granularity", "method"),
    [
        (Period.DAY, "day"),
        (Period.WEEK, "week"),
        (Period.MONTH, "month"),
        (Period.YEAR, "year"),
    ],
)
def test_ordinal_maps_granularity_to_fragment(granularity, method):
    ex = PostgresExtractor()
    assert ex.ordinal(granularity, "t.d") == getattr(ex, method)("t.d")


def test_week_numbering_matches_backend():
    d = date(2027, 1, 1)
    assert SQLiteExtractor().week_of(d) == 0
    assert PostgresExtractor().week_of(d) == 53
    assert MySQLExtractor().week_of(d) == 53
