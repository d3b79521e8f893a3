"""Merge sparse query rows against the expected bucket list."""

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from .composer import DATA_ALIAS, LABEL_ALIAS
from .models import Bucket, BucketKey


def normalize_key(value: Any) -> Any:
    """
    Bring a raw row label into the domain of enumerated bucket keys.

    Drivers disagree on types: Postgres returns Decimal for EXTRACT, and
    dates come back as date objects or strings depending on the backend.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return value
    if isinstance(value, (Decimal, float)) and value == int(value):
        return int(value)
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return value


def normalize_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == int(value) else float(value)
    return value


def rows_to_buckets(rows: Iterable[Mapping[str, Any]], normalize: bool = True) -> list[Bucket]:
    """Buckets in executor order, one per row, with no gap filling."""
    return [
        Bucket(
            key=normalize_key(row[LABEL_ALIAS]) if normalize else row[LABEL_ALIAS],
            value=normalize_value(row[DATA_ALIAS]),
        )
        for row in rows
    ]


def reconcile(
    rows: Iterable[Mapping[str, Any]],
    expected_keys: Sequence[BucketKey],
    default_value: Any = 0,
) -> list[Bucket]:
    """
    Produce exactly one bucket per expected key, in expected order.

    The first row whose label matches a key supplies its value; keys with
    no row get default_value. Rows outside the expected keys are dropped.
    """
    found: dict[Any, Any] = {}
    for row in rows:
        found.setdefault(normalize_key(row[LABEL_ALIAS]), row[DATA_ALIAS])

    buckets = []
    for key in expected_keys:
        normalized = normalize_key(key)
        if normalized in found:
            value = normalize_value(found[normalized])
        else:
            value = default_value
        buckets.append(Bucket(key=key, value=value))
    return buckets
