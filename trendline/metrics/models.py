"""
Metrics Request Models

Value types describing what to aggregate, over which slice of time,
and how gaps in the resulting series are filled.
"""

import calendar
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Union

from .errors import InvalidAggregate, InvalidDateFormat, InvalidPeriod

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_ISO_FORMAT = "YYYY-MM-DD"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

BucketKey = Union[int, str]


# --- Enums ---

class Period(str, Enum):
    """Time unit a series is grouped by."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value: Any) -> "Period":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidPeriod(value) from None


class Aggregate(str, Enum):
    """Aggregate functions supported by every backend."""
    COUNT = "count"
    SUM = "sum"
    AVERAGE = "avg"
    MAX = "max"
    MIN = "min"

    @classmethod
    def parse(cls, value: Any) -> "Aggregate":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidAggregate(value) from None


def iso_week(d: date) -> int:
    return d.isocalendar()[1]


def parse_strict_date(value: Any) -> date:
    """Parse a YYYY-MM-DD string, rejecting anything that does not round-trip."""
    if not isinstance(value, str):
        raise InvalidDateFormat(value)
    try:
        parsed = datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise InvalidDateFormat(value) from None
    if parsed.strftime(DATE_FORMAT) != value:
        raise InvalidDateFormat(value)
    return parsed


def validate_identifier(value: str) -> str:
    """Accept plain or table-qualified column names only."""
    if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
        raise ValueError(f"Invalid identifier: {value!r}")
    return value


# --- Periods ---

@dataclass(frozen=True)
class Anchor:
    """Reference date a relative period is computed against."""
    year: int
    month: int
    day: int
    week: int

    @property
    def as_date(self) -> date:
        return date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, d: date, week_of: Callable[[date], int] = iso_week) -> "Anchor":
        return cls(year=d.year, month=d.month, day=d.day, week=week_of(d))

    @classmethod
    def resolve(
        cls,
        today: date,
        year: int | None = None,
        month: int | None = None,
        day: int | None = None,
        week: int | None = None,
        week_of: Callable[[date], int] = iso_week,
    ) -> "Anchor":
        """
        Resolve a partially pinned anchor against today's date.

        A pinned year other than the current one defaults the month to
        December; a pinned month other than the current one defaults the
        day to the last day of that month. Past periods are therefore
        enumerated in full rather than cut at today's day or month.
        """
        year = year if year is not None else today.year
        if month is None:
            month = today.month if year == today.year else 12
        if not 1 <= month <= 12:
            raise InvalidPeriod(month)

        last_day = calendar.monthrange(year, month)[1]
        if day is None:
            day = today.day if (year, month) == (today.year, today.month) else last_day
        day = min(max(day, 1), last_day)

        resolved = date(year, month, day)
        return cls(
            year=year,
            month=month,
            day=day,
            week=week if week is not None else week_of(resolved),
        )


@dataclass(frozen=True)
class RelativePeriod:
    """
    A period relative to an anchor.

    window=0 selects the anchor bucket, window=1 exactly that sub-bucket,
    and window>1 the last N sub-buckets ending at the anchor.
    """
    granularity: Period
    anchor: Anchor
    window: int = 0

    def __post_init__(self):
        object.__setattr__(self, "granularity", Period.parse(self.granularity))
        if not isinstance(self.window, int) or self.window < 0:
            raise InvalidPeriod(self.window)


@dataclass(frozen=True)
class ExplicitPeriod:
    """Inclusive [start, end] date range split into buckets of one granularity."""
    start: str
    end: str
    granularity: Period = Period.DAY
    iso_format: str = DEFAULT_ISO_FORMAT

    def __post_init__(self):
        parse_strict_date(self.start)
        parse_strict_date(self.end)
        object.__setattr__(self, "granularity", Period.parse(self.granularity))

    @property
    def start_date(self) -> date:
        return parse_strict_date(self.start)

    @property
    def end_date(self) -> date:
        return parse_strict_date(self.end)


PeriodSpec = Union[RelativePeriod, ExplicitPeriod]


# --- Requests ---

@dataclass(frozen=True)
class AggregateRequest:
    """What to aggregate and how labels are rendered."""
    function: Aggregate = Aggregate.COUNT
    value_column: str = "id"
    date_column: str = "created_at"
    table: str | None = None
    label_column: str | None = None
    locale: str = "en"

    def __post_init__(self):
        object.__setattr__(self, "function", Aggregate.parse(self.function))
        validate_identifier(self.value_column)
        validate_identifier(self.date_column)
        if self.table is not None:
            validate_identifier(self.table)
        if self.label_column is not None:
            validate_identifier(self.label_column)

    def qualify(self, column: str) -> str:
        if self.table and "." not in column:
            return f"{self.table}.{column}"
        return column

    @property
    def value_expr(self) -> str:
        return self.qualify(self.value_column)

    @property
    def date_expr(self) -> str:
        return self.qualify(self.date_column)

    @property
    def label_expr(self) -> str | None:
        if self.label_column is None:
            return None
        return self.qualify(self.label_column)


@dataclass(frozen=True)
class MissingDataPolicy:
    """Whether and how buckets without rows are filled."""
    enabled: bool = False
    default_value: float = 0
    labels: tuple[str, ...] | None = None

    def __post_init__(self):
        if self.labels is not None:
            object.__setattr__(self, "labels", tuple(self.labels))


@dataclass(frozen=True)
class Bucket:
    """One time slice of a trend series."""
    key: BucketKey
    value: Any
    label: str | None = None


# --- Query description ---

@dataclass(frozen=True)
class Predicate:
    """Filter on an expression: op is "=" or "between" (value is a (low, high) pair)."""
    expression: str
    op: str
    value: Any


@dataclass(frozen=True)
class QueryDescription:
    """Declarative query handed to a query executor."""
    table: str | None
    select: tuple[str, ...]
    group_by: str | None = None
    filters: tuple[Predicate, ...] = field(default_factory=tuple)
    order_by: str | None = None
