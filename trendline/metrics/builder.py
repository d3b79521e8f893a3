"""
Fluent Metrics Builder

Immutable chainable API for dashboards:

    Metrics.query("orders").sum("amount").by_month(6).fill_missing_data().trends()

Every call returns a new builder, so a partially configured builder can
be shared and extended without leaking state between calls. Tokens are
validated as soon as they are supplied.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any

from .engine import MetricsEngine
from .models import (
    DEFAULT_ISO_FORMAT,
    Aggregate,
    AggregateRequest,
    Anchor,
    ExplicitPeriod,
    MissingDataPolicy,
    Period,
    PeriodSpec,
    RelativePeriod,
    parse_strict_date,
    validate_identifier,
)


@dataclass(frozen=True)
class Metrics:
    table: str
    engine: MetricsEngine | None = field(default=None, compare=False, repr=False)

    aggregate: Aggregate = Aggregate.COUNT
    column: str = "id"
    date_col: str = "created_at"
    label_col: str | None = None

    period: Period | None = None
    window: int = 0
    range: tuple[str, str] | None = None
    iso_format: str | None = None
    group: Period = Period.DAY

    year: int | None = None
    month: int | None = None
    day: int | None = None
    week: int | None = None
    reference_date: date | None = None

    locale_code: str | None = None

    fill_missing: bool = False
    missing_value: Any = 0
    missing_labels: tuple[str, ...] | None = None

    def __post_init__(self):
        validate_identifier(self.table)

    @classmethod
    def query(cls, table: str, engine: MetricsEngine | None = None) -> "Metrics":
        return cls(table=table, engine=engine)

    # --- Periods ---

    def by(self, period: str | Period, count: int = 0) -> "Metrics":
        return replace(self, period=Period.parse(period), window=count, range=None)

    def by_day(self, count: int = 0) -> "Metrics":
        return self.by(Period.DAY, count)

    def by_week(self, count: int = 0) -> "Metrics":
        return self.by(Period.WEEK, count)

    def by_month(self, count: int = 0) -> "Metrics":
        return self.by(Period.MONTH, count)

    def by_year(self, count: int = 0) -> "Metrics":
        return self.by(Period.YEAR, count)

    def between(self, start: str, end: str, iso_format: str | None = None) -> "Metrics":
        parse_strict_date(start)
        parse_strict_date(end)
        return replace(self, range=(start, end), iso_format=iso_format, period=None)

    def group_by(self, period: str | Period) -> "Metrics":
        return replace(self, group=Period.parse(period))

    def group_by_day(self) -> "Metrics":
        return self.group_by(Period.DAY)

    def group_by_week(self) -> "Metrics":
        return self.group_by(Period.WEEK)

    def group_by_month(self) -> "Metrics":
        return self.group_by(Period.MONTH)

    def group_by_year(self) -> "Metrics":
        return self.group_by(Period.YEAR)

    # --- Anchor ---

    def for_day(self, day: int) -> "Metrics":
        return replace(self, day=day)

    def for_week(self, week: int) -> "Metrics":
        return replace(self, week=week)

    def for_month(self, month: int) -> "Metrics":
        return replace(self, month=month)

    def for_year(self, year: int) -> "Metrics":
        return replace(self, year=year)

    def today(self, reference_date: date) -> "Metrics":
        """Pin the date relative periods are resolved against."""
        return replace(self, reference_date=reference_date)

    # --- Aggregates ---

    def with_aggregate(self, aggregate: str | Aggregate, column: str) -> "Metrics":
        return replace(self, aggregate=Aggregate.parse(aggregate), column=validate_identifier(column))

    def count(self, column: str = "id") -> "Metrics":
        return self.with_aggregate(Aggregate.COUNT, column)

    def sum(self, column: str) -> "Metrics":
        return self.with_aggregate(Aggregate.SUM, column)

    def average(self, column: str) -> "Metrics":
        return self.with_aggregate(Aggregate.AVERAGE, column)

    def max(self, column: str) -> "Metrics":
        return self.with_aggregate(Aggregate.MAX, column)

    def min(self, column: str) -> "Metrics":
        return self.with_aggregate(Aggregate.MIN, column)

    def aggregate_by(self, aggregate: str | Aggregate, period: str | Period, column: str = "id", count: int = 0) -> "Metrics":
        return self.with_aggregate(aggregate, column).by(period, count)

    def aggregate_between(
        self,
        aggregate: str | Aggregate,
        period: tuple[str, str] | list[str],
        column: str = "id",
        iso_format: str | None = None,
    ) -> "Metrics":
        start, end = period
        return self.with_aggregate(aggregate, column).between(start, end, iso_format)

    # --- Columns, labels, gaps ---

    def date_column(self, column: str) -> "Metrics":
        return replace(self, date_col=validate_identifier(column))

    def label_column(self, column: str) -> "Metrics":
        return replace(self, label_col=validate_identifier(column))

    def locale(self, code: str) -> "Metrics":
        return replace(self, locale_code=code)

    def fill_missing_data(self, missing_value: Any = 0, labels: list[str] | None = None) -> "Metrics":
        return replace(
            self,
            fill_missing=True,
            missing_value=missing_value,
            missing_labels=tuple(labels) if labels is not None else None,
        )

    # --- Terminal calls ---

    def _engine(self) -> MetricsEngine:
        return self.engine or MetricsEngine.from_settings()

    def build(self, engine: MetricsEngine | None = None) -> tuple[AggregateRequest, PeriodSpec | None, MissingDataPolicy]:
        """Freeze the configuration into request, period and gap policy."""
        engine = engine or self._engine()
        settings = engine.settings

        request = AggregateRequest(
            function=self.aggregate,
            value_column=self.column,
            date_column=self.date_col,
            table=self.table,
            label_column=self.label_col,
            locale=self.locale_code or settings.locale,
        )

        spec: PeriodSpec | None = None
        if self.range is not None:
            spec = ExplicitPeriod(
                start=self.range[0],
                end=self.range[1],
                granularity=self.group,
                iso_format=self.iso_format or settings.date_format or DEFAULT_ISO_FORMAT,
            )
        elif self.period is not None:
            anchor = Anchor.resolve(
                self.reference_date or date.today(),
                year=self.year,
                month=self.month,
                day=self.day,
                week=self.week,
                week_of=engine.week_of,
            )
            spec = RelativePeriod(granularity=self.period, anchor=anchor, window=self.window)

        policy = MissingDataPolicy(
            enabled=self.fill_missing,
            default_value=self.missing_value,
            labels=self.missing_labels,
        )
        return request, spec, policy

    def metrics(self) -> Any:
        """Single aggregate value for the configured period."""
        engine = self._engine()
        request, spec, _ = self.build(engine)
        return engine.metrics(request, spec)

    def trends(self) -> dict[str, list]:
        """Labelled series for the configured period."""
        engine = self._engine()
        request, spec, policy = self.build(engine)
        return engine.trends(request, spec, policy)


# Shortcuts mirroring count_by_day(), sum_between() etc.

def _make_by(aggregate: Aggregate, period: Period):
    def method(self: Metrics, column: str = "id", count: int = 0) -> Metrics:
        return self.aggregate_by(aggregate, period, column, count)
    method.__name__ = f"{_PREFIXES[aggregate]}_by_{period.value}"
    return method


def _make_between(aggregate: Aggregate):
    def method(self: Metrics, period, column: str = "id", iso_format: str | None = None) -> Metrics:
        return self.aggregate_between(aggregate, period, column, iso_format)
    method.__name__ = f"{_PREFIXES[aggregate]}_between"
    return method


_PREFIXES = {
    Aggregate.COUNT: "count",
    Aggregate.SUM: "sum",
    Aggregate.AVERAGE: "average",
    Aggregate.MAX: "max",
    Aggregate.MIN: "min",
}

for _aggregate, _prefix in _PREFIXES.items():
    for _period in Period:
        setattr(Metrics, f"{_prefix}_by_{_period.value}", _make_by(_aggregate, _period))
    setattr(Metrics, f"{_prefix}_between", _make_between(_aggregate))
