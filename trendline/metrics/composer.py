"""
Query Composition

Turns an aggregate request and a period into a QueryDescription. Nothing
is executed here.
"""

from .buckets import window_bounds
from .dialects import DateExtractor
from .models import (
    AggregateRequest,
    ExplicitPeriod,
    Period,
    PeriodSpec,
    Predicate,
    QueryDescription,
)

DATA_ALIAS = "data"
LABEL_ALIAS = "label"


class QueryComposer:
    """Builds query descriptions using one backend's date extraction."""

    def __init__(self, extractor: DateExtractor):
        self.extractor = extractor

    def select_data(self, request: AggregateRequest) -> str:
        return f"{request.function.value}({request.value_expr}) AS {DATA_ALIAS}"

    def group_expression(self, request: AggregateRequest, spec: PeriodSpec | None) -> str:
        """Expression rows are grouped by, before aliasing to `label`."""
        if request.label_expr is not None:
            return request.label_expr
        if isinstance(spec, ExplicitPeriod):
            return self.extractor.date(request.date_expr)
        if spec is None:
            return self.extractor.year(request.date_expr)
        return self.extractor.ordinal(spec.granularity, request.date_expr)

    def filters(self, request: AggregateRequest, spec: PeriodSpec | None) -> tuple[Predicate, ...]:
        if spec is None:
            return ()

        column = request.date_expr

        if isinstance(spec, ExplicitPeriod):
            return (
                Predicate(self.extractor.date(column), "between", (spec.start, spec.end)),
            )

        predicates = []
        granularity = spec.granularity
        anchor = spec.anchor

        if granularity != Period.YEAR:
            predicates.append(Predicate(self.extractor.year(column), "=", anchor.year))
        if granularity in (Period.DAY, Period.WEEK):
            predicates.append(Predicate(self.extractor.month(column), "=", anchor.month))

        expression = self.extractor.ordinal(granularity, column)
        lower, upper = window_bounds(spec, self.extractor.week_of)
        if spec.window <= 1:
            predicates.append(Predicate(expression, "=", upper))
        else:
            predicates.append(Predicate(expression, "between", (lower, upper)))

        return tuple(predicates)

    def compose_metric(self, request: AggregateRequest, spec: PeriodSpec | None) -> QueryDescription:
        """Single-row aggregate, no grouping."""
        return QueryDescription(
            table=request.table,
            select=(self.select_data(request),),
            filters=self.filters(request, spec),
        )

    def compose_trend(self, request: AggregateRequest, spec: PeriodSpec | None) -> QueryDescription:
        """Aggregate grouped by bucket label, ascending."""
        label = f"{self.group_expression(request, spec)} AS {LABEL_ALIAS}"
        return QueryDescription(
            table=request.table,
            select=(self.select_data(request), label),
            group_by=LABEL_ALIAS,
            filters=self.filters(request, spec),
            order_by=LABEL_ALIAS,
        )

    def compose(
        self,
        request: AggregateRequest,
        spec: PeriodSpec | None,
        trend: bool = True,
    ) -> QueryDescription:
        if trend:
            return self.compose_trend(request, spec)
        return self.compose_metric(request, spec)
