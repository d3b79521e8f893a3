"""
Bucket Enumeration

Computes the complete, ordered set of bucket keys a trend series must
contain, independently of which rows the query returned.
"""

from collections.abc import Callable, Iterator
from datetime import date

from dateutil.relativedelta import relativedelta

from .models import (
    DATE_FORMAT,
    BucketKey,
    ExplicitPeriod,
    Period,
    PeriodSpec,
    RelativePeriod,
    iso_week,
)

_STEPS = {
    Period.DAY: relativedelta(days=1),
    Period.WEEK: relativedelta(weeks=1),
    Period.MONTH: relativedelta(months=1),
    Period.YEAR: relativedelta(years=1),
}


def _clamp(anchor: int, boundary: int, window: int) -> tuple[int, int]:
    """Look back `window` units from the anchor without crossing the boundary."""
    if anchor - boundary < window:
        return boundary, anchor
    return anchor - window, anchor


def window_bounds(
    spec: RelativePeriod,
    week_of: Callable[[date], int] = iso_week,
) -> tuple[int, int]:
    """
    Get the inclusive [lower, upper] ordinal range of a relative period.

    Days are clamped to the first of the anchor month, weeks to the week
    containing the first of the anchor month, months to January. Years
    are never clamped. A window of 0 or 1 collapses to the anchor bucket.
    """
    anchor = spec.anchor
    granularity = spec.granularity

    if granularity == Period.DAY:
        current = anchor.day
    elif granularity == Period.WEEK:
        current = anchor.week
    elif granularity == Period.MONTH:
        current = anchor.month
    else:
        current = anchor.year

    if spec.window <= 1:
        return current, current

    if granularity == Period.DAY:
        return _clamp(current, 1, spec.window)
    if granularity == Period.WEEK:
        boundary = week_of(date(anchor.year, anchor.month, 1))
        # January dates can belong to the last week of the previous year
        if boundary > current:
            boundary = 1
        return _clamp(current, boundary, spec.window)
    if granularity == Period.MONTH:
        return _clamp(current, 1, spec.window)
    return anchor.year - spec.window, anchor.year


def iter_dates(spec: ExplicitPeriod) -> Iterator[str]:
    """Yield every step from start to end inclusive as YYYY-MM-DD strings.

    Each step is computed from the start date, so month steps from the
    31st land on the last day of shorter months instead of drifting.
    """
    start, end = spec.start_date, spec.end_date
    step = _STEPS[spec.granularity]
    i = 0
    current = start
    while current <= end:
        yield current.strftime(DATE_FORMAT)
        if current == end:
            return
        i += 1
        try:
            current = start + step * i
        except (OverflowError, ValueError):
            # next step falls past 9999-12-31
            return


def iter_buckets(
    spec: PeriodSpec,
    week_of: Callable[[date], int] = iso_week,
) -> Iterator[BucketKey]:
    if isinstance(spec, ExplicitPeriod):
        yield from iter_dates(spec)
        return
    lower, upper = window_bounds(spec, week_of)
    yield from range(lower, upper + 1)


def bucket_keys(
    spec: PeriodSpec,
    week_of: Callable[[date], int] = iso_week,
) -> list[BucketKey]:
    """Get the ordered bucket keys expected for a period."""
    return list(iter_buckets(spec, week_of))
