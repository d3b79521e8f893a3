"""
Metrics API Router

REST endpoints exposing single aggregates and trend series for
allow-listed tables.
"""

import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from .builder import Metrics
from .config import MetricsSettings, load_settings
from .engine import MetricsEngine
from .errors import MetricsError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/metrics", tags=["Metrics"])


class MetricResponse(BaseModel):
    value: int | float | None


class TrendsResponse(BaseModel):
    labels: list[str]
    data: list[int | float | None]


@dataclass
class MetricsParams:
    aggregate: str
    column: str
    date_column: str
    period: str | None
    count: int
    start: str | None
    end: str | None
    group_by: str
    year: int | None
    month: int | None
    day: int | None
    week: int | None
    fill_missing: bool
    missing_value: float
    locale: str | None
    iso_format: str | None


def metrics_params(
    aggregate: str = Query(default="count", description="count, sum, avg, max or min"),
    column: str = Query(default="id", description="Column to aggregate"),
    date_column: str = Query(default="created_at", description="Date column buckets are computed on"),
    period: str | None = Query(default=None, description="day, week, month or year"),
    count: int = Query(default=0, ge=0, le=366, description="Number of sub-periods to look back"),
    start: str | None = Query(default=None, description="Range start (YYYY-MM-DD)"),
    end: str | None = Query(default=None, description="Range end (YYYY-MM-DD)"),
    group_by: str = Query(default="day", description="Bucket size for explicit ranges"),
    year: int | None = Query(default=None, ge=1, le=9999, description="Anchor year"),
    month: int | None = Query(default=None, ge=1, le=12, description="Anchor month"),
    day: int | None = Query(default=None, ge=1, le=31, description="Anchor day"),
    week: int | None = Query(default=None, ge=0, le=53, description="Anchor week"),
    fill_missing: bool = Query(default=False, description="Fill buckets that have no rows"),
    missing_value: float = Query(default=0.0, description="Value used for filled buckets"),
    locale: str | None = Query(default=None, description="Label locale"),
    iso_format: str | None = Query(default=None, description="Display format for range labels"),
) -> MetricsParams:
    return MetricsParams(
        aggregate=aggregate,
        column=column,
        date_column=date_column,
        period=period,
        count=count,
        start=start,
        end=end,
        group_by=group_by,
        year=year,
        month=month,
        day=day,
        week=week,
        fill_missing=fill_missing,
        missing_value=missing_value,
        locale=locale,
        iso_format=iso_format,
    )


def get_settings() -> MetricsSettings:
    return load_settings()


def get_engine(settings: MetricsSettings = Depends(get_settings)) -> MetricsEngine:
    return MetricsEngine.from_settings(settings)


def _build(table: str, params: MetricsParams, engine: MetricsEngine) -> Metrics:
    if table not in engine.settings.tables:
        raise HTTPException(status_code=404, detail=f"Unknown table '{table}'")

    try:
        query = (
            Metrics.query(table, engine)
            .with_aggregate(params.aggregate, params.column)
            .date_column(params.date_column)
        )

        if params.start is not None or params.end is not None:
            if params.start is None or params.end is None:
                raise HTTPException(status_code=422, detail="Both start and end are required")
            query = query.between(params.start, params.end, params.iso_format).group_by(params.group_by)
        elif params.period is not None:
            query = query.by(params.period, params.count)

        if params.year is not None:
            query = query.for_year(params.year)
        if params.month is not None:
            query = query.for_month(params.month)
        if params.day is not None:
            query = query.for_day(params.day)
        if params.week is not None:
            query = query.for_week(params.week)
        if params.locale:
            query = query.locale(params.locale)
        if params.fill_missing:
            missing_value = float(params.missing_value)
            missing = int(missing_value) if missing_value.is_integer() else missing_value
            query = query.fill_missing_data(missing)
    except (MetricsError, ValueError) as e:
        logger.warning("Rejected metrics request for %s: %s", table, e)
        raise HTTPException(status_code=422, detail=str(e)) from e

    return query


@router.get("/{table}", response_model=MetricResponse)
async def api_metric(
    table: str,
    params: MetricsParams = Depends(metrics_params),
    engine: MetricsEngine = Depends(get_engine),
):
    """
    Get a single aggregate value.

    Returns 0 when no rows match.
    """
    query = _build(table, params, engine)
    try:
        return {"value": query.metrics()}
    except (MetricsError, ValueError) as e:
        logger.warning("Rejected metrics request for %s: %s", table, e)
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("/{table}/trends", response_model=TrendsResponse)
async def api_trends(
    table: str,
    params: MetricsParams = Depends(metrics_params),
    engine: MetricsEngine = Depends(get_engine),
):
    """
    Get a labelled trend series for charting.

    Returns parallel labels/data lists.
    """
    query = _build(table, params, engine)
    try:
        return query.trends()
    except (MetricsError, ValueError) as e:
        logger.warning("Rejected trends request for %s: %s", table, e)
        raise HTTPException(status_code=422, detail=str(e)) from e
