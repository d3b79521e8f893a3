"""
Metrics Runner

Computes an aggregate or a trend series for one table and prints it as JSON.

Run with: python -m scripts.run_metrics TABLE [--aggregate sum --column amount]
          [--period month --count 6 | --between START END --group-by day]
          [--trends] [--fill-missing] [--locale fr]
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from trendline.metrics import Metrics, MetricsEngine, MetricsError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute metrics and trends")
    parser.add_argument("table", help="Table to aggregate")
    parser.add_argument("--aggregate", default="count", help="count, sum, avg, max or min")
    parser.add_argument("--column", default="id", help="Column to aggregate")
    parser.add_argument("--date-column", default="created_at", help="Date column to bucket on")
    parser.add_argument("--label-column", default=None, help="Group by this column instead of a date part")
    parser.add_argument("--period", default=None, help="day, week, month or year")
    parser.add_argument("--count", type=int, default=0, help="Number of sub-periods to look back")
    parser.add_argument(
        "--between",
        nargs=2,
        metavar=("START", "END"),
        default=None,
        help="Explicit date range (YYYY-MM-DD YYYY-MM-DD)",
    )
    parser.add_argument("--group-by", default="day", help="Bucket size for --between")
    parser.add_argument("--iso-format", default=None, help="Display format for --between labels")
    parser.add_argument("--year", type=int, default=None)
    parser.add_argument("--month", type=int, default=None)
    parser.add_argument("--day", type=int, default=None)
    parser.add_argument("--week", type=int, default=None)
    parser.add_argument("--today", type=str, default=None, help="Reference date (YYYY-MM-DD, default: today)")
    parser.add_argument("--locale", default=None, help="Label locale (default: METRICS_LOCALE)")
    parser.add_argument("--trends", action="store_true", help="Output a trend series instead of one value")
    parser.add_argument("--fill-missing", action="store_true", help="Fill buckets that have no rows")
    parser.add_argument("--missing-value", type=float, default=0.0)
    parser.add_argument("--labels", nargs="+", default=None, help="Force these labels when filling a --label-column series")
    return parser


def build_query(args, engine: MetricsEngine | None = None) -> Metrics:
    query = Metrics.query(args.table, engine).with_aggregate(args.aggregate, args.column)
    query = query.date_column(args.date_column)

    if args.label_column:
        query = query.label_column(args.label_column)
    if args.between:
        query = query.between(args.between[0], args.between[1], args.iso_format).group_by(args.group_by)
    elif args.period:
        query = query.by(args.period, args.count)

    if args.year is not None:
        query = query.for_year(args.year)
    if args.month is not None:
        query = query.for_month(args.month)
    if args.day is not None:
        query = query.for_day(args.day)
    if args.week is not None:
        query = query.for_week(args.week)
    if args.today:
        query = query.today(datetime.strptime(args.today, "%Y-%m-%d").date())
    if args.locale:
        query = query.locale(args.locale)
    if args.fill_missing:
        missing_value = float(args.missing_value)
        missing = int(missing_value) if missing_value.is_integer() else missing_value
        query = query.fill_missing_data(missing, args.labels)

    return query


def main(argv=None, engine: MetricsEngine | None = None):
    args = build_parser().parse_args(argv)

    try:
        query = build_query(args, engine)
        if args.trends:
            result = query.trends()
        else:
            result = {"value": query.metrics()}
    except (MetricsError, ValueError) as e:
        logger.error(f"Invalid metrics request: {e}")
        return 1

    print(json.dumps(result, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
