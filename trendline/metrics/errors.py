"""Validation errors raised while building a metrics request.

All of these fire before any query is composed or executed.
"""


class MetricsError(Exception):
    """Base class for metrics request validation failures."""

    message = "Invalid metrics request"

    def __init__(self, value=None):
        self.value = value
        detail = self.message
        if value is not None:
            detail = f"{detail} (got {value!r})"
        super().__init__(detail)


class InvalidPeriod(MetricsError):
    message = "Invalid period value. Valid period is day, week, month or year"


class InvalidAggregate(MetricsError):
    message = "Invalid aggregate value. Valid aggregate is count, sum, max, min or avg"


class InvalidDateFormat(MetricsError):
    message = "Invalid date format. Valid date format is Y-m-d"
