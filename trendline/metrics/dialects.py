"""Date extraction SQL fragments, one implementation per backend."""

import datetime
from abc import ABC, abstractmethod

from .models import Period, iso_week


class DateExtractor(ABC):
    """
    Base class for backend-specific date extraction.

    Every ordinal fragment must evaluate to an integer so grouped rows
    compare equal to the enumerated bucket keys.
    """

    backend: str = "base"

    @abstractmethod
    def day(self, column: str) -> str:
        """Day of month (1-31)."""
        pass

    @abstractmethod
    def weekday(self, column: str) -> str:
        """Day of week, Sunday=0."""
        pass

    @abstractmethod
    def week(self, column: str) -> str:
        """Week of year, numbered the same way as week_of()."""
        pass

    @abstractmethod
    def month(self, column: str) -> str:
        pass

    @abstractmethod
    def year(self, column: str) -> str:
        pass

    @abstractmethod
    def date(self, column: str) -> str:
        """Calendar date of a date/datetime column."""
        pass

    def week_of(self, d: datetime.date) -> int:
        return iso_week(d)

    def ordinal(self, granularity: Period, column: str) -> str:
        """Fragment that extracts the bucket ordinal for a granularity."""
        granularity = Period.parse(granularity)
        if granularity == Period.DAY:
            return self.day(column)
        if granularity == Period.WEEK:
            return self.week(column)
        if granularity == Period.MONTH:
            return self.month(column)
        return self.year(column)


class SQLiteExtractor(DateExtractor):
    """strftime based; weeks are Monday-first with days before the first Monday in week 0."""

    backend = "sqlite"

    def _strftime(self, fmt: str, column: str) -> str:
        return f"CAST(strftime('{fmt}', {column}) AS INTEGER)"

    def day(self, column: str) -> str:
        return self._strftime("%d", column)

    def weekday(self, column: str) -> str:
        return self._strftime("%w", column)

    def week(self, column: str) -> str:
        return self._strftime("%W", column)

    def month(self, column: str) -> str:
        return self._strftime("%m", column)

    def year(self, column: str) -> str:
        return self._strftime("%Y", column)

    def date(self, column: str) -> str:
        return f"date({column})"

    def week_of(self, d: datetime.date) -> int:
        return int(d.strftime("%W"))


class PostgresExtractor(DateExtractor):
    """EXTRACT based; weeks follow ISO 8601."""

    backend = "postgres"

    def _extract(self, part: str, column: str) -> str:
        return f"CAST(EXTRACT({part} FROM {column}) AS INTEGER)"

    def day(self, column: str) -> str:
        return self._extract("DAY", column)

    def weekday(self, column: str) -> str:
        return self._extract("DOW", column)

    def week(self, column: str) -> str:
        return self._extract("WEEK", column)

    def month(self, column: str) -> str:
        return self._extract("MONTH", column)

    def year(self, column: str) -> str:
        return self._extract("YEAR", column)

    def date(self, column: str) -> str:
        return f"CAST({column} AS DATE)"


class MySQLExtractor(DateExtractor):
    """Native date functions; WEEK mode 3 gives ISO 8601 weeks."""

    backend = "mysql"

    def day(self, column: str) -> str:
        return f"DAYOFMONTH({column})"

    def weekday(self, column: str) -> str:
        # DAYOFWEEK is Sunday=1
        return f"(DAYOFWEEK({column}) - 1)"

    def week(self, column: str) -> str:
        return f"WEEK({column}, 3)"

    def month(self, column: str) -> str:
        return f"MONTH({column})"

    def year(self, column: str) -> str:
        return f"YEAR({column})"

    def date(self, column: str) -> str:
        return f"DATE({column})"


EXTRACTORS: dict[str, type[DateExtractor]] = {
    "sqlite": SQLiteExtractor,
    "postgres": PostgresExtractor,
    "mysql": MySQLExtractor,
}


def get_extractor(backend: str) -> DateExtractor:
    """Get the extractor for a backend name. Raises if the backend is unknown."""
    try:
        return EXTRACTORS[backend.lower()]()
    except KeyError:
        raise ValueError(f"Unsupported backend '{backend}'") from None
