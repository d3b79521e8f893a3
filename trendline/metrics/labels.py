"""
Label Formatting

Renders bucket keys as display labels. Month and weekday names are
localized through Babel; explicit date ranges use a moment-style display
format (e.g. "YYYY-MM-DD", "MMM D") translated to a CLDR pattern.
"""

import re
from datetime import date, datetime
from typing import Any

from babel.dates import format_date, get_month_names

from .models import DATE_FORMAT, DEFAULT_ISO_FORMAT, Anchor, Period

_TOKEN_RE = re.compile(
    r"\[[^\]]*\]|YYYY|YY|MMMM|MMM|MM|M|Do|DD|D|dddd|ddd|dd|d|Q|WW|W|ww|w|[A-Za-z]|."
)

_CLDR_TOKENS = {
    "YYYY": "yyyy",
    "YY": "yy",
    "MMMM": "MMMM",
    "MMM": "MMM",
    "MM": "MM",
    "M": "M",
    "Do": "d",
    "DD": "dd",
    "D": "d",
    "dddd": "EEEE",
    "ddd": "EEE",
    "dd": "EEEEEE",
    "d": "e",
    "Q": "Q",
    "WW": "ww",
    "W": "w",
    "ww": "ww",
    "w": "w",
}


_ORDINAL_SUFFIXES = {1: "st", 2: "nd", 3: "rd"}


def _ordinal_day(day: int, locale: str) -> str:
    """Day of month with an English ordinal suffix; other locales get the bare number."""
    if not locale.lower().startswith("en"):
        return str(day)
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    return f"{day}{_ORDINAL_SUFFIXES.get(day % 10, 'th')}"


def to_cldr_pattern(iso_format: str, value: date | None = None, locale: str = "en") -> str:
    """
    Translate a moment-style display format to a CLDR date pattern.

    CLDR has no ordinal day and numbers weekdays from the locale's first
    day, so moment's `Do` and `d` (0 = Sunday) are rendered as literals
    when `value` is given. Without a value they degrade to `d` and `e`.
    """
    parts = []
    for token in _TOKEN_RE.findall(iso_format):
        if token.startswith("["):
            literal = token[1:-1].replace("'", "''")
            parts.append(f"'{literal}'" if literal else "")
        elif token == "Do" and value is not None:
            parts.append(f"'{_ordinal_day(value.day, locale)}'")
        elif token == "d" and value is not None:
            parts.append(f"'{value.isoweekday() % 7}'")
        elif token in _CLDR_TOKENS:
            parts.append(_CLDR_TOKENS[token])
        elif token.isalpha():
            parts.append(f"'{token}'")
        elif token == "'":
            parts.append("''")
        else:
            parts.append(token)
    return "".join(parts)


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value, DATE_FORMAT).date()
        except ValueError:
            return None
    return None


def _as_ordinal(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None


class LabelFormatter:
    """Formats bucket keys for one request: granularity, anchor and locale are fixed."""

    def __init__(
        self,
        granularity: Period | None,
        anchor: Anchor | None = None,
        locale: str = "en",
        iso_format: str = DEFAULT_ISO_FORMAT,
    ):
        self.granularity = Period.parse(granularity) if granularity is not None else None
        self.anchor = anchor
        self.locale = locale
        self.iso_format = iso_format

    def month_name(self, month: int) -> str:
        return get_month_names("wide", context="stand-alone", locale=self.locale)[month]

    def weekday_name(self, year: int, month: int, day: int) -> str:
        return format_date(date(year, month, day), "EEEE", locale=self.locale)

    def format(self, key: Any) -> str:
        """Render one key. Labels that are neither ordinals nor dates pass through unchanged."""
        as_date = _as_date(key)
        if as_date is not None:
            pattern = to_cldr_pattern(self.iso_format, as_date, self.locale)
            return format_date(as_date, pattern, locale=self.locale)

        ordinal = _as_ordinal(key)
        if ordinal is None:
            return key if isinstance(key, str) else str(key)

        try:
            if self.granularity == Period.MONTH:
                return self.month_name(ordinal)
            if self.granularity == Period.DAY and self.anchor is not None:
                return self.weekday_name(self.anchor.year, self.anchor.month, ordinal)
        except (KeyError, ValueError):
            return str(ordinal)
        if self.granularity == Period.WEEK:
            return f"Week {ordinal}"
        return str(ordinal)
