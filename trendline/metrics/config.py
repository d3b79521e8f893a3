"""Metrics settings, read from the environment."""

import os
from dataclasses import dataclass

from ..db import get_db_backend
from .models import DEFAULT_ISO_FORMAT

DEFAULT_LOCALE = "en"


@dataclass(frozen=True)
class MetricsSettings:
    backend: str = "sqlite"
    locale: str = DEFAULT_LOCALE
    date_format: str = DEFAULT_ISO_FORMAT
    # Tables the HTTP surface may query; empty allows none
    tables: tuple[str, ...] = ()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def load_settings() -> MetricsSettings:
    """Build settings from DATABASE_URL, METRICS_LOCALE, METRICS_DATE_FORMAT and METRICS_TABLES."""
    return MetricsSettings(
        backend=get_db_backend(),
        locale=os.environ.get("METRICS_LOCALE", "").strip() or DEFAULT_LOCALE,
        date_format=os.environ.get("METRICS_DATE_FORMAT", "").strip() or DEFAULT_ISO_FORMAT,
        tables=_split_csv(os.environ.get("METRICS_TABLES", "")),
    )
