"""Core database infrastructure: backend detection, connect, execute."""

import logging
import os
import re
import sqlite3
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any
from urllib.parse import urlparse, urlunparse

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parents[2]
DB_PATH = ROOT / "data" / "trendline.db"

_NAMED_PARAM_RE = re.compile(r"(?<!:):([a-zA-Z_][a-zA-Z0-9_]*)")


def _normalize_db_url(db_url: str) -> str:
    if not db_url:
        return db_url
    parsed = urlparse(db_url)
    scheme = parsed.scheme
    if "+" not in scheme:
        return db_url
    base_scheme = scheme.split("+", 1)[0]
    if not base_scheme or base_scheme == scheme:
        return db_url
    return urlunparse(parsed._replace(scheme=base_scheme))


def _uses_pyformat() -> bool:
    return get_db_backend() in ("postgres", "mysql")


def _prepare_query(sql: str, params: Mapping[str, Any] | Sequence[Any] | None):
    """
    Normalize parameter style for the active backend.
    - SQLite: accepts :name or ? placeholders as-is.
    - Postgres (psycopg) / MySQL (PyMySQL): translate :name -> %(name)s and ? -> %s.
    """
    if params is None or not _uses_pyformat():
        return sql, params

    if isinstance(params, Mapping):
        return _NAMED_PARAM_RE.sub(r"%(\1)s", sql), params

    return sql.replace("?", "%s"), params


def execute(con, sql: str, params: Mapping[str, Any] | Sequence[Any] | None = None):
    cur = con.cursor()
    sql, params = _prepare_query(sql, params)
    if params is None:
        cur.execute(sql)
    else:
        cur.execute(sql, params)
    return cur


def get_db_backend() -> str:
    db_url = os.environ.get("DATABASE_URL", "").strip()
    if not db_url:
        return "sqlite"
    scheme = urlparse(db_url).scheme.lower()
    if scheme.startswith("postgres"):
        return "postgres"
    if scheme.startswith("mysql"):
        return "mysql"
    return "sqlite"


def _connect_mysql(db_url: str):
    try:
        import pymysql
    except ImportError as exc:
        raise RuntimeError("PyMySQL is required for MySQL support.") from exc
    parsed = urlparse(db_url)
    return pymysql.connect(
        host=parsed.hostname or "localhost",
        port=parsed.port or 3306,
        user=parsed.username,
        password=parsed.password or "",
        database=parsed.path.lstrip("/") or None,
    )


def connect():
    backend = get_db_backend()
    if backend in ("postgres", "mysql"):
        db_url = os.environ.get("DATABASE_URL", "").strip()
        if not db_url:
            raise RuntimeError(f"DATABASE_URL must be set for {backend} backend.")
        db_url = _normalize_db_url(db_url)
        if backend == "mysql":
            return _connect_mysql(db_url)
        try:
            import psycopg
        except ImportError as exc:
            raise RuntimeError("psycopg is required for Postgres support.") from exc
        return psycopg.connect(db_url)

    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    con = sqlite3.connect(DB_PATH, timeout=30)
    con.execute("PRAGMA journal_mode=WAL")
    return con
