import sqlite3
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import trendline` works when tests run from any CWD/import mode.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)
if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)

ORDERS = [
    # (id, amount, status, created_at)
    (1, 10.0, "paid", "2024-01-01 09:00:00"),
    (2, 15.0, "paid", "2024-01-01 17:30:00"),
    (3, 20.0, "refunded", "2024-01-03 12:00:00"),
    (4, 5.0, "paid", "2024-02-10 08:00:00"),
    (5, 7.5, "paid", "2024-06-12 10:00:00"),
    (6, 2.5, "pending", "2024-06-14 11:00:00"),
    (7, 40.0, "paid", "2023-11-20 15:00:00"),
]


@pytest.fixture(autouse=True)
def use_test_db(tmp_path, monkeypatch):
    """Use a temporary SQLite database for each test."""
    import trendline.db as db_module
    import trendline.db.core as db_core

    # Ensure we use SQLite and not Postgres/MySQL
    monkeypatch.delenv("DATABASE_URL", raising=False)
    for var in ("METRICS_LOCALE", "METRICS_DATE_FORMAT", "METRICS_TABLES"):
        monkeypatch.delenv(var, raising=False)

    test_db = tmp_path / "test_metrics.db"
    monkeypatch.setattr(db_core, "DB_PATH", test_db)
    monkeypatch.setattr(db_module, "DB_PATH", test_db)

    yield test_db

    if test_db.exists():
        try:
            test_db.unlink()
        except PermissionError:
            pass  # Windows/locked file handling


@pytest.fixture
def orders_db(use_test_db):
    """Populate an `orders` table in the temporary database."""
    con = sqlite3.connect(use_test_db)
    con.execute(
        """
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            amount REAL NOT NULL,
            status TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
        """
    )
    con.executemany(
        "INSERT INTO orders (id, amount, status, created_at) VALUES (?, ?, ?, ?)",
        ORDERS,
    )
    con.commit()
    con.close()
    return use_test_db
