"""Database access layer.

Public functions are re-exported here (``from trendline.db import connect, execute``).
"""

from .core import (
    connect,
    execute,
    get_db_backend,
    _prepare_query,
    _uses_pyformat,
    _normalize_db_url,
    DB_PATH,
    ROOT,
)
