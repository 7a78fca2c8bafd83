"""Database connection management.

One SQLite file holds every user's words. The active file is module state,
set from `SchedulerConfig.db_path` by `open_database` when the server (or a
test) configures its services.
"""

import logging
import sqlite3
from pathlib import Path
from contextlib import contextmanager
from typing import Generator

from .schema import add_missing_columns, create_tables

logger = logging.getLogger(__name__)

# Default database path
DEFAULT_DB_PATH = Path.home() / ".word_review" / "reviews.db"

_db_path: Path = DEFAULT_DB_PATH


def set_db_path(path: Path | str) -> None:
    """Point later connections at another database file."""
    global _db_path
    _db_path = Path(path).expanduser()


def get_db_path() -> Path:
    return _db_path


def init_database(path: Path | str | None = None) -> None:
    """Create missing tables and columns in the active (or given) database."""
    if path:
        set_db_path(path)

    with get_connection() as conn:
        cursor = conn.cursor()
        create_tables(cursor)
        added = add_missing_columns(cursor)
        conn.commit()

    for column in added:
        logger.info("Added column %s", column)
    logger.info("Review database ready at %s", get_db_path())


def open_database(path: Path | str) -> Path:
    """Switch to the database at `path`, initializing it if needed.

    A no-op apart from the schema check when `path` is already active.
    """
    path = Path(path).expanduser()
    if path != _db_path:
        logger.debug("Switching database from %s to %s", _db_path, path)
    init_database(path)
    return path


def _connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    # Cascade deletes from words rely on this.
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@contextmanager
def get_connection() -> Generator[sqlite3.Connection, None, None]:
    """Get a connection to the active database as a context manager."""
    conn = _connect(get_db_path())
    try:
        yield conn
    finally:
        conn.close()
