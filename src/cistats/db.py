"""SQLite plumbing shared by the stores."""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

__all__ = ["SQLiteStore"]


class SQLiteStore:
    """Base class for SQLite-backed stores with one connection per thread."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._local = threading.local()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Create tables. Subclasses override."""

    def _get_connection(self) -> sqlite3.Connection:
        """Connection for the calling thread, opened on first use."""
        if not hasattr(self._local, "connection"):
            self._local.connection = sqlite3.connect(str(self.db_path), timeout=30)
            self._local.connection.row_factory = sqlite3.Row
        return self._local.connection

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor; commit on success, roll back on error."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()

    def close(self) -> None:
        """Close this thread's database connection."""
        if hasattr(self._local, "connection"):
            self._local.connection.close()
            del self._local.connection
