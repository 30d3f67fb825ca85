"""Read-only SQLite connection manager for coaching data."""
import sqlite3
from contextlib import contextmanager
from typing import Generator
import logging

from .config import get_settings

log = logging.getLogger(__name__)


class DatabaseManager:
    """
    Read-only SQLite database manager for client activity.
    Opens a fresh connection per request so the service never holds
    locks against the app that writes workout and nutrition logs.
    """

    def __init__(self, settings=None, database_path: str | None = None):
        self.settings = settings or get_settings()
        self.database_path = database_path or self.settings.database_path

    @contextmanager
    def get_conn(self) -> Generator[sqlite3.Connection, None, None]:
        """Get read-only connection to the coaching database."""
        yield from self._connect(self.database_path)

    def _connect(self, db_path: str) -> Generator[sqlite3.Connection, None, None]:
        """
        Create a read-only connection with proper isolation.
        Uses URI mode with mode=ro to ensure read-only access.
        """
        uri = f"file:{db_path}?mode=ro"
        log.debug(f"[DB] Opening {uri}")
        conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        conn.row_factory = sqlite3.Row  # Enable dict-like row access
        try:
            yield conn
        finally:
            conn.close()


# Singleton instance
db_manager = DatabaseManager()
