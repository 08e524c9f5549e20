"""Local SQLite store backing the ``sqlite`` signal source.

One ``Database`` wraps one lazily opened connection.  Rows come back as
``sqlite3.Row`` so query helpers can index columns by name.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

# Only meaningful for on-disk stores
_FILE_PRAGMAS = (
    "PRAGMA journal_mode = WAL",
    "PRAGMA busy_timeout = 5000",
)


class Database:
    """Signal store connection; usable as a context manager.

    ``Database(":memory:")`` keeps everything in process (tests, one-off
    CLI runs).  A file path is expanded, and its directory is created on
    first connect.
    """

    def __init__(self, path: str | Path):
        self.in_memory = str(path) == MEMORY
        self.path = Path(MEMORY) if self.in_memory else Path(path).expanduser().resolve()
        self._conn: sqlite3.Connection | None = None

    def _open(self) -> sqlite3.Connection:
        if self.in_memory:
            return sqlite3.connect(MEMORY)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.path))
        for pragma in _FILE_PRAGMAS:
            conn.execute(pragma)
        return conn

    def connect(self) -> sqlite3.Connection:
        """The open connection; opened on the first call."""
        if self._conn is None:
            self._conn = self._open()
            self._conn.row_factory = sqlite3.Row
            # review taps cascade with their parent review
            self._conn.execute("PRAGMA foreign_keys = ON")
            logger.debug("Opened signal store %s", self.path)
        return self._conn

    @property
    def conn(self) -> sqlite3.Connection:
        return self.connect()

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.debug("Closed signal store %s", self.path)

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """Cursor whose writes land together or not at all.

        A review and its taps are inserted inside one of these, so a bad
        intensity leaves no orphan review behind.
        """
        conn = self.connect()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self.conn.execute(sql, params)

    def executemany(self, sql: str, params_seq: list[tuple]) -> sqlite3.Cursor:
        return self.conn.executemany(sql, params_seq)

    def executescript(self, sql: str) -> None:
        self.conn.executescript(sql)

    def fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        return self.conn.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self.conn.execute(sql, params).fetchall()

    def schema_version(self) -> int:
        """Highest applied migration number; 0 on a fresh store."""
        try:
            row = self.fetchone("SELECT MAX(version) AS v FROM _schema_version")
        except sqlite3.OperationalError:
            return 0
        if row is None or row["v"] is None:
            return 0
        return row["v"]

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database({self.path})"
