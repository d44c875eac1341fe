"""
SQLite access for the Book Search service.

Each operation opens its own connection, so one DatabaseManager is
shared by request handlers and extraction workers. The database runs in
WAL mode: searches keep reading while an extraction result is written.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..core import get_config, get_logger, DatabaseError
from ..utils import ensure_directory

logger = get_logger(__name__)

BUSY_TIMEOUT_SECONDS = 30.0

PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA temp_store=MEMORY",
)


class DatabaseManager:
    """
    Opens SQLite connections for one database file.

    Reads go through connection(); writes go through transaction(),
    which takes the write lock up front with BEGIN IMMEDIATE so two
    writers never deadlock upgrading a read lock.
    """

    def __init__(self, db_path: Path = None):
        """
        Args:
            db_path: SQLite file. Defaults to paths.database_path from config.
        """
        if db_path is None:
            db_path = get_config().paths.database_path

        self.db_path = Path(db_path)
        ensure_directory(self.db_path.parent)

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(
                self.db_path,
                timeout=BUSY_TIMEOUT_SECONDS,
                isolation_level=None,
                check_same_thread=False
            )
            conn.row_factory = sqlite3.Row

            for pragma in PRAGMAS:
                conn.execute(pragma)

        except sqlite3.Error as e:
            raise DatabaseError(
                f"Cannot open database: {e}",
                {"path": str(self.db_path)}
            )

        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """
        Connection for read queries, closed on exit.

        Raises:
            DatabaseError: If a query fails.
        """
        conn = self._connect()
        try:
            yield conn
        except sqlite3.Error as e:
            raise DatabaseError(f"Database read failed: {e}")
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Cursor inside a write transaction.

        Everything executed in the block is committed together on normal
        exit and rolled back if the block raises.

        Raises:
            DatabaseError: If a statement or the commit fails.
        """
        conn = self._connect()
        cur = conn.cursor()

        try:
            cur.execute("BEGIN IMMEDIATE")
            yield cur
            cur.execute("COMMIT")

        except sqlite3.Error as e:
            self._rollback(conn)
            raise DatabaseError(f"Database write failed: {e}")

        except BaseException:
            self._rollback(conn)
            raise

        finally:
            cur.close()
            conn.close()

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            conn.execute("ROLLBACK")


if __name__ == "__main__":
    import tempfile

    with tempfile.TemporaryDirectory() as tmpdir:
        manager = DatabaseManager(Path(tmpdir) / "books.db")

        with manager.transaction() as cur:
            cur.execute("CREATE TABLE shelf (id INTEGER PRIMARY KEY, title TEXT)")
            cur.execute("INSERT INTO shelf (title) VALUES (?)", ("Kitab al-Adab",))

        with manager.connection() as conn:
            for row in conn.execute("SELECT * FROM shelf"):
                print(f"  {row['id']}: {row['title']}")
