"""
Database schema definitions for the Book Search service.

Defines the books table holding catalogue metadata and the
extracted per-page text of each book.
"""

from ..core import get_logger
from .connection import DatabaseManager

logger = get_logger(__name__)


BOOKS_TABLE = """
CREATE TABLE IF NOT EXISTS books (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    pdf_location TEXT NOT NULL,
    sections TEXT NOT NULL DEFAULT '[]',
    extracted_content TEXT,
    total_pages INTEGER,
    extraction_status TEXT NOT NULL DEFAULT 'pending'
        CHECK (extraction_status IN ('pending', 'completed', 'failed')),
    extraction_error TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    extraction_completed_at TIMESTAMP
)
"""

BOOKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_books_status ON books(extraction_status)"
]


def init_schema(db: DatabaseManager) -> None:
    """
    Initialize database schema if not exists.

    Args:
        db: Database manager to create the tables in.
    """
    logger.debug(f"Initializing database schema: {db.db_path}")

    with db.transaction() as cur:
        cur.execute(BOOKS_TABLE)

        for index_sql in BOOKS_INDEXES:
            cur.execute(index_sql)


def get_statistics(db: DatabaseManager) -> dict:
    """
    Get catalogue statistics.

    Args:
        db: Database manager to query.

    Returns:
        Dictionary with book counts per extraction status and page totals.
    """
    with db.connection() as conn:
        stats = {"total_books": 0, "pending": 0, "completed": 0, "failed": 0}

        rows = conn.execute(
            "SELECT extraction_status, COUNT(*) as count FROM books GROUP BY extraction_status"
        ).fetchall()

        for row in rows:
            stats[row["extraction_status"]] = row["count"]
            stats["total_books"] += row["count"]

        row = conn.execute(
            "SELECT COALESCE(SUM(total_pages), 0) as pages FROM books WHERE extraction_status = 'completed'"
        ).fetchone()
        stats["total_pages"] = row["pages"]

    return stats
