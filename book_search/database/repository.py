"""
Book repository for CRUD operations on the books table.

This is the book store the extraction pipeline and the search components
are given: lookup by id, enumeration, and the single-statement updates
that move a book through its extraction lifecycle.
"""

import json
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..core import get_logger, BookNotFoundError
from .connection import DatabaseManager
from .schema import init_schema

logger = get_logger(__name__)


class ExtractionStatus(str, Enum):
    """Lifecycle state of a book's text extraction."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Section:
    """A named part (section or volume) of a book starting at a PDF page."""
    name: str
    page: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Section":
        """
        Build a section from its JSON representation.

        Raises:
            ValueError: If name is missing or page is not a positive integer.
        """
        name = str(data.get("name", "")).strip()
        if not name:
            raise ValueError("Section name is required")

        try:
            page = int(data.get("page", 1))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid page for section '{name}': {data.get('page')!r}")

        if page < 1:
            raise ValueError(f"Section page must be >= 1, got {page}")

        return cls(name=name, page=page)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "page": self.page}


@dataclass
class Book:
    """
    Represents a catalogued PDF book.

    Attributes:
        id: Opaque book identifier.
        title: Display title.
        pdf_location: URL or path of the PDF.
        sections: Ordered sections pointing at pages of the PDF.
        extracted_content: Per-page text (index i is page i + 1), None until extracted.
        total_pages: Number of extracted pages, None until extracted.
        extraction_status: pending, completed or failed.
        extraction_error: Failure message when extraction failed.
        created_at: Creation timestamp.
        extraction_completed_at: Timestamp of successful extraction.
    """
    id: str
    title: str
    pdf_location: str
    sections: List[Section] = field(default_factory=list)
    extracted_content: Optional[List[str]] = None
    total_pages: Optional[int] = None
    extraction_status: ExtractionStatus = ExtractionStatus.PENDING
    extraction_error: Optional[str] = None
    created_at: Optional[str] = None
    extraction_completed_at: Optional[str] = None

    @property
    def is_searchable(self) -> bool:
        """True once the book's pages have been extracted."""
        return (
            self.extraction_status == ExtractionStatus.COMPLETED
            and self.extracted_content is not None
        )

    def to_dict(self, include_content: bool = False) -> Dict[str, Any]:
        """
        Convert to the JSON representation used at the HTTP boundary.

        Args:
            include_content: Whether to include the per-page text.

        Returns:
            Dictionary with camelCase keys.
        """
        data = {
            "id": self.id,
            "title": self.title,
            "pdfLocation": self.pdf_location,
            "sections": [section.to_dict() for section in self.sections],
            "totalPages": self.total_pages,
            "extractionStatus": self.extraction_status.value,
            "createdAt": self.created_at,
        }

        if self.extraction_error is not None:
            data["extractionError"] = self.extraction_error

        if include_content:
            data["extractedContent"] = self.extracted_content

        return data


_SUMMARY_COLUMNS = (
    "id, title, pdf_location, sections, total_pages, extraction_status, "
    "extraction_error, created_at, extraction_completed_at"
)


class BookRepository:
    """
    Repository for book CRUD operations.

    Every lifecycle transition is a single UPDATE statement, so readers
    only ever observe a complete pending, completed or failed record.
    """

    def __init__(self, db: DatabaseManager = None):
        """
        Initialize the repository and make sure the schema exists.

        Args:
            db: Database manager. Defaults to one built from config.
        """
        self.db = db or DatabaseManager()
        init_schema(self.db)

    def create(
        self,
        title: str,
        pdf_location: str,
        sections: Iterable[Section] = None
    ) -> Book:
        """
        Insert a new book with extraction status pending.

        Args:
            title: Book title.
            pdf_location: URL or path of the PDF.
            sections: Optional ordered sections.

        Returns:
            The created Book.
        """
        book_id = uuid.uuid4().hex
        sections = list(sections or [])

        with self.db.transaction() as cur:
            cur.execute("""
                INSERT INTO books (id, title, pdf_location, sections, extraction_status)
                VALUES (?, ?, ?, ?, ?)
            """, (
                book_id,
                title,
                pdf_location,
                self._dump_sections(sections),
                ExtractionStatus.PENDING.value
            ))

        logger.info(f"Created book {book_id}: {title}")

        return self.get(book_id)

    def get(self, book_id: str, include_content: bool = True) -> Optional[Book]:
        """
        Fetch a book by its id.

        Args:
            book_id: Book identifier.
            include_content: Whether to load the extracted page text.

        Returns:
            Book object or None.
        """
        columns = "*" if include_content else _SUMMARY_COLUMNS

        with self.db.connection() as conn:
            row = conn.execute(
                f"SELECT {columns} FROM books WHERE id = ?",
                (book_id,)
            ).fetchone()

        if row:
            return self._row_to_book(row)
        return None

    def require(self, book_id: str, include_content: bool = True) -> Book:
        """
        Fetch a book by its id, failing if it does not exist.

        Raises:
            BookNotFoundError: If no book has this id.
        """
        book = self.get(book_id, include_content=include_content)
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    def list(
        self,
        statuses: Iterable[ExtractionStatus] = None,
        include_content: bool = True
    ) -> List[Book]:
        """
        Enumerate books in creation order.

        Args:
            statuses: Optional extraction statuses to filter on.
            include_content: Whether to load the extracted page text.

        Returns:
            List of Book objects.
        """
        columns = "*" if include_content else _SUMMARY_COLUMNS
        sql = f"SELECT {columns} FROM books"
        params: tuple = ()

        if statuses is not None:
            values = [ExtractionStatus(status).value for status in statuses]
            if not values:
                return []
            placeholders = ", ".join("?" for _ in values)
            sql += f" WHERE extraction_status IN ({placeholders})"
            params = tuple(values)

        sql += " ORDER BY rowid"

        with self.db.connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [self._row_to_book(row) for row in rows]

    def update_sections(self, book_id: str, sections: Iterable[Section]) -> bool:
        """
        Replace the sections of a book.

        Returns:
            True if the book exists and was updated.
        """
        with self.db.transaction() as cur:
            cur.execute(
                "UPDATE books SET sections = ? WHERE id = ?",
                (self._dump_sections(sections), book_id)
            )
            return cur.rowcount > 0

    def mark_pending(self, book_id: str) -> bool:
        """
        Reset a book to pending so it can be extracted again.

        Clears any previous content and error in the same statement.

        Returns:
            True if the book exists.
        """
        with self.db.transaction() as cur:
            cur.execute("""
                UPDATE books
                SET extraction_status = 'pending',
                    extracted_content = NULL,
                    total_pages = NULL,
                    extraction_error = NULL,
                    extraction_completed_at = NULL
                WHERE id = ?
            """, (book_id,))
            return cur.rowcount > 0

    def complete_extraction(self, book_id: str, pages: List[str]) -> bool:
        """
        Store extracted pages and mark the book completed.

        Only a pending book transitions; content, page count and status
        are written together.

        Args:
            book_id: Book identifier.
            pages: Per-page text, index i being page i + 1.

        Returns:
            True if the book was pending and is now completed.
        """
        with self.db.transaction() as cur:
            cur.execute("""
                UPDATE books
                SET extracted_content = ?,
                    total_pages = ?,
                    extraction_status = 'completed',
                    extraction_error = NULL,
                    extraction_completed_at = CURRENT_TIMESTAMP
                WHERE id = ? AND extraction_status = 'pending'
            """, (json.dumps(pages, ensure_ascii=False), len(pages), book_id))
            updated = cur.rowcount > 0

        if not updated:
            logger.warning(f"Book {book_id} was not pending, extraction result discarded")

        return updated

    def fail_extraction(self, book_id: str, message: str) -> bool:
        """
        Mark a pending book as failed with the given error message.

        Returns:
            True if the book was pending and is now failed.
        """
        with self.db.transaction() as cur:
            cur.execute("""
                UPDATE books
                SET extraction_status = 'failed',
                    extraction_error = ?,
                    extracted_content = NULL,
                    total_pages = NULL
                WHERE id = ? AND extraction_status = 'pending'
            """, (message, book_id))
            return cur.rowcount > 0

    def delete(self, book_id: str) -> bool:
        """
        Delete a book.

        Returns:
            True if a book was deleted.
        """
        with self.db.transaction() as cur:
            cur.execute("DELETE FROM books WHERE id = ?", (book_id,))
            deleted = cur.rowcount > 0

        if deleted:
            logger.info(f"Deleted book {book_id}")

        return deleted

    def count(self) -> int:
        """
        Get total book count.

        Returns:
            Number of stored books.
        """
        with self.db.connection() as conn:
            row = conn.execute("SELECT COUNT(*) as count FROM books").fetchone()
            return row["count"]

    @staticmethod
    def _dump_sections(sections: Iterable[Section]) -> str:
        return json.dumps([section.to_dict() for section in sections], ensure_ascii=False)

    @staticmethod
    def _row_to_book(row) -> Book:
        """Convert a database row to a Book object."""
        keys = row.keys()

        content = None
        if "extracted_content" in keys and row["extracted_content"] is not None:
            content = json.loads(row["extracted_content"])

        return Book(
            id=row["id"],
            title=row["title"],
            pdf_location=row["pdf_location"],
            sections=[Section.from_dict(s) for s in json.loads(row["sections"] or "[]")],
            extracted_content=content,
            total_pages=row["total_pages"],
            extraction_status=ExtractionStatus(row["extraction_status"]),
            extraction_error=row["extraction_error"],
            created_at=row["created_at"],
            extraction_completed_at=row["extraction_completed_at"]
        )


if __name__ == "__main__":
    import tempfile
    from pathlib import Path

    with tempfile.TemporaryDirectory() as tmpdir:
        repo = BookRepository(DatabaseManager(Path(tmpdir) / "books.db"))

        book = repo.create("Sample", "/files/sample.pdf", [Section("Volume 1", 1)])
        print(f"Created: {book.id} ({book.extraction_status.value})")

        repo.complete_extraction(book.id, ["Page one", "", "Page three"])
        book = repo.get(book.id)
        print(f"Completed: {book.total_pages} pages, searchable={book.is_searchable}")
