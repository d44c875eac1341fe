"""
Custom exception hierarchy for the Book Search service.

Provides specific exception types for different failure modes:
configuration errors, extraction failures, database issues, and search problems.
"""


class BookSearchError(Exception):
    """Base exception for all Book Search errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(BookSearchError):
    """Raised when configuration is invalid or missing."""
    pass


class ExtractionError(BookSearchError):
    """Raised when a whole PDF document cannot be turned into text."""

    def __init__(self, message: str, source: str = None, details: dict = None):
        """
        Initialize extraction error.

        Args:
            message: Error description.
            source: URL or path of the problematic PDF.
            details: Additional context.
        """
        super().__init__(message, details)
        self.source = source


class DatabaseError(BookSearchError):
    """Raised when SQLite operations fail."""
    pass


class BookNotFoundError(BookSearchError):
    """Raised when a book id does not resolve to a stored book."""

    def __init__(self, book_id: str):
        super().__init__(f"Book not found: {book_id}", {"book_id": book_id})
        self.book_id = book_id


class SearchError(BookSearchError):
    """Raised when search query execution fails."""

    def __init__(self, message: str, query: str = None, details: dict = None):
        """
        Initialize search error.

        Args:
            message: Error description.
            query: The problematic search query.
            details: Additional context.
        """
        super().__init__(message, details)
        self.query = query


class BookNotIndexedError(SearchError):
    """
    Raised when searching text that has not been extracted.

    Distinct from an empty result: the book exists but its extraction is
    still pending or has failed.
    """

    def __init__(
        self,
        book_id: str = None,
        status: str = None,
        error: str = None,
        query: str = None
    ):
        """
        Initialize not-indexed error.

        Args:
            book_id: Id of the book that was searched.
            status: Current extraction status of the book.
            error: Stored extraction error message, if extraction failed.
            query: The search query.
        """
        if status == "failed":
            message = "Text extraction failed for this book"
        elif status == "pending":
            message = "Text extraction is still in progress for this book"
        else:
            message = "Book text has not been extracted"

        super().__init__(
            message,
            query=query,
            details={"book_id": book_id, "status": status, "error": error}
        )
        self.book_id = book_id
        self.status = status
        self.error = error


if __name__ == "__main__":
    try:
        raise ConfigurationError("Config file not found", {"path": "/config/config.json"})
    except BookSearchError as e:
        print(f"Caught: {e.__class__.__name__}: {e.message}")
        print(f"Details: {e.details}")

    try:
        raise BookNotIndexedError("abc123", status="pending")
    except SearchError as e:
        print(f"Not searchable: {e.message} ({e.details})")
