"""
Search across several books at once.

Runs the snippet engine over an explicit list of books or the whole
catalogue and tags every match with its book. Books that cannot be
searched yet are skipped, so a partially extracted catalogue still
returns what it can.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Union

from ..core import get_config, get_logger
from ..database import Book, BookRepository, ExtractionStatus
from .models import SearchResult
from .snippet_engine import SnippetSearchEngine

logger = get_logger(__name__)

ALL_BOOKS = "all"


class MultiBookSearchCoordinator:
    """
    Fans snippet search out over a set of books.

    Results are ordered by book enumeration order, then by the per-book
    match order. There is no cross-book ranking.
    """

    def __init__(
        self,
        repository: BookRepository,
        engine: SnippetSearchEngine = None,
        max_workers: int = None
    ):
        """
        Initialize the coordinator.

        Args:
            repository: Book store to resolve ids against.
            engine: Snippet search engine used for each book.
            max_workers: Books searched in parallel (1 = sequential).
        """
        config = get_config()

        self.repository = repository
        self.engine = engine or SnippetSearchEngine()
        self.max_workers = max_workers or config.search.max_workers

    def search_across_books(
        self,
        book_ids: Union[Iterable[str], str, None],
        query: str
    ) -> List[SearchResult]:
        """
        Search several books for query.

        Args:
            book_ids: Explicit ids (unknown ids are skipped), or "all"/None
                      for the whole catalogue.
            query: Text to look for.

        Returns:
            Tagged results, book-major then in-book match order.
        """
        if not query:
            return []

        books = [
            book for book in self.resolve_books(book_ids)
            if book.extraction_status == ExtractionStatus.COMPLETED
        ]

        if self.max_workers > 1 and len(books) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                per_book = list(pool.map(lambda book: self._search_book(book, query), books))
        else:
            per_book = [self._search_book(book, query) for book in books]

        results = [result for book_results in per_book for result in book_results]

        logger.debug(
            f"Multi-book search '{query}': {len(results)} results from {len(books)} books"
        )

        return results

    def resolve_books(self, book_ids: Union[Iterable[str], str, None]) -> List[Book]:
        """
        Resolve the set of books to search, without their content.

        Args:
            book_ids: Explicit ids, or "all"/None for the whole catalogue.

        Returns:
            Books in enumeration order. Unknown and duplicate ids are dropped.
        """
        if book_ids is None or book_ids == ALL_BOOKS:
            return self.repository.list(include_content=False)

        if isinstance(book_ids, str):
            book_ids = [book_ids]

        books = []
        seen = set()

        for book_id in book_ids:
            book_id = book_id.strip()
            if not book_id or book_id in seen:
                continue
            seen.add(book_id)

            book = self.repository.get(book_id, include_content=False)
            if book is None:
                logger.debug(f"Skipping unknown book id: {book_id}")
                continue

            books.append(book)

        return books

    def _search_book(self, summary: Book, query: str) -> List[SearchResult]:
        """Load one book's pages and search them."""
        book = self.repository.get(summary.id)

        if book is None or not book.is_searchable:
            return []

        return [
            SearchResult(
                book_id=book.id,
                book_title=book.title,
                page=match.page,
                snippet=match.snippet
            )
            for match in self.engine.search(book.extracted_content, query)
        ]
