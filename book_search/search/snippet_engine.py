"""
Snippet search over extracted book pages.

Finds every case-insensitive, literal occurrence of a query in each
page and returns the surrounding original text. Queries are never
interpreted as patterns.
"""

from typing import List, Optional, Sequence

from ..core import get_config, get_logger, BookNotIndexedError
from ..database import Book
from ..utils import normalize_for_search, normalize_text
from .models import Match

logger = get_logger(__name__)


class SnippetSearchEngine:
    """
    Literal substring search producing page-numbered snippets.

    Pages are scanned in order and each page left to right, so results
    come out ordered by page then offset. Each page contributes at most
    max_matches_per_page matches.
    """

    def __init__(
        self,
        max_matches_per_page: int = None,
        context_chars: int = None,
        normalize_arabic: bool = None
    ):
        """
        Initialize the engine with configuration.

        Args:
            max_matches_per_page: Cap on matches returned per page.
            context_chars: Characters of context on each side of a match.
            normalize_arabic: Unify Arabic letter variants and drop
                              diacritics on both query and page text.
        """
        config = get_config()

        self.max_matches_per_page = (
            max_matches_per_page if max_matches_per_page is not None
            else config.search.max_matches_per_page
        )
        self.context_chars = context_chars if context_chars is not None else config.search.context_chars
        self.normalize_arabic = (
            normalize_arabic if normalize_arabic is not None
            else config.search.normalize_arabic
        )

    def search(self, pages: Optional[Sequence[str]], query: str) -> List[Match]:
        """
        Find all occurrences of query in the given pages.

        Args:
            pages: Per-page text, index i being page i + 1.
                   None means the text was never extracted.
            query: Text to look for.

        Returns:
            Matches ordered by page then offset; empty for an empty query.

        Raises:
            BookNotIndexedError: If pages is None.
        """
        if pages is None:
            raise BookNotIndexedError(query=query)

        needle = normalize_text(query, self.normalize_arabic) if query else ""
        if not needle:
            return []

        matches: List[Match] = []

        for page_num, page_text in enumerate(pages, start=1):
            matches.extend(self._search_page(page_text, needle, page_num))

        return matches

    def search_book(self, book: Book, query: str) -> List[Match]:
        """
        Search the extracted text of a book.

        Args:
            book: Book loaded with its content.
            query: Text to look for.

        Returns:
            Matches ordered by page then offset.

        Raises:
            BookNotIndexedError: If the book's extraction is pending or failed.
        """
        if not book.is_searchable:
            raise BookNotIndexedError(
                book.id,
                status=book.extraction_status.value,
                error=book.extraction_error,
                query=query
            )

        matches = self.search(book.extracted_content, query)
        logger.debug(f"Search '{query}' in book {book.id}: {len(matches)} matches")
        return matches

    def _search_page(self, page_text: str, needle: str, page_num: int) -> List[Match]:
        """Scan one page for non-overlapping occurrences of needle."""
        if not page_text:
            return []

        haystack = normalize_for_search(page_text, self.normalize_arabic)
        text = haystack.text

        results: List[Match] = []
        position = text.find(needle)

        while position != -1 and len(results) < self.max_matches_per_page:
            end = position + len(needle)
            start, stop = haystack.original_span(position, end)

            snippet = page_text[
                max(0, start - self.context_chars):min(len(page_text), stop + self.context_chars)
            ]
            results.append(Match(page=page_num, snippet=snippet, start_offset=start))

            position = text.find(needle, end)

        return results
