"""
Data models for search functionality.

Defines the dataclasses returned by single-book and multi-book
snippet search. Both are transient and never persisted.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class Match:
    """
    A single occurrence of the query inside one book.

    Attributes:
        page: Page number (1-indexed).
        snippet: Original page text surrounding the occurrence.
        start_offset: Offset of the occurrence within the page text.
    """
    page: int
    snippet: str
    start_offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {"snippet": self.snippet, "page": self.page}


@dataclass
class SearchResult:
    """
    A match tagged with the book it was found in.

    Attributes:
        book_id: Id of the book.
        book_title: Title of the book.
        page: Page number (1-indexed).
        snippet: Original page text surrounding the occurrence.
    """
    book_id: str
    book_title: str
    page: int
    snippet: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bookId": self.book_id,
            "bookTitle": self.book_title,
            "page": self.page,
            "snippet": self.snippet
        }
