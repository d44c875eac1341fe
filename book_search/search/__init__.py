"""
Search module for literal snippet search over extracted books.

Provides the single-book snippet engine, the multi-book coordinator
and their result models.
"""

from .models import Match, SearchResult
from .snippet_engine import SnippetSearchEngine
from .multi_book import MultiBookSearchCoordinator, ALL_BOOKS

__all__ = [
    "Match",
    "SearchResult",
    "SnippetSearchEngine",
    "MultiBookSearchCoordinator",
    "ALL_BOOKS"
]
