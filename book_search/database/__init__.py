"""
Database module for SQLite persistence of book records.

Provides connection management, schema definitions, and the book
repository used as the book store by extraction and search.
"""

from .connection import DatabaseManager
from .schema import init_schema, get_statistics
from .repository import BookRepository, Book, Section, ExtractionStatus

__all__ = [
    "DatabaseManager",
    "init_schema",
    "get_statistics",
    "BookRepository",
    "Book",
    "Section",
    "ExtractionStatus"
]
