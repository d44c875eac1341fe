"""
Utility module providing shared helper functions.

Contains file operations and text processing utilities used across
the application. Depends only on the core module.
"""

from .file_utils import (
    get_file_size_mb,
    ensure_directory,
    looks_like_pdf
)
from .text_utils import (
    PAGE_BREAK,
    NormalizedText,
    clean_text,
    join_pages,
    split_pages,
    normalize_for_search,
    normalize_text
)

__all__ = [
    "get_file_size_mb",
    "ensure_directory",
    "looks_like_pdf",
    "PAGE_BREAK",
    "NormalizedText",
    "clean_text",
    "join_pages",
    "split_pages",
    "normalize_for_search",
    "normalize_text"
]
