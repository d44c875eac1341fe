"""
File helpers for the Book Search service.

Size checks for local PDFs, directory creation for the database and
logs, and a header sniff that tells PDFs apart from HTML error pages.
"""

from pathlib import Path
from typing import Union

PDF_MAGIC = b"%PDF"

# Readers accept the header anywhere in the first kilobyte
PDF_HEADER_WINDOW = 1024


def get_file_size_mb(filepath: Union[str, Path]) -> float:
    """
    Size of a file in megabytes, rounded to 2 decimals.

    Args:
        filepath: Path to the file.
    """
    size_bytes = Path(filepath).stat().st_size
    return round(size_bytes / (1024 * 1024), 2)


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Create a directory and its parents if missing.

    Args:
        path: Directory to create.

    Returns:
        The directory as a Path.
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def looks_like_pdf(data: bytes) -> bool:
    """
    Check whether raw bytes start like a PDF document.

    Args:
        data: Downloaded or read file content.

    Returns:
        True if the PDF header appears in the first kilobyte.
    """
    return PDF_MAGIC in data[:PDF_HEADER_WINDOW]
