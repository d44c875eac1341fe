"""
PDF extraction module for the Book Search service.

Provides source loading (URL or local path) and per-page text
extraction with multiple backends (pypdf and pdfplumber) and
automatic fallback.
"""

from .source import PDFSourceLoader
from .pypdf_backend import PyPDFBackend
from .pdfplumber_backend import PDFPlumberBackend
from .extractor import PDFTextExtractor

__all__ = [
    "PDFSourceLoader",
    "PyPDFBackend",
    "PDFPlumberBackend",
    "PDFTextExtractor"
]
