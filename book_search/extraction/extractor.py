"""
Unified PDF text extraction with automatic backend fallback.

Loads a PDF from its location, decodes it page by page with the
primary backend and falls back to the secondary one when the primary
cannot open the document or finds no text at all.
"""

from typing import List, Optional

from ..core import get_config, get_logger, ExtractionError
from ..utils import clean_text, join_pages, looks_like_pdf
from .pypdf_backend import PyPDFBackend
from .pdfplumber_backend import PDFPlumberBackend
from .source import PDFSourceLoader

logger = get_logger(__name__)


BACKENDS = {
    "pypdf": PyPDFBackend,
    "pdfplumber": PDFPlumberBackend
}


class PDFTextExtractor:
    """
    Turns a PDF location into an ordered list of page texts.

    Every physical page yields exactly one entry: blank pages are kept
    as empty strings and pages that fail to decode are replaced by a
    placeholder, so list index i is always page i + 1.
    """

    def __init__(
        self,
        primary_backend: str = None,
        fallback_backend: str = None,
        loader: PDFSourceLoader = None,
        placeholder: str = None
    ):
        """
        Initialize the extractor with configured backends.

        Args:
            primary_backend: Name of primary backend ("pypdf" or "pdfplumber").
            fallback_backend: Name of fallback backend, or "none".
            loader: Source loader used to fetch PDF bytes.
            placeholder: Text substituted for pages that fail to decode.
        """
        config = get_config()

        primary_name = primary_backend or config.extraction.primary_backend
        fallback_name = fallback_backend or config.extraction.fallback_backend

        if primary_name not in BACKENDS:
            raise ExtractionError(f"Unknown backend: {primary_name}")

        self.primary = BACKENDS[primary_name]()
        self.fallback = None
        if fallback_name in BACKENDS and fallback_name != primary_name:
            self.fallback = BACKENDS[fallback_name]()

        self.loader = loader or PDFSourceLoader()
        self.placeholder = placeholder if placeholder is not None else config.extraction.page_placeholder

        logger.debug(
            f"Initialized extractor: primary={primary_name}, fallback={fallback_name}"
        )

    def extract(self, source: str) -> List[str]:
        """
        Extract per-page text from the PDF at source.

        Args:
            source: URL or path of the PDF.

        Returns:
            Cleaned page texts in page order.

        Raises:
            ExtractionError: If the document cannot be loaded or decoded.
        """
        data = self.loader.load(source)
        return self.extract_bytes(data, source)

    def extract_text(self, source: str) -> str:
        """
        Extract the PDF at source as one page-break separated string.

        Args:
            source: URL or path of the PDF.

        Returns:
            Page texts joined with the page-break sentinel.
        """
        return join_pages(self.extract(source))

    def extract_bytes(self, data: bytes, source: str = "<bytes>") -> List[str]:
        """
        Extract per-page text from raw PDF bytes.

        Args:
            data: Raw PDF bytes.
            source: Location used in log and error messages.

        Returns:
            Cleaned page texts in page order.

        Raises:
            ExtractionError: If the data is not a PDF, every backend fails
                             to open it, or it has no pages.
        """
        if not looks_like_pdf(data):
            raise ExtractionError("Source is not a PDF document", source=source)

        first_error: Optional[ExtractionError] = None
        textless: Optional[List[Optional[str]]] = None

        for backend in (self.primary, self.fallback):
            if backend is None:
                continue

            try:
                raw_pages = backend.extract(data, source)
            except ExtractionError as e:
                first_error = first_error or e
                logger.debug(f"{backend.name} backend failed: {e.message}")
                continue

            if self._has_text(raw_pages):
                return self._finalize(raw_pages, source)

            logger.debug(f"{backend.name} backend found no text: {source}")
            if textless is None:
                textless = raw_pages

        if textless is not None:
            return self._finalize(textless, source)

        raise first_error

    def _finalize(self, raw_pages: List[Optional[str]], source: str) -> List[str]:
        """Clean page texts and substitute the placeholder for failed pages."""
        if not raw_pages:
            raise ExtractionError("PDF has no pages", source=source)

        pages = []
        failed = 0

        for text in raw_pages:
            if text is None:
                failed += 1
                pages.append(self.placeholder)
            else:
                pages.append(clean_text(text))

        if failed:
            logger.warning(f"{failed}/{len(pages)} pages could not be decoded: {source}")

        logger.debug(f"Extracted {len(pages)} pages: {source}")
        return pages

    @staticmethod
    def _has_text(raw_pages: List[Optional[str]]) -> bool:
        return any(text and text.strip() for text in raw_pages)


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m book_search.extraction.extractor <pdf_path_or_url>")
        sys.exit(1)

    extractor = PDFTextExtractor()

    try:
        pages = extractor.extract(sys.argv[1])
        print(f"Extracted {len(pages)} pages")

        total_chars = sum(len(text) for text in pages)
        print(f"Total characters: {total_chars:,}")

        if pages:
            preview = pages[0][:300] + "..." if len(pages[0]) > 300 else pages[0]
            print("\n=== Preview (Page 1) ===")
            print(preview)

    except ExtractionError as e:
        print(f"Extraction failed: {e.message}")
