"""
pdfplumber-based text extraction backend.

Better handling of complex layouts and multi-column documents.
Slower than pypdf, used as the fallback when pypdf cannot read a book.
"""

import io
from typing import List, Optional

import pdfplumber

from ..core import get_logger, ExtractionError

logger = get_logger(__name__)


class PDFPlumberBackend:
    """
    PDF text extraction using pdfplumber library.

    Provides more accurate extraction for complex layouts
    at the cost of slower processing.
    """

    name = "pdfplumber"

    def extract(self, data: bytes, source: str = None) -> List[Optional[str]]:
        """
        Extract text from every page of a PDF, in page order.

        Args:
            data: Raw PDF bytes.
            source: Location of the PDF, used in messages.

        Returns:
            One entry per page; None marks a page that failed to decode.

        Raises:
            ExtractionError: If the document cannot be opened.
        """
        results: List[Optional[str]] = []

        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                logger.debug(f"Processing {len(pdf.pages)} pages: {source}")

                for page_num, page in enumerate(pdf.pages, start=1):
                    try:
                        results.append(page.extract_text() or "")
                    except Exception as e:
                        logger.warning(f"Failed to extract page {page_num} from {source}: {e}")
                        results.append(None)

                    # Cached layout objects grow with every page
                    page.flush_cache()

        except Exception as e:
            raise ExtractionError(
                f"pdfplumber extraction failed: {e}",
                source=source
            )

        return results
