"""
pypdf-based text extraction backend.

Fast extraction suitable for most standard PDF files.
Handles encryption detection and empty password decryption.
"""

import io
from typing import List, Optional

from pypdf import PdfReader

from ..core import get_logger, ExtractionError

logger = get_logger(__name__)


class PyPDFBackend:
    """
    PDF text extraction using the pypdf library.

    Provides fast extraction for standard PDFs with basic
    encryption handling.
    """

    name = "pypdf"

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
            reader = PdfReader(io.BytesIO(data))

            if reader.is_encrypted:
                try:
                    decrypted = reader.decrypt("")
                except Exception:
                    decrypted = False

                if not decrypted:
                    raise ExtractionError(
                        "PDF is encrypted and cannot be decrypted",
                        source=source
                    )

            total_pages = len(reader.pages)
            logger.debug(f"Processing {total_pages} pages: {source}")

            for page_num, page in enumerate(reader.pages, start=1):
                try:
                    results.append(page.extract_text() or "")
                except Exception as e:
                    logger.warning(f"Failed to extract page {page_num} from {source}: {e}")
                    results.append(None)

        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(
                f"pypdf extraction failed: {e}",
                source=source
            )

        return results
