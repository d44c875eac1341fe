"""
Extraction pipeline for the Book Search service.

Runs text extraction for newly registered books on a bounded worker
pool so the registering request returns immediately, and records the
outcome on the book record in a single update.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from ..core import get_config, get_logger, BookSearchError, ExtractionError
from ..database import BookRepository, ExtractionStatus
from ..extraction import PDFTextExtractor

logger = get_logger(__name__)


@dataclass
class ExtractionOutcome:
    """Result of one extraction run for one book."""
    book_id: str
    status: ExtractionStatus
    total_pages: int = 0
    error: Optional[str] = None
    persisted: bool = True


@dataclass
class ExtractionStats:
    """Statistics from a batch extraction run."""
    books_processed: int = 0
    books_completed: int = 0
    books_failed: int = 0
    pages_extracted: int = 0
    errors: List[str] = field(default_factory=list)


class ExtractionPipeline:
    """
    Orchestrates one-shot text extraction of books.

    Jobs submitted with submit() run on a thread pool; run_extraction()
    does the same work synchronously. Extraction is never retried
    automatically: a failed book stays failed until it is re-extracted.
    """

    def __init__(
        self,
        repository: BookRepository,
        extractor: PDFTextExtractor = None,
        max_workers: int = None,
        progress_callback: Callable[[int, int, str], None] = None
    ):
        """
        Initialize the pipeline.

        Args:
            repository: Book store receiving extraction results.
            extractor: PDF text extractor. Defaults to one built from config.
            max_workers: Size of the extraction worker pool.
            progress_callback: Optional callback(current, total, title)
                              called by extract_books().
        """
        config = get_config()

        self.repository = repository
        self.extractor = extractor or PDFTextExtractor()
        self.max_workers = max_workers or config.pipeline.max_workers
        self.progress_callback = progress_callback

        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    def run_extraction(self, book_id: str, pdf_location: str) -> ExtractionOutcome:
        """
        Extract a book's PDF and persist the result.

        On success the pages, page count and completed status are stored
        together; on failure the failed status and error message are stored.

        Args:
            book_id: Id of a pending book.
            pdf_location: URL or path of its PDF.

        Returns:
            ExtractionOutcome describing what was persisted.
        """
        logger.info(f"Starting extraction for book {book_id}: {pdf_location}")

        try:
            pages = self.extractor.extract(pdf_location)

        except ExtractionError as e:
            logger.warning(f"Extraction failed for book {book_id}: {e.message}")
            return self._record_failure(book_id, e.message)

        except Exception as e:
            logger.error(f"Unexpected extraction error for book {book_id}: {e}", exc_info=True)
            return self._record_failure(book_id, f"Unexpected error: {e}")

        persisted = self.repository.complete_extraction(book_id, pages)

        logger.info(f"Extraction completed for book {book_id}: {len(pages)} pages")

        return ExtractionOutcome(
            book_id=book_id,
            status=ExtractionStatus.COMPLETED,
            total_pages=len(pages),
            persisted=persisted
        )

    def submit(self, book_id: str, pdf_location: str) -> Future:
        """
        Queue a book for extraction on the worker pool.

        Args:
            book_id: Id of a pending book.
            pdf_location: URL or path of its PDF.

        Returns:
            Future resolving to the ExtractionOutcome.
        """
        future = self._get_executor().submit(self.run_extraction, book_id, pdf_location)
        future.add_done_callback(self._log_job_error)

        logger.debug(f"Queued extraction for book {book_id}")
        return future

    def extract_books(
        self,
        book_ids: Iterable[str] = None,
        statuses: Iterable[ExtractionStatus] = (ExtractionStatus.PENDING, ExtractionStatus.FAILED)
    ) -> ExtractionStats:
        """
        Synchronously (re-)extract a batch of books.

        Books not currently pending are reset to pending first.

        Args:
            book_ids: Explicit book ids. If None, select by status.
            statuses: Statuses to select when book_ids is None.

        Returns:
            ExtractionStats with counts and any errors encountered.
        """
        stats = ExtractionStats()

        if book_ids is not None:
            books = []
            for book_id in book_ids:
                book = self.repository.get(book_id, include_content=False)
                if book is None:
                    stats.errors.append(f"{book_id}: book not found")
                    continue
                books.append(book)
        else:
            books = self.repository.list(statuses=statuses, include_content=False)

        total = len(books)
        logger.info(f"Extracting {total} books")

        for i, book in enumerate(books):
            if self.progress_callback:
                self.progress_callback(i + 1, total, book.title)

            stats.books_processed += 1

            try:
                if book.extraction_status != ExtractionStatus.PENDING:
                    self.repository.mark_pending(book.id)

                outcome = self.run_extraction(book.id, book.pdf_location)

            except BookSearchError as e:
                stats.books_failed += 1
                stats.errors.append(f"{book.title}: {e.message}")
                logger.error(f"Failed to record extraction for {book.title}: {e.message}")
                continue

            if outcome.status == ExtractionStatus.COMPLETED:
                stats.books_completed += 1
                stats.pages_extracted += outcome.total_pages
            else:
                stats.books_failed += 1
                stats.errors.append(f"{book.title}: {outcome.error}")

        logger.info(
            f"Batch extraction complete: {stats.books_completed} completed, "
            f"{stats.books_failed} failed, {stats.pages_extracted} pages"
        )

        return stats

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop the worker pool.

        Args:
            wait: Whether to wait for queued extractions to finish.
        """
        with self._lock:
            executor, self._executor = self._executor, None

        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> "ExtractionPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

    def _get_executor(self) -> ThreadPoolExecutor:
        """Create the worker pool on first use."""
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="extraction"
                )
            return self._executor

    def _record_failure(self, book_id: str, message: str) -> ExtractionOutcome:
        persisted = self.repository.fail_extraction(book_id, message)

        return ExtractionOutcome(
            book_id=book_id,
            status=ExtractionStatus.FAILED,
            error=message,
            persisted=persisted
        )

    @staticmethod
    def _log_job_error(future: Future) -> None:
        """Surface errors raised while persisting an extraction result."""
        if future.cancelled():
            return

        error = future.exception()
        if error is not None:
            logger.error(f"Extraction job crashed: {error}", exc_info=error)
