"""
CLI script to (re-)extract the text of registered books.

Usage:
    python scripts/run_extraction.py                    # Pending and failed books
    python scripts/run_extraction.py --status failed    # Failed books only
    python scripts/run_extraction.py --book-id ID1 ID2  # Specific books
    python scripts/run_extraction.py --config path/to/config.json
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from book_search.core import get_config, get_logger, ConfigurationError
from book_search.core.config_loader import reload_config
from book_search.database import BookRepository, ExtractionStatus, get_statistics
from book_search.indexer import ExtractionPipeline


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract page text from registered book PDFs"
    )

    parser.add_argument(
        "--book-id",
        nargs="+",
        dest="book_ids",
        help="Book ids to extract. Overrides --status."
    )

    parser.add_argument(
        "--status",
        nargs="+",
        choices=[s.value for s in ExtractionStatus],
        help="Extraction statuses to select (default: pending failed)"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to custom config.json file"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output"
    )

    return parser.parse_args()


def progress_callback(current: int, total: int, title: str) -> None:
    """Print progress to console."""
    percent = (current / total) * 100 if total > 0 else 0
    bar_width = 30
    filled = int(bar_width * current / total) if total > 0 else 0
    bar = "=" * filled + "-" * (bar_width - filled)

    print(f"\r[{bar}] {percent:5.1f}% ({current}/{total}) {title[:40]:<40}", end="", flush=True)


def main():
    """Main entry point for the extraction CLI."""
    args = parse_args()

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}")
            sys.exit(1)
        reload_config(config_path)

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}")
        sys.exit(1)

    logger = get_logger(__name__)

    statuses = [ExtractionStatus(s) for s in (args.status or ["pending", "failed"])]

    print("=" * 60)
    print("Book Search - Text Extraction")
    print("=" * 60)
    print(f"Database path:     {config.paths.database_path}")
    print(f"Files directory:   {config.paths.files_directory}")
    print(f"Primary backend:   {config.extraction.primary_backend}")
    print(f"Fallback backend:  {config.extraction.fallback_backend or 'none'}")
    if args.book_ids:
        print(f"Books:             {', '.join(args.book_ids)}")
    else:
        print(f"Statuses:          {', '.join(s.value for s in statuses)}")
    print("=" * 60)

    repository = BookRepository()
    catalogue = get_statistics(repository.db)

    print(
        f"Catalogue:         {catalogue['total_books']:,} books "
        f"({catalogue['pending']:,} pending, {catalogue['failed']:,} failed)"
    )
    print("=" * 60)

    callback = None if args.quiet else progress_callback
    pipeline = ExtractionPipeline(repository, progress_callback=callback)

    print("\nStarting extraction...\n")
    logger.info("Extraction run started from CLI")

    stats = pipeline.extract_books(book_ids=args.book_ids, statuses=statuses)

    if not args.quiet:
        print("\n")

    print("=" * 60)
    print("Extraction Complete")
    print("=" * 60)
    print(f"Books processed:   {stats.books_processed:,}")
    print(f"Books completed:   {stats.books_completed:,}")
    print(f"Books failed:      {stats.books_failed:,}")
    print(f"Pages extracted:   {stats.pages_extracted:,}")
    print("=" * 60)

    if stats.errors:
        print(f"\nErrors ({len(stats.errors)}):")
        for error in stats.errors[:20]:
            print(f"  - {error}")
        if len(stats.errors) > 20:
            print(f"  ... and {len(stats.errors) - 20} more errors")

    if stats.books_failed > 0 or stats.errors:
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
