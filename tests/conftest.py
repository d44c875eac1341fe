"""
Pytest fixtures and configuration for the test suite.

Provides temporary directories, generated PDFs, and temporary
configurations so tests never touch the real database or files.
"""

import json
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Callable, Generator, List

import sys
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


def build_pdf(page_texts: List[str]) -> bytes:
    """
    Build a valid PDF with one line of Helvetica text per page.

    Args:
        page_texts: Text of each page; an empty string makes a blank page.

    Returns:
        PDF bytes with a correct cross-reference table.
    """
    page_count = len(page_texts)
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(page_count))

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    for i, text in enumerate(page_texts):
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Contents {5 + 2 * i} 0 R /Resources << /Font << /F1 3 0 R >> >> >>".encode()
        )

        escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        stream = f"BT /F1 12 Tf 72 720 Td ({escaped}) Tj ET".encode("latin-1")
        objects.append(
            b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets = []

    for num, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % num + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset

    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1, xref_offset
    )

    return bytes(out)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to temporary directory, cleaned up after test.
    """
    tmp = tempfile.mkdtemp(prefix="book_search_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_config(temp_dir: Path) -> Generator[Path, None, None]:
    """
    Create a temporary config.json for testing.

    Args:
        temp_dir: Temporary directory fixture.

    Yields:
        Path to temporary config file.
    """
    config_dir = temp_dir / "config"
    config_dir.mkdir()

    files_dir = temp_dir / "public" / "files"
    files_dir.mkdir(parents=True)

    output_dir = temp_dir / "output"
    output_dir.mkdir()

    logs_dir = output_dir / "logs"
    logs_dir.mkdir()

    config_data = {
        "paths": {
            "database_path": str(output_dir / "test.db"),
            "files_directory": str(files_dir),
            "logs_directory": str(logs_dir)
        },
        "extraction": {
            "primary_backend": "pypdf",
            "fallback_backend": "pdfplumber",
            "max_file_size_mb": 5,
            "download_timeout_seconds": 5,
            "server_url": "http://books.test",
            "files_url_prefix": "/files/",
            "page_placeholder": "[unavailable]"
        },
        "pipeline": {
            "max_workers": 1
        },
        "search": {
            "max_matches_per_page": 15,
            "context_chars": 40,
            "normalize_arabic": True,
            "max_workers": 1
        },
        "api": {
            "host": "127.0.0.1",
            "port": 8765,
            "cors_origins": ["http://localhost:3000"]
        },
        "logging": {
            "level": "DEBUG",
            "format": "%(levelname)s - %(message)s",
            "max_file_size_mb": 1,
            "backup_count": 1
        }
    }

    config_path = config_dir / "config.json"
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config_data, f)

    yield config_path


@pytest.fixture
def pdf_factory() -> Callable[[List[str]], bytes]:
    """Return the PDF builder so tests can make documents with chosen pages."""
    return build_pdf


@pytest.fixture
def sample_pdf_content() -> bytes:
    """
    Create minimal valid PDF content for testing.

    Returns:
        Bytes of a three-page PDF whose second page is blank.
    """
    return build_pdf(["The cat sat on the mat", "", "Another cat and a CAT"])


@pytest.fixture
def sample_pdf(temp_dir: Path, sample_pdf_content: bytes) -> Path:
    """
    Create a sample PDF file for testing.

    Args:
        temp_dir: Temporary directory fixture.
        sample_pdf_content: PDF content fixture.

    Returns:
        Path to the created PDF file.
    """
    pdf_path = temp_dir / "sample.pdf"
    pdf_path.write_bytes(sample_pdf_content)
    return pdf_path


@pytest.fixture
def reset_config_singleton():
    """
    Reset the config singleton between tests.

    This ensures each test gets a fresh config instance.
    """
    from book_search.core import config_loader
    config_loader._config_instance = None
    yield
    config_loader._config_instance = None


@pytest.fixture
def reset_logger_singleton():
    """
    Reset the logger initialization flag between tests.
    """
    import logging
    from book_search.core import logger

    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level

    logger._logger_initialized = False
    yield
    logger._logger_initialized = False

    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(saved_level)


@pytest.fixture
def configured_db(temp_config, reset_config_singleton):
    """
    Load the temp config so every component defaults to temp paths.

    Yields:
        The loaded Config instance.
    """
    from book_search.core.config_loader import get_config
    yield get_config(temp_config)


@pytest.fixture
def db_manager(configured_db):
    """Database manager pointing at the temp database."""
    from book_search.database import DatabaseManager
    return DatabaseManager(configured_db.paths.database_path)


@pytest.fixture
def repository(db_manager):
    """Book repository with initialized schema in the temp database."""
    from book_search.database import BookRepository
    return BookRepository(db_manager)


@pytest.fixture
def files_dir(configured_db) -> Path:
    """Local directory backing server-relative /files/ locations."""
    return configured_db.paths.files_directory
