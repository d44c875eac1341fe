"""
HTTP API for the Book Search service.

Exposes book registration, the catalogue, per-book content and the
single-book and multi-book search endpoints. Components are built in
create_app() and can be injected for tests.
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..core import (
    get_config,
    get_logger,
    BookNotFoundError,
    BookNotIndexedError,
    BookSearchError,
    DatabaseError
)
from ..database import BookRepository, ExtractionStatus, Section
from ..indexer import ExtractionPipeline
from ..search import ALL_BOOKS, MultiBookSearchCoordinator, SnippetSearchEngine

logger = get_logger(__name__)


class SectionIn(BaseModel):
    name: str = Field(..., min_length=1)
    page: int = Field(1, ge=1)


class BookCreate(BaseModel):
    title: str = Field(..., min_length=1)
    pdf_location: str = Field(..., alias="pdfLocation", min_length=1)
    sections: List[SectionIn] = Field(default_factory=list)


class SectionsUpdate(BaseModel):
    sections: List[SectionIn]


def _to_sections(items: List[SectionIn]) -> List[Section]:
    return [Section(name=item.name.strip(), page=item.page) for item in items]


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def create_app(
    repository: BookRepository = None,
    pipeline: ExtractionPipeline = None,
    engine: SnippetSearchEngine = None,
    coordinator: MultiBookSearchCoordinator = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        repository: Book store. Defaults to the configured SQLite database.
        pipeline: Extraction pipeline receiving newly registered books.
        engine: Single-book snippet search engine.
        coordinator: Multi-book search coordinator.

    Returns:
        Configured FastAPI application.
    """
    config = get_config()

    repository = repository or BookRepository()
    pipeline = pipeline or ExtractionPipeline(repository)
    engine = engine or SnippetSearchEngine()
    coordinator = coordinator or MultiBookSearchCoordinator(repository, engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Shutting down extraction pipeline")
        pipeline.shutdown(wait=False)

    app = FastAPI(title="Book Search API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.repository = repository
    app.state.pipeline = pipeline
    app.state.engine = engine
    app.state.coordinator = coordinator

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request", details=jsonable_encoder(exc.errors()))

    @app.exception_handler(BookNotFoundError)
    async def not_found_handler(request: Request, exc: BookNotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, "Book not found")

    @app.exception_handler(BookNotIndexedError)
    async def not_indexed_handler(request: Request, exc: BookNotIndexedError):
        extra = {"extractionStatus": exc.status}
        if exc.error:
            extra["extractionError"] = exc.error
        return _error(status.HTTP_409_CONFLICT, exc.message, **extra)

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        logger.error(f"Database error on {request.url.path}: {exc.message}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Search failed")

    @app.exception_handler(BookSearchError)
    async def service_error_handler(request: Request, exc: BookSearchError):
        logger.error(f"Error on {request.url.path}: {exc.message}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.get("/search")
    def search_book(
        book_id: Optional[str] = Query(None, alias="bookId"),
        q: Optional[str] = Query(None)
    ):
        if not book_id or not book_id.strip() or not q:
            return _error(status.HTTP_400_BAD_REQUEST, "Missing bookId or search query")

        book = repository.require(book_id.strip())
        matches = engine.search_book(book, q)

        return {"results": [match.to_dict() for match in matches]}

    @app.get("/search/global")
    def search_global(
        q: Optional[str] = Query(None),
        book_ids: Optional[str] = Query(None, alias="bookIds")
    ):
        if not q:
            return _error(status.HTTP_400_BAD_REQUEST, "Missing search query")

        selection = book_ids.split(",") if book_ids else ALL_BOOKS
        results = coordinator.search_across_books(selection, q)

        return {"results": [result.to_dict() for result in results]}

    @app.post("/books", status_code=status.HTTP_201_CREATED)
    def create_book(payload: BookCreate):
        book = repository.create(
            title=payload.title.strip(),
            pdf_location=payload.pdf_location.strip(),
            sections=_to_sections(payload.sections)
        )

        try:
            pipeline.submit(book.id, book.pdf_location)
        except RuntimeError as e:
            logger.error(f"Could not queue extraction for book {book.id}: {e}")

        return book.to_dict()

    @app.get("/books")
    def list_books():
        books = repository.list(include_content=False)
        return {"count": len(books), "data": [book.to_dict() for book in books]}

    @app.get("/books/{book_id}")
    def get_book(book_id: str):
        return repository.require(book_id, include_content=False).to_dict()

    @app.get("/books/{book_id}/content")
    def get_book_content(book_id: str):
        book = repository.require(book_id)

        if book.extraction_status == ExtractionStatus.PENDING:
            return {
                "bookId": book.id,
                "title": book.title,
                "totalPages": 1,
                "content": [
                    f'Text extraction is in progress for "{book.title}". '
                    "This may take a few minutes for large books. Please try again shortly."
                ],
                "isProcessing": True
            }

        if not book.is_searchable:
            raise BookNotIndexedError(
                book.id,
                status=book.extraction_status.value,
                error=book.extraction_error
            )

        return {
            "bookId": book.id,
            "title": book.title,
            "totalPages": book.total_pages,
            "content": book.extracted_content
        }

    @app.get("/books/{book_id}/sections")
    def get_book_sections(book_id: str):
        book = repository.require(book_id, include_content=False)
        return {"sections": [section.to_dict() for section in book.sections]}

    @app.put("/books/{book_id}/sections")
    def update_book_sections(book_id: str, payload: SectionsUpdate):
        sections = _to_sections(payload.sections)

        if not repository.update_sections(book_id, sections):
            raise BookNotFoundError(book_id)

        return {"sections": [section.to_dict() for section in sections]}

    @app.delete("/books/{book_id}")
    def delete_book(book_id: str):
        if not repository.delete(book_id):
            raise BookNotFoundError(book_id)
        return {"deleted": True}

    return app
