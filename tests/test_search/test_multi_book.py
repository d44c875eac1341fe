"""
Tests for multi-book search.

Books are stored in the temp database; only completed books
contribute results.
"""

import pytest

from book_search.search.multi_book import ALL_BOOKS, MultiBookSearchCoordinator
from book_search.search.snippet_engine import SnippetSearchEngine


@pytest.fixture
def coordinator(repository) -> MultiBookSearchCoordinator:
    """Coordinator over the temp repository."""
    return MultiBookSearchCoordinator(repository, SnippetSearchEngine())


@pytest.fixture
def catalogue(repository):
    """Two completed books, one pending and one failed."""
    first = repository.create("First", "/files/first.pdf")
    second = repository.create("Second", "/files/second.pdf")
    pending = repository.create("Pending", "/files/pending.pdf")
    failed = repository.create("Failed", "/files/failed.pdf")

    repository.complete_extraction(first.id, ["a cat here", "nothing", "cat and cat"])
    repository.complete_extraction(second.id, ["the Cat returns"])
    repository.fail_extraction(failed.id, "Cannot open")

    return {"first": first, "second": second, "pending": pending, "failed": failed}


class TestSearchAcrossBooks:
    """Tests for MultiBookSearchCoordinator.search_across_books."""

    def test_all_books_in_store_order(self, coordinator, catalogue):
        """Test that 'all' searches every completed book in enumeration order."""
        results = coordinator.search_across_books(ALL_BOOKS, "cat")

        assert [(r.book_title, r.page) for r in results] == [
            ("First", 1), ("First", 3), ("First", 3), ("Second", 1)
        ]
        assert results[0].book_id == catalogue["first"].id

    def test_none_means_all(self, coordinator, catalogue):
        """Test that no selection searches the whole store."""
        assert len(coordinator.search_across_books(None, "cat")) == 4

    def test_explicit_list_order(self, coordinator, catalogue):
        """Test that an explicit list is searched in the given order."""
        ids = [catalogue["second"].id, catalogue["first"].id]

        results = coordinator.search_across_books(ids, "cat")

        assert [r.book_title for r in results] == ["Second", "First", "First", "First"]

    def test_missing_id_skipped(self, coordinator, catalogue):
        """Test that an unknown id contributes nothing and raises nothing."""
        results = coordinator.search_across_books([catalogue["second"].id, "missing"], "cat")

        assert [r.book_title for r in results] == ["Second"]

    def test_unindexed_books_skipped(self, coordinator, catalogue):
        """Test that pending and failed books are skipped silently."""
        ids = [catalogue["pending"].id, catalogue["failed"].id]

        assert coordinator.search_across_books(ids, "cat") == []

    def test_duplicate_ids_searched_once(self, coordinator, catalogue):
        """Test that a repeated id does not duplicate results."""
        book_id = catalogue["second"].id

        assert len(coordinator.search_across_books([book_id, f" {book_id} "], "cat")) == 1

    def test_empty_query(self, coordinator, catalogue):
        """Test that an empty query returns no results."""
        assert coordinator.search_across_books(ALL_BOOKS, "") == []

    def test_parallel_matches_sequential(self, repository, catalogue):
        """Test that parallel search keeps the sequential ordering."""
        sequential = MultiBookSearchCoordinator(repository, max_workers=1)
        parallel = MultiBookSearchCoordinator(repository, max_workers=4)

        assert parallel.search_across_books(ALL_BOOKS, "cat") == \
            sequential.search_across_books(ALL_BOOKS, "cat")

    def test_result_to_dict(self, coordinator, catalogue):
        """Test the HTTP representation of a tagged result."""
        [result] = coordinator.search_across_books([catalogue["second"].id], "cat")

        assert result.to_dict() == {
            "bookId": catalogue["second"].id,
            "bookTitle": "Second",
            "page": 1,
            "snippet": "the Cat returns"
        }


class TestResolveBooks:
    """Tests for book selection."""

    def test_single_id_string(self, coordinator, catalogue):
        """Test that a single id string is accepted."""
        books = coordinator.resolve_books(catalogue["first"].id)

        assert [b.title for b in books] == ["First"]

    def test_blank_ids_ignored(self, coordinator, catalogue):
        """Test that blank entries from a trailing comma are ignored."""
        books = coordinator.resolve_books([catalogue["first"].id, "", "  "])

        assert len(books) == 1
