"""
Tests for the snippet search engine.

Tests literal case-insensitive matching, the per-page cap, context
windows and the distinct not-indexed signal.
"""

import pytest

from book_search.core.exceptions import BookNotIndexedError
from book_search.database.repository import Book, ExtractionStatus
from book_search.search.snippet_engine import SnippetSearchEngine


@pytest.fixture
def engine(configured_db) -> SnippetSearchEngine:
    """Engine with the default cap and context."""
    return SnippetSearchEngine()


class TestSnippetSearch:
    """Tests for SnippetSearchEngine.search."""

    def test_two_matches_on_first_page(self, engine):
        """Test repeated matches on one page and none on the other."""
        pages = ["The cat sat. The cat ran.", "No match here."]

        matches = engine.search(pages, "cat")

        assert [m.page for m in matches] == [1, 1]
        assert [m.start_offset for m in matches] == [4, 17]
        assert all("cat" in m.snippet for m in matches)

    def test_empty_query_returns_empty(self, engine):
        """Test that an empty query is a defined empty result."""
        assert engine.search(["Hello World"], "") == []

    def test_match_cap_per_page(self, engine):
        """Test that the first 15 matches of a page are returned in order."""
        matches = engine.search(["x" * 20, "x"], "x")

        first_page = [m for m in matches if m.page == 1]
        assert [m.start_offset for m in first_page] == list(range(15))
        assert [m.page for m in matches][-1] == 2

    def test_match_cap_keeps_leftmost_occurrences(self, engine):
        """Test that occurrences past the cap are dropped from the end of the page."""
        page = " ".join(f"cat{i:02d}" for i in range(20))

        matches = engine.search([page], "cat")

        assert [m.start_offset for m in matches] == [i * 6 for i in range(15)]
        assert "cat14" in matches[-1].snippet
        assert not any(m.snippet.startswith("cat15") for m in matches)

    def test_explicit_zero_cap(self, configured_db):
        """Test that a cap of zero is honoured instead of the configured default."""
        engine = SnippetSearchEngine(max_matches_per_page=0)

        assert engine.max_matches_per_page == 0
        assert engine.search(["cat cat"], "cat") == []

    def test_whitespace_query_is_literal(self, engine):
        """Test that a single space is searched like any other text."""
        matches = engine.search(["a b c"], " ")

        assert [m.start_offset for m in matches] == [1, 3]

    def test_case_insensitive_snippet_keeps_original_case(self, engine):
        """Test that matching ignores case but snippets do not."""
        matches = engine.search(["Another cat and a CAT"], "Cat")

        assert len(matches) == 2
        assert matches[1].snippet == "Another cat and a CAT"

    def test_regex_metacharacters_are_literal(self, engine):
        """Test that 'a.b' only matches the literal text."""
        matches = engine.search(["axb a.b", "(x*"], "a.b")

        assert len(matches) == 1
        assert matches[0].start_offset == 4
        assert len(engine.search(["(x*"], "(x*")) == 1

    def test_context_window(self, engine):
        """Test that snippets carry 40 characters on each side."""
        page = "a" * 100 + "needle" + "b" * 100

        [match] = engine.search([page], "needle")

        assert match.snippet == "a" * 40 + "needle" + "b" * 40

    def test_context_clamped_at_page_edges(self, engine):
        """Test that windows do not run past the page boundaries."""
        [match] = engine.search(["needle at start"], "needle")

        assert match.snippet == "needle at start"

    def test_query_longer_than_page(self, engine):
        """Test that a query longer than the page text finds nothing."""
        assert engine.search(["cat"], "category") == []

    def test_non_overlapping(self, engine):
        """Test that occurrences are scanned without overlap."""
        assert len(engine.search(["aaaa"], "aa")) == 2

    def test_blank_pages_keep_numbering(self, engine):
        """Test that empty pages still count towards page numbers."""
        matches = engine.search(["", "", "found"], "found")

        assert matches[0].page == 3

    def test_idempotent(self, engine):
        """Test that identical searches give identical output."""
        pages = ["The cat sat. The cat ran.", "Cat again"]

        assert engine.search(pages, "cat") == engine.search(pages, "cat")

    def test_none_pages_raise_not_indexed(self, engine):
        """Test that missing pages are distinct from zero matches."""
        with pytest.raises(BookNotIndexedError):
            engine.search(None, "cat")


class TestArabicNormalization:
    """Tests for diacritic and letter-variant insensitive search."""

    def test_query_without_diacritics_matches_vocalized_text(self, engine):
        """Test that harakat in the page do not block a match."""
        page = "قال: الكِتَابُ مفيد جدا"

        [match] = engine.search([page], "الكتاب")

        assert "الكِتَابُ" in match.snippet

    def test_letter_variants_match(self, engine):
        """Test that alef and ta marbuta variants are unified."""
        assert len(engine.search(["أحمد في المدرسة"], "احمد مدرسه")) == 0
        assert len(engine.search(["أحمد في المدرسة"], "المدرسه")) == 1
        assert len(engine.search(["أحمد في المدرسة"], "احمد")) == 1

    def test_normalization_disabled(self, configured_db):
        """Test exact Arabic matching when normalization is turned off."""
        engine = SnippetSearchEngine(normalize_arabic=False)

        assert engine.search(["أحمد"], "احمد") == []
        assert len(engine.search(["أحمد"], "أحمد")) == 1


class TestGreekSearch:
    """Tests for case folding of Greek sigma."""

    def test_upper_case_query_matches_final_sigma(self, engine):
        """Test that an upper-case query finds a word ending in final sigma."""
        [match] = engine.search(["ο δρόμος είναι μακρύς"], "ΔΡΌΜΟΣ")

        assert match.start_offset == 2
        assert "δρόμος" in match.snippet

    def test_final_sigma_query_matches_medial_sigma(self, configured_db):
        """Test that a final-sigma query also matches a medial sigma."""
        engine = SnippetSearchEngine(normalize_arabic=False)

        assert len(engine.search(["ΜΑΚΡΥΣΑ"], "μακρυς")) == 1


class TestSearchBook:
    """Tests for searching a stored book."""

    def test_completed_book(self, engine):
        """Test that a completed book is searched."""
        book = Book(id="b1", title="T", pdf_location="p",
                    extraction_status=ExtractionStatus.COMPLETED,
                    extracted_content=["one cat"], total_pages=1)

        assert len(engine.search_book(book, "cat")) == 1

    def test_pending_book_raises(self, engine):
        """Test that a pending book reports that it is not indexed yet."""
        book = Book(id="b1", title="T", pdf_location="p")

        with pytest.raises(BookNotIndexedError) as exc_info:
            engine.search_book(book, "cat")

        assert exc_info.value.status == "pending"
        assert exc_info.value.book_id == "b1"

    def test_failed_book_raises_with_error(self, engine):
        """Test that a failed book carries its extraction error."""
        book = Book(id="b1", title="T", pdf_location="p",
                    extraction_status=ExtractionStatus.FAILED,
                    extraction_error="PDF is encrypted")

        with pytest.raises(BookNotIndexedError) as exc_info:
            engine.search_book(book, "cat")

        assert exc_info.value.error == "PDF is encrypted"
