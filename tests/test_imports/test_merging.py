"""Tests for book matching and merge rules."""

import pytest

from booklists.catalog.schemas import BookRecord
from booklists.imports.matching import book_key, find_existing_book, generate_unique_name
from booklists.imports.merging import differing_fields, merge_comments, merge_field
from booklists.imports.schemas import (
    BookField,
    CommentMerge,
    ExportedBook,
    FieldChoice,
    FieldMerge,
    MatchType,
)


class TestBookKey:
    """Test identity keys."""

    def test_isbn_key(self):
        """Test the ISBN is the key when present."""
        assert book_key(ExportedBook(title="Dune", author="Herbert", isbn="111")) == "111"

    def test_title_author_key(self):
        """Test title and author form the key without an ISBN."""
        assert book_key(ExportedBook(title="Dune", author="Herbert")) == "Dune|Herbert"
        assert book_key(ExportedBook(title="Dune", author="Herbert", isbn="")) == "Dune|Herbert"


class TestFindExistingBook:
    """Test matching imported books to catalog books."""

    @pytest.fixture
    def catalog(self):
        return [
            BookRecord(id="b1", title="Dune", author="Herbert", isbn="111"),
            BookRecord(id="b2", title="Emma", author="Austen"),
        ]

    def test_match_by_isbn(self, catalog):
        """Test ISBN equality wins even when the title differs."""
        match = find_existing_book(
            ExportedBook(title="Dune (Reissue)", author="F. Herbert", isbn="111"), catalog
        )
        assert match[0].id == "b1"
        assert match[1] == MatchType.ISBN

    def test_match_by_title_author(self, catalog):
        """Test exact title and author match without ISBN."""
        match = find_existing_book(ExportedBook(title="Emma", author="Austen"), catalog)
        assert match[0].id == "b2"
        assert match[1] == MatchType.TITLE_AUTHOR

    def test_unknown_isbn_falls_back_to_title_author(self, catalog):
        """Test an unmatched ISBN still allows a title and author match."""
        imported = ExportedBook(title="Emma", author="Austen", isbn="999")
        match = find_existing_book(imported, catalog)
        assert match[0].id == "b2"
        assert match[1] == MatchType.TITLE_AUTHOR

    def test_match_is_exact(self, catalog):
        """Test title matching is case sensitive."""
        assert find_existing_book(ExportedBook(title="emma", author="Austen"), catalog) is None


class TestGenerateUniqueName:
    """Test alternate list names."""

    def test_first_suffix(self):
        assert generate_unique_name("X", {"X"}) == "X (2)"

    def test_skips_taken_suffixes(self):
        assert generate_unique_name("X", {"X", "X (2)"}) == "X (3)"
        assert generate_unique_name("X", ["X", "X (2)", "X (3)"]) == "X (4)"


class TestMergeField:
    """Test field merge modes."""

    def test_non_empty_fills_empty_local(self):
        """Test an empty local value takes the imported one."""
        assert merge_field("", "Chilton", FieldMerge.NON_EMPTY) == "Chilton"
        assert merge_field("  ", "Chilton", FieldMerge.NON_EMPTY) == "Chilton"

    def test_non_empty_keeps_local(self):
        """Test a non-empty local value always wins."""
        assert merge_field("Ace", "Chilton", FieldMerge.NON_EMPTY) == "Ace"
        assert merge_field("Ace", "", FieldMerge.NON_EMPTY) == "Ace"

    def test_local_and_import_modes(self):
        assert merge_field("Ace", "Chilton", FieldMerge.LOCAL) == "Ace"
        assert merge_field("Ace", "Chilton", FieldMerge.IMPORT) == "Chilton"
        assert merge_field("Ace", "", FieldChoice.IMPORT) == ""
        assert merge_field("", "Chilton", FieldChoice.LOCAL) == ""

    def test_detailed_falls_back_to_non_empty(self):
        """Test modes without a value of their own behave like non-empty."""
        assert merge_field("", "Chilton", FieldMerge.DETAILED) == "Chilton"
        assert merge_field("Ace", "Chilton", FieldChoice.UNRESOLVED) == "Ace"


class TestMergeComments:
    """Test membership comment merging."""

    def test_both_joins_with_blank_line(self):
        assert merge_comments("A", "B", CommentMerge.BOTH) == "A\n\nB"

    def test_both_trims_and_skips_empty(self):
        assert merge_comments("  A ", "", CommentMerge.BOTH) == "A"
        assert merge_comments(None, " B ", CommentMerge.BOTH) == "B"
        assert merge_comments(" ", None, CommentMerge.BOTH) is None

    def test_local_and_import(self):
        assert merge_comments("A", "B", CommentMerge.LOCAL) == "A"
        assert merge_comments("A", "B", CommentMerge.IMPORT) == "B"
        assert merge_comments("A", None, CommentMerge.IMPORT) is None


class TestDifferingFields:
    """Test detection of differing mergeable fields."""

    def test_missing_values_compare_as_empty(self):
        """Test an unset imported field equals an empty local field."""
        existing = BookRecord(id="b1", title="Dune", isbn="111", publisher="")
        imported = ExportedBook(title="Dune", isbn="111")
        assert differing_fields(existing, imported) == []

    def test_reports_each_difference(self):
        existing = BookRecord(id="b1", title="Dune", isbn="111", publisher="Ace", cover="a.jpg")
        imported = ExportedBook(
            title="Dune", isbn="111", publisher="Chilton", publishDate="1965", coverUrl="a.jpg"
        )
        assert differing_fields(existing, imported) == [
            BookField.PUBLISHER,
            BookField.PUBLISH_DATE,
        ]
