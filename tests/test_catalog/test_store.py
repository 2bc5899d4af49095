"""Tests for the SQL catalog store."""

import pytest

from booklists.catalog.schemas import BookListRecord, BookRecord, ListMembership
from booklists.catalog.store import NotFoundError, SqlCatalogStore


class TestBooks:
    """Test book operations."""

    def test_create_and_get_book(self, store: SqlCatalogStore):
        """Test creating a book assigns defaults and reads back."""
        book_id = store.create_book(BookRecord(id="", title="Dune", author="Herbert"))

        book = store.get_book(book_id)
        assert book is not None
        assert book.id == book_id
        assert book.title == "Dune"
        assert book.isbn == ""
        assert book.source == ["manual"]

    def test_get_missing_book(self, store: SqlCatalogStore):
        """Test reading an unknown book returns None."""
        assert store.get_book("missing") is None

    def test_update_book_patches_only_given_fields(self, store: SqlCatalogStore, add_book):
        """Test that a patch leaves other fields untouched."""
        book_id = add_book("Dune", publisher="Chilton", notes="keep me")

        store.update_book(book_id, {"isbn": "111"})

        book = store.get_book(book_id)
        assert book.isbn == "111"
        assert book.publisher == "Chilton"
        assert book.notes == "keep me"

    def test_update_book_rejects_unknown_field(self, store: SqlCatalogStore, add_book):
        """Test that non-patchable fields are refused."""
        book_id = add_book("Dune")

        with pytest.raises(ValueError):
            store.update_book(book_id, {"id": "other"})

    def test_update_missing_book(self, store: SqlCatalogStore):
        """Test patching an unknown book raises NotFoundError."""
        with pytest.raises(NotFoundError):
            store.update_book("missing", {"isbn": "1"})

    def test_delete_book_removes_memberships(self, store: SqlCatalogStore, add_book, add_list):
        """Test deleting a book drops it from every list."""
        book_id = add_book("Dune")
        other_id = add_book("Emma")
        list_id = add_list("Reading", [(book_id, None), (other_id, "good")])

        store.delete_book(book_id)

        assert store.get_book(book_id) is None
        book_list = store.get_list(list_id)
        assert [entry.book_id for entry in book_list.books] == [other_id]

    def test_delete_missing_book_is_noop(self, store: SqlCatalogStore):
        """Test deleting an unknown book does nothing."""
        store.delete_book("missing")
        assert store.list_books() == []


class TestLists:
    """Test list and membership operations."""

    def test_create_list(self, store: SqlCatalogStore):
        """Test creating a list."""
        list_id = store.create_list("Reading", "Books in progress")

        book_list = store.get_list(list_id)
        assert book_list.name == "Reading"
        assert book_list.description == "Books in progress"
        assert book_list.books == []

    def test_add_book_keeps_order_and_comment(self, store: SqlCatalogStore, add_book):
        """Test memberships are appended in order with their comments."""
        first = add_book("Dune")
        second = add_book("Emma")
        list_id = store.create_list("Reading")

        assert store.add_book_to_list(list_id, first, "classic") is True
        assert store.add_book_to_list(list_id, second) is True

        book_list = store.get_list(list_id)
        assert [entry.book_id for entry in book_list.books] == [first, second]
        assert book_list.membership(first).comment == "classic"
        assert book_list.membership(second).comment is None

    def test_add_existing_member_returns_false(self, store: SqlCatalogStore, add_book):
        """Test adding a book twice leaves the list unchanged."""
        book_id = add_book("Dune")
        list_id = store.create_list("Reading")
        store.add_book_to_list(list_id, book_id, "first")

        assert store.add_book_to_list(list_id, book_id, "second") is False
        book_list = store.get_list(list_id)
        assert len(book_list.books) == 1
        assert book_list.membership(book_id).comment == "first"

    def test_add_to_missing_list(self, store: SqlCatalogStore, add_book):
        """Test adding to an unknown list raises NotFoundError."""
        book_id = add_book("Dune")
        with pytest.raises(NotFoundError):
            store.add_book_to_list("missing", book_id)

    def test_add_missing_book(self, store: SqlCatalogStore):
        """Test adding an unknown book raises NotFoundError."""
        list_id = store.create_list("Reading")
        with pytest.raises(NotFoundError):
            store.add_book_to_list(list_id, "missing")

    def test_update_book_comment(self, store: SqlCatalogStore, add_book, add_list):
        """Test replacing a membership comment."""
        book_id = add_book("Dune")
        list_id = add_list("Reading", [(book_id, "old")])

        store.update_book_comment(list_id, book_id, "new")

        assert store.get_list(list_id).membership(book_id).comment == "new"

    def test_update_comment_of_non_member(self, store: SqlCatalogStore, add_book):
        """Test commenting on a book outside the list raises NotFoundError."""
        book_id = add_book("Dune")
        list_id = store.create_list("Reading")
        with pytest.raises(NotFoundError):
            store.update_book_comment(list_id, book_id, "note")

    def test_remove_book_from_list(self, store: SqlCatalogStore, add_book, add_list):
        """Test removing a membership keeps the book."""
        book_id = add_book("Dune")
        list_id = add_list("Reading", [(book_id, None)])

        store.remove_book_from_list(list_id, book_id)

        assert store.get_list(list_id).books == []
        assert store.get_book(book_id) is not None

    def test_delete_list_keeps_books(self, store: SqlCatalogStore, add_book, add_list):
        """Test deleting a list does not delete its books."""
        book_id = add_book("Dune")
        list_id = add_list("Reading", [(book_id, None)])

        store.delete_list(list_id)

        assert store.get_list(list_id) is None
        assert store.get_book(book_id) is not None


class TestPutList:
    """Test writing back full list records."""

    def test_put_list_restores_membership(self, store: SqlCatalogStore, add_book, add_list):
        """Test membership order and comments are replaced by the record."""
        first = add_book("Dune")
        second = add_book("Emma")
        third = add_book("Ulysses")
        list_id = add_list("Reading", [(first, "a"), (second, "b")])
        before = store.get_list(list_id)

        store.add_book_to_list(list_id, third, "c")
        store.update_book_comment(list_id, first, "changed")
        store.put_list(before)

        after = store.get_list(list_id)
        assert [(e.book_id, e.comment) for e in after.books] == [(first, "a"), (second, "b")]
        assert after.name == "Reading"

    def test_put_list_recreates_deleted_list(self, store: SqlCatalogStore, add_book, add_list):
        """Test a deleted list comes back under its original ID."""
        book_id = add_book("Dune")
        list_id = add_list("Reading", [(book_id, "note")], description="desc")
        before = store.get_list(list_id)

        store.delete_list(list_id)
        store.put_list(before)

        after = store.get_list(list_id)
        assert after.id == list_id
        assert after.description == "desc"
        assert after.membership(book_id).comment == "note"
        assert after.membership(book_id).added_at == before.membership(book_id).added_at

    def test_put_list_skips_missing_books(self, store: SqlCatalogStore, add_book):
        """Test memberships of books that no longer exist are dropped."""
        book_id = add_book("Dune")
        record = BookListRecord(
            id="list-1",
            name="Reading",
            books=[
                ListMembership(book_id="gone", comment="x"),
                ListMembership(book_id=book_id, comment="y"),
            ],
        )

        store.put_list(record)

        after = store.get_list("list-1")
        assert [entry.book_id for entry in after.books] == [book_id]
