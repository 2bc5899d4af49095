"""Initial database schema.

Revision ID: 001
Revises:
Create Date: 2026-10-18

Catalog schema for book list imports:
- Books
- Book lists
- Book list items (ordered membership with comments)
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    # Books table
    op.create_table(
        "books",
        sa.Column("id", mysql.CHAR(36), primary_key=True),
        sa.Column("isbn", sa.String(20), nullable=False, server_default=""),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("author", sa.String(500), nullable=False, server_default=""),
        sa.Column("publisher", sa.String(255), nullable=False, server_default=""),
        sa.Column("publish_date", sa.String(50), nullable=False, server_default=""),
        sa.Column("cover", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("want", "reading", "read", name="readingstatus"),
            nullable=True,
        ),
        sa.Column("categories", sa.JSON(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("source", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("recommendation", sa.Text(), nullable=False),
        sa.Column("added_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_books_isbn", "books", ["isbn"])
    op.create_index("ix_books_title", "books", ["title"], mysql_length=100)

    # Book lists table
    op.create_table(
        "book_lists",
        sa.Column("id", mysql.CHAR(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_book_lists_name", "book_lists", ["name"])

    # Book list items (membership)
    op.create_table(
        "book_list_items",
        sa.Column(
            "list_id",
            mysql.CHAR(36),
            sa.ForeignKey("book_lists.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "book_id",
            mysql.CHAR(36),
            sa.ForeignKey("books.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("added_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_book_list_items_book_id", "book_list_items", ["book_id"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("book_list_items")
    op.drop_table("book_lists")
    op.drop_table("books")
