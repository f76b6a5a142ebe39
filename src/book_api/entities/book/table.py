"""Book database table model."""

from sqlmodel import Field

from book_api.entities._base import EntityTable


class BookTable(EntityTable, table=True):
    """Database persistence model for books.

    The ``books`` table itself is created by the ``create_books`` migration;
    this model must stay in step with it.
    """

    __tablename__ = "books"

    name: str = Field(max_length=255)
    author: str = Field(max_length=255)
