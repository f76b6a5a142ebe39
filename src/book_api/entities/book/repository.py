from sqlmodel import Session, select

from book_api.entities.book.entity import Book
from book_api.entities.book.table import BookTable


class BookRepository:
    """Data-access layer for books.

    The repository never commits; callers own the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_all(self) -> list[Book]:
        rows = self._session.exec(select(BookTable)).all()
        return [Book.model_validate(row, from_attributes=True) for row in rows]

    def get(self, book_id: str) -> Book | None:
        row = self._session.get(BookTable, book_id)
        if row is None:
            return None
        return Book.model_validate(row, from_attributes=True)

    def create(self, book: Book) -> Book:
        row = BookTable(id=book.id, name=book.name, author=book.author)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Book.model_validate(row, from_attributes=True)

    def update(self, book: Book) -> Book | None:
        """Replace name and author of an existing book; ``None`` if it does not exist."""
        row = self._session.get(BookTable, book.id)
        if row is None:
            return None
        row.name = book.name
        row.author = book.author
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Book.model_validate(row, from_attributes=True)

    def delete(self, book_id: str) -> bool:
        row = self._session.get(BookTable, book_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
