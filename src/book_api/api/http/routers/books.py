"""Book API router with CRUD operations.

Every route in this router sits behind the Basic authentication gate. Request
bodies are read by :func:`get_book_input`, which depends on the gate, so an
unauthenticated request is rejected before its body is looked at.
"""

import json

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError
from sqlmodel import Session

from book_api.api.http.deps import get_db_session, require_basic_auth
from book_api.core.errors import BadRequest, NotFound
from book_api.entities.book import Book, BookInput, BookRepository
from book_api.entities.user import User

router = APIRouter(
    prefix="/books",
    tags=["books"],
    dependencies=[Depends(require_basic_auth)],
)

_BODY_REQUIRED = "Request body must be a JSON object with 'name' and 'author'"


async def get_book_input(
    request: Request, _: User = Depends(require_basic_auth)
) -> tuple[str, str]:
    """Parse and validate the request body into ``(name, author)``.

    Raises:
        BadRequest: the body is empty, not JSON, not an object, or lacks a
            non-blank ``name`` or ``author``.
    """
    raw = await request.body()
    if not raw.strip():
        raise BadRequest(_BODY_REQUIRED)
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BadRequest(f"Malformed JSON body: {e}") from e
    if not isinstance(data, dict):
        raise BadRequest(_BODY_REQUIRED)
    try:
        payload = BookInput.model_validate(data)
    except ValidationError as e:
        raise BadRequest(f"Invalid book: {e.errors()[0]['msg']}") from e
    return payload.validated()


@router.get("", response_model=list[Book])
def list_books(session: Session = Depends(get_db_session)) -> list[Book]:
    """List all books."""
    return BookRepository(session).list_all()


@router.post("", response_model=Book)
def create_book(
    book_input: tuple[str, str] = Depends(get_book_input),
    session: Session = Depends(get_db_session),
) -> Book:
    """Create a new book."""
    name, author = book_input
    created_book = BookRepository(session).create(Book(name=name, author=author))
    session.commit()
    return created_book


@router.get("/{book_id}", response_model=Book)
def get_book(book_id: str, session: Session = Depends(get_db_session)) -> Book:
    """Get a book by ID."""
    book = BookRepository(session).get(book_id)
    if book is None:
        raise NotFound("Book not found")
    return book


@router.put("/{book_id}", response_model=Book)
def update_book(
    book_id: str,
    book_input: tuple[str, str] = Depends(get_book_input),
    session: Session = Depends(get_db_session),
) -> Book:
    """Replace a book's name and author. Both fields are required."""
    name, author = book_input
    updated_book = BookRepository(session).update(Book(id=book_id, name=name, author=author))
    if updated_book is None:
        raise NotFound("Book not found")
    session.commit()
    return updated_book


@router.delete("/{book_id}")
def delete_book(book_id: str, session: Session = Depends(get_db_session)) -> Response:
    """Delete a book."""
    if not BookRepository(session).delete(book_id):
        raise NotFound("Book not found")
    session.commit()
    return Response(status_code=200)
