"""Entity: Book."""

from typing import Any

from pydantic import BaseModel, Field

from book_api.core.errors import BadRequest
from book_api.entities._base import Entity


class Book(Entity):
    """A book as exposed by the API: ``{id, name, author}``."""

    name: str = Field(description="Title of the book")
    author: str = Field(description="Author of the book")

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Book):
            return False
        return (
            self.id == other.id
            and self.name == other.name
            and self.author == other.author
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.author))


class BookInput(BaseModel):
    """Request body for creating or replacing a book.

    Both fields are optional at parse time so that a missing field is
    reported as a 400 by :meth:`validated` instead of a schema error.
    Unknown keys, including ``id``, are ignored.
    """

    name: str | None = Field(default=None, description="Title of the book")
    author: str | None = Field(default=None, description="Author of the book")

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent or blank."""
        return [
            field
            for field in ("name", "author")
            if getattr(self, field) is None or not getattr(self, field).strip()
        ]

    def validated(self) -> tuple[str, str]:
        """Return ``(name, author)`` or raise :class:`BadRequest`."""
        missing = self.missing_fields()
        if missing:
            raise BadRequest(f"Missing required field(s): {', '.join(missing)}")
        # missing_fields() guarantees both are set
        return self.name, self.author  # type: ignore[return-value]
