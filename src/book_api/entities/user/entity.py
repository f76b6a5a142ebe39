"""User domain entity."""

from typing import Any

from pydantic import Field

from book_api.entities._base import Entity


class User(Entity):
    """An account allowed to call the book API.

    The password hash stays in the table layer and is never part of the entity.
    """

    username: str = Field(description="Login name used in Basic credentials")

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, User):
            return False
        return self.id == other.id and self.username == other.username

    def __hash__(self) -> int:
        return hash((self.id, self.username))
