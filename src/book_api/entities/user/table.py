"""User database table model."""

from sqlmodel import Field

from book_api.entities._base import EntityTable


class UserTable(EntityTable, table=True):
    """Credential record checked by the Basic authentication gate."""

    __tablename__ = "users"

    username: str = Field(max_length=255, unique=True, index=True)
    password_hash: str = Field(max_length=255)
