"""Entities organized by business concept.

Each entity has its own package containing:
- entity.py: Domain model
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .book import Book, BookInput, BookRepository, BookTable
from .user import User, UserRepository, UserTable

__all__ = [
    "Book",
    "BookInput",
    "BookRepository",
    "BookTable",
    "User",
    "UserRepository",
    "UserTable",
]
