"""Unit tests for the user entity package."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from book_api.entities.user import User, UserRepository


class TestUser:
    def test_user_creation_with_defaults(self):
        user = User(username="reader")

        assert user.username == "reader"
        assert user.id

    def test_user_equality(self):
        assert User(id="1", username="a") == User(id="1", username="a")
        assert User(id="1", username="a") != User(id="1", username="b")

    def test_password_hash_is_not_part_of_entity(self):
        assert "password_hash" not in User.model_fields


class TestUserRepository:
    def test_create_and_lookup(self, session: Session):
        repository = UserRepository(session)

        created = repository.create(User(username="reader"), "hash-value")

        assert repository.get_by_username("reader") == created
        assert repository.get_credentials("reader") == (created, "hash-value")

    def test_lookup_missing(self, session: Session):
        repository = UserRepository(session)

        assert repository.get_by_username("missing") is None
        assert repository.get_credentials("missing") is None

    def test_username_is_unique(self, session: Session):
        repository = UserRepository(session)
        repository.create(User(username="twin"), "h1")

        with pytest.raises(IntegrityError):
            repository.create(User(username="twin"), "h2")

    def test_list_all_sorted_by_username(self, session: Session):
        repository = UserRepository(session)
        for name in ("carol", "alice", "bob"):
            repository.create(User(username=name), "h")

        assert [u.username for u in repository.list_all()] == ["alice", "bob", "carol"]

    def test_set_password_hash(self, session: Session):
        repository = UserRepository(session)
        user = repository.create(User(username="reader"), "old")

        assert repository.set_password_hash("reader", "new") is True
        assert repository.get_credentials("reader") == (user, "new")
        assert repository.set_password_hash("missing", "new") is False

    def test_delete_by_username(self, session: Session):
        repository = UserRepository(session)
        repository.create(User(username="leaving"), "h")

        assert repository.delete_by_username("leaving") is True
        assert repository.get_by_username("leaving") is None
        assert repository.delete_by_username("leaving") is False
