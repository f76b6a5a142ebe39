from collections.abc import Iterable

from loguru import logger
from passlib.context import CryptContext
from sqlmodel import Session

from book_api.core.security import (
    dummy_verify,
    get_password_context,
    hash_password,
    verify_password,
)
from book_api.entities.user import User, UserRepository
from book_api.runtime.config.config_data import SeedUserConfig


class UserManagementService:
    """Credential checks and administration of API users.

    The service works inside the caller's session and never commits.
    """

    def __init__(self, db_session: Session, password_context: CryptContext | None = None):
        self._repository = UserRepository(db_session)
        self._password_context = password_context or get_password_context()

    def authenticate(self, username: str, password: str) -> User | None:
        """Return the user if the username exists and the password matches.

        Unknown usernames still pay for one hash verification so that both
        failure paths take the same time.
        """
        credentials = self._repository.get_credentials(username)
        if credentials is None:
            dummy_verify(self._password_context)
            logger.info("Authentication failed: unknown user {!r}", username)
            return None

        user, password_hash = credentials
        if not verify_password(password, password_hash, self._password_context):
            logger.info("Authentication failed: bad password for user {!r}", username)
            return None
        return user

    def create_user(self, username: str, password: str) -> User:
        """Create a user with a freshly hashed password.

        Raises:
            ValueError: if the username is invalid, the password is empty, or
                the username is already taken.
        """
        self._validate_username(username)
        if not password:
            raise ValueError("Password must not be empty")
        if self._repository.get_by_username(username) is not None:
            raise ValueError(f"User '{username}' already exists")

        user = self._repository.create(
            User(username=username), hash_password(password, self._password_context)
        )
        logger.info("Created user {!r}", username)
        return user

    def set_password(self, username: str, password: str) -> bool:
        if not password:
            raise ValueError("Password must not be empty")
        changed = self._repository.set_password_hash(
            username, hash_password(password, self._password_context)
        )
        if changed:
            logger.info("Password changed for user {!r}", username)
        return changed

    def remove_user(self, username: str) -> bool:
        removed = self._repository.delete_by_username(username)
        if removed:
            logger.info("Removed user {!r}", username)
        return removed

    def list_users(self) -> list[User]:
        return self._repository.list_all()

    def seed_users(self, seeds: Iterable[SeedUserConfig]) -> list[User]:
        """Create each configured user that does not exist yet.

        Existing users are left untouched, passwords included.
        """
        created = []
        for seed in seeds:
            if self._repository.get_by_username(seed.username) is not None:
                logger.debug("Seed user {!r} already exists", seed.username)
                continue
            created.append(self.create_user(seed.username, seed.password))
        return created

    @staticmethod
    def _validate_username(username: str) -> None:
        if not username or not username.strip():
            raise ValueError("Username must not be empty")
        if ":" in username:
            # Basic credentials split on the first colon.
            raise ValueError("Username must not contain ':'")
