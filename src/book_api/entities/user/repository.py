from sqlmodel import Session, select

from book_api.entities.user.entity import User
from book_api.entities.user.table import UserTable


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_username(self, username: str) -> User | None:
        row = self._get_row_by_username(username)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_credentials(self, username: str) -> tuple[User, str] | None:
        """Return the user together with its stored password hash."""
        row = self._get_row_by_username(username)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True), row.password_hash

    def list_all(self) -> list[User]:
        rows = self._session.exec(select(UserTable).order_by(UserTable.username)).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]

    def create(self, user: User, password_hash: str) -> User:
        row = UserTable(id=user.id, username=user.username, password_hash=password_hash)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def set_password_hash(self, username: str, password_hash: str) -> bool:
        row = self._get_row_by_username(username)
        if row is None:
            return False
        row.password_hash = password_hash
        self._session.add(row)
        self._session.flush()
        return True

    def delete_by_username(self, username: str) -> bool:
        row = self._get_row_by_username(username)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def _get_row_by_username(self, username: str) -> UserTable | None:
        statement = select(UserTable).where(UserTable.username == username)
        return self._session.exec(statement).first()
