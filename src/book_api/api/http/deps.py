"""FastAPI dependency implementations."""

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from book_api.api.http.app_data import ApplicationDependencies
from book_api.core.errors import Unauthorized
from book_api.core.security import parse_basic_authorization
from book_api.core.services import DbSessionService, UserManagementService
from book_api.entities.user import User


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service the application was built with."""
    return get_app_dependencies(request).database_service


def get_db_session(
    database_service: DbSessionService = Depends(get_database_service),
) -> Iterator[Session]:
    """Yield a request-scoped session; it is always closed, uncommitted work is discarded."""
    session = database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_user_management_service(
    db_session: Session = Depends(get_db_session),
) -> UserManagementService:
    return UserManagementService(db_session)


def require_basic_auth(
    request: Request,
    users: UserManagementService = Depends(get_user_management_service),
) -> User:
    """Authenticate the request with HTTP Basic credentials.

    Raises:
        Unauthorized: the header is missing or malformed, the user is unknown,
            or the password does not match. The cause is not disclosed.
    """
    credentials = parse_basic_authorization(request.headers.get("Authorization"))
    if credentials is None:
        raise Unauthorized()

    user = users.authenticate(credentials.username, credentials.password)
    if user is None:
        raise Unauthorized()
    return user
