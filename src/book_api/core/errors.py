"""Client-facing error taxonomy.

Each error carries the HTTP status it maps to. The application installs a
single handler for ``BookApiError`` that renders them.
"""


class BookApiError(Exception):
    status_code: int = 500
    default_reason: str = "Internal Server Error"

    def __init__(self, reason: str | None = None):
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class Unauthorized(BookApiError):
    """Credentials missing, malformed, or rejected. Rendered without a body."""

    status_code = 401
    default_reason = "Unauthorized"


class BadRequest(BookApiError):
    status_code = 400
    default_reason = "Bad Request"


class NotFound(BookApiError):
    status_code = 404
    default_reason = "Not Found"


class MigrationError(RuntimeError):
    """A schema migration could not be applied or reverted."""

    def __init__(self, version: int, name: str, cause: Exception):
        self.version = version
        self.name = name
        super().__init__(f"Migration {version:04d}_{name} failed: {cause}")
