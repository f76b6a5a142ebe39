from .database.db_session import DbSessionService
from .database.migrations import MIGRATIONS, Migration, MigrationRunner, MigrationStatus
from .user.user_management import UserManagementService

__all__ = [
    "DbSessionService",
    "MIGRATIONS",
    "Migration",
    "MigrationRunner",
    "MigrationStatus",
    "UserManagementService",
]
