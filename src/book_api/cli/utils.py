"""Shared helpers for CLI commands."""

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from sqlmodel import Session

from book_api.core.errors import MigrationError
from book_api.core.services import DbSessionService, MigrationRunner
from book_api.runtime.context import get_config

console = Console()


def get_database_service(apply_migrations: bool = False) -> DbSessionService:
    """Database service for the configuration in the current context.

    With ``apply_migrations`` the schema is brought up to date first, unless
    ``database.auto_migrate`` is disabled. The engine is disposed again if
    that fails.
    """
    config = get_config()
    database_service = DbSessionService(config.database, config.app.environment)
    if apply_migrations and config.database.auto_migrate:
        try:
            MigrationRunner(database_service.engine).apply_all()
        except MigrationError:
            database_service.dispose()
            raise
    return database_service


@contextmanager
def migrated_session() -> Iterator[Session]:
    """Yield a committing session on an up-to-date schema.

    A failed migration is reported and exits with code 1.
    """
    try:
        database_service = get_database_service(apply_migrations=True)
    except MigrationError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e

    try:
        with database_service.session_scope() as session:
            yield session
    finally:
        database_service.dispose()
