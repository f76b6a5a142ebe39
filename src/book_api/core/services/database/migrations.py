"""Versioned schema migrations.

Every migration is a plain record with ``apply`` and ``revert`` callables that
receive an open connection. :class:`MigrationRunner` applies them in version
order and records each one in the ``schema_migrations`` ledger table inside
the same transaction as its DDL.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

import sqlalchemy as sa
from loguru import logger
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from book_api.core.errors import MigrationError

LEDGER_TABLE = "schema_migrations"


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    apply: Callable[[Connection], None]
    revert: Callable[[Connection], None]

    @property
    def label(self) -> str:
        return f"{self.version:04d}_{self.name}"


@dataclass(frozen=True)
class MigrationStatus:
    migration: Migration
    applied_at: datetime | None

    @property
    def applied(self) -> bool:
        return self.applied_at is not None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column(
            "updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
    ]


def _users_table(metadata: sa.MetaData) -> sa.Table:
    return sa.Table(
        "users",
        metadata,
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )


def _books_table(metadata: sa.MetaData) -> sa.Table:
    return sa.Table(
        "books",
        metadata,
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        *_timestamps(),
    )


def create_users(connection: Connection) -> None:
    _users_table(sa.MetaData()).create(connection, checkfirst=True)


def drop_users(connection: Connection) -> None:
    _users_table(sa.MetaData()).drop(connection, checkfirst=True)


def create_books(connection: Connection) -> None:
    _books_table(sa.MetaData()).create(connection, checkfirst=True)


def drop_books(connection: Connection) -> None:
    _books_table(sa.MetaData()).drop(connection, checkfirst=True)


# Users before books. Nothing enforces it, but the order is part of the contract.
MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "create_users", apply=create_users, revert=drop_users),
    Migration(2, "create_books", apply=create_books, revert=drop_books),
)


_ledger_metadata = sa.MetaData()
_ledger = sa.Table(
    LEDGER_TABLE,
    _ledger_metadata,
    sa.Column("version", sa.Integer(), primary_key=True, autoincrement=False),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("applied_at", sa.DateTime(), nullable=False),
)


class MigrationRunner:
    """Applies and reverts :data:`MIGRATIONS` against an engine."""

    def __init__(self, engine: Engine, migrations: Sequence[Migration] = MIGRATIONS):
        versions = [m.version for m in migrations]
        if len(set(versions)) != len(versions):
            raise ValueError("Migration versions must be unique")
        self._engine = engine
        self._migrations = sorted(migrations, key=lambda m: m.version)

    @property
    def migrations(self) -> list[Migration]:
        return list(self._migrations)

    def _ensure_ledger(self) -> None:
        try:
            with self._engine.begin() as connection:
                _ledger.create(connection, checkfirst=True)
        except SQLAlchemyError as e:
            raise MigrationError(0, LEDGER_TABLE, e) from e

    def applied(self) -> dict[int, datetime]:
        """Map of applied version to the time it was applied."""
        self._ensure_ledger()
        with self._engine.connect() as connection:
            rows = connection.execute(
                sa.select(_ledger.c.version, _ledger.c.applied_at)
            ).all()
        return {version: applied_at for version, applied_at in rows}

    def pending(self) -> list[Migration]:
        applied = self.applied()
        return [m for m in self._migrations if m.version not in applied]

    def status(self) -> list[MigrationStatus]:
        applied = self.applied()
        return [MigrationStatus(m, applied.get(m.version)) for m in self._migrations]

    def apply_all(self) -> list[Migration]:
        """Apply every pending migration in ascending version order.

        Returns the migrations that were applied; an up-to-date schema yields
        an empty list.
        """
        done = []
        for migration in self.pending():
            logger.info("Applying migration {}", migration.label)
            try:
                with self._engine.begin() as connection:
                    migration.apply(connection)
                    connection.execute(
                        _ledger.insert().values(
                            version=migration.version,
                            name=migration.name,
                            applied_at=datetime.now(UTC),
                        )
                    )
            except SQLAlchemyError as e:
                logger.error("Migration {} failed: {}", migration.label, e)
                raise MigrationError(migration.version, migration.name, e) from e
            done.append(migration)

        if done:
            logger.info("Applied {} migration(s)", len(done))
        else:
            logger.info("Database schema is up to date")
        return done

    def revert(self, steps: int = 1) -> list[Migration]:
        """Revert the ``steps`` most recently applied migrations, newest first."""
        if steps < 1:
            raise ValueError("steps must be at least 1")

        applied = self.applied()
        targets = [m for m in reversed(self._migrations) if m.version in applied][:steps]
        for migration in targets:
            logger.info("Reverting migration {}", migration.label)
            try:
                with self._engine.begin() as connection:
                    migration.revert(connection)
                    connection.execute(
                        _ledger.delete().where(_ledger.c.version == migration.version)
                    )
            except SQLAlchemyError as e:
                logger.error("Reverting migration {} failed: {}", migration.label, e)
                raise MigrationError(migration.version, migration.name, e) from e
        return targets

    def revert_all(self) -> list[Migration]:
        return self.revert(steps=len(self._migrations)) if self._migrations else []
