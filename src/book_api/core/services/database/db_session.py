"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from book_api.runtime.config.config_data import DatabaseConfig
from book_api.runtime.context import get_config


class DbSessionService:
    def __init__(
        self,
        db_config: DatabaseConfig | None = None,
        environment: str | None = None,
    ):
        """Create the shared database engine.

        Args:
            db_config: Database settings; defaults to the current context's.
            environment: Application environment, used for log messages and
                production warnings.
        """
        main_config = get_config()
        self._db_config = db_config or main_config.database
        self._environment = environment or main_config.app.environment

        logger.info("Configuring database engine for environment: {}", self._environment)
        engine_kwargs = self._get_engine_kwargs()
        self._engine = create_engine(self._db_config.connection_string, **engine_kwargs)
        logger.info("Database engine initialized for {}", self._engine.url)

    def _get_engine_kwargs(self) -> dict[str, Any]:
        engine_kwargs: dict[str, Any] = {
            "echo": self._db_config.echo,
            "pool_pre_ping": True,
            "connect_args": self._get_connect_args(),
        }

        if self._db_config.is_sqlite:
            if self._is_in_memory():
                # Every session must see the same in-memory database.
                engine_kwargs["poolclass"] = StaticPool
            if self._environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider MySQL or PostgreSQL."
                )
        else:
            engine_kwargs.update(
                {
                    "pool_size": self._db_config.pool_size,
                    "max_overflow": self._db_config.max_overflow,
                    "pool_timeout": self._db_config.pool_timeout,
                    "pool_recycle": self._db_config.pool_recycle,
                }
            )
        return engine_kwargs

    def _is_in_memory(self) -> bool:
        return make_url(self._db_config.url).database in (None, "", ":memory:")

    def _get_connect_args(self) -> dict[str, Any]:
        """Get database-specific connection arguments."""
        if self._db_config.is_sqlite:
            return {
                "check_same_thread": False,  # sessions are used from the server's thread pool
                "timeout": 20,  # lock timeout
            }
        if "mysql" in self._db_config.url:
            return {"connect_timeout": 30}
        if "postgresql" in self._db_config.url:
            return {"connect_timeout": 30, "application_name": f"{self._environment}_book_api"}
        return {}

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed: {}: {}", type(e).__name__, e
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error("Database health check failed: {}: {}", type(e).__name__, e)
            return False

    def dispose(self) -> None:
        """Close every pooled connection."""
        logger.info("Disposing database engine")
        self._engine.dispose()
