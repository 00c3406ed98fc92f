"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlmodel import Session, SQLModel, create_engine

from src.legacy_bridge.runtime.config.config_data import DatabaseConfig
from src.legacy_bridge.runtime.context import get_config


class DbSessionService:
    def __init__(self, db_config: DatabaseConfig | None = None):
        """Initialize the shared database engine and session factory."""
        main_config = get_config()
        self._config = db_config or main_config.database

        logger.info("Configuring database engine for environment: {}", main_config.app.environment)
        self._engine = create_engine(self._config.url, **self._engine_kwargs(main_config.app.is_production))

    def _engine_kwargs(self, production: bool) -> dict[str, Any]:
        if self._config.is_sqlite:
            if production:
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )
            kwargs: dict[str, Any] = {
                "echo": False,
                "connect_args": {"check_same_thread": False, "timeout": 20},
            }
            if ":memory:" in self._config.url:
                # Every session must see the same in-memory database
                kwargs["poolclass"] = StaticPool
            return kwargs

        return {
            "echo": False,
            "pool_size": self._config.pool_size,
            "max_overflow": self._config.max_overflow,
            "pool_timeout": self._config.pool_timeout,
            "pool_recycle": self._config.pool_recycle,
            "pool_pre_ping": True,
        }

    @property
    def engine(self):
        return self._engine

    def create_all(self) -> None:
        """Create all database tables."""
        from src.legacy_bridge.entities.core.local_user import (  # noqa: F401
            LocalCredentialTable,
            LocalUserTable,
        )

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
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
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
