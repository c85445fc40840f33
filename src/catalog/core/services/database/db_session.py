"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from src.catalog.runtime.config.config_data import DatabaseConfig
from src.catalog.runtime.context import get_config


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        Args:
            engine: Pre-built engine, used by tests to share an in-memory database.
        """
        if engine is not None:
            self._engine = engine
            return

        logger.info("Setting up database engine and session factory")
        db_config = get_config().database
        engine_kwargs = self._get_engine_kwargs(db_config)

        logger.info("Initializing database engine for {}", engine_kwargs.get("connect_args"))
        self._engine = create_engine(db_config.connection_string, **engine_kwargs)

    @staticmethod
    def _get_engine_kwargs(db_config: DatabaseConfig) -> dict:
        """Pool and driver settings for the configured database."""
        engine_kwargs: dict = {
            "echo": db_config.echo,
            "pool_pre_ping": True,
        }

        if db_config.url.startswith("sqlite"):
            # SQLite pools do not accept size/overflow settings
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,  # Sessions run on executor threads
                "timeout": 20,  # Lock timeout
            }
            if get_config().app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )
            return engine_kwargs

        engine_kwargs.update(
            {
                "pool_size": db_config.pool_size,
                "max_overflow": db_config.max_overflow,
                "pool_timeout": db_config.pool_timeout,
                "pool_recycle": db_config.pool_recycle,
            }
        )
        if "postgresql" in db_config.url:
            engine_kwargs["connect_args"] = {
                "application_name": f"{get_config().app.environment}_catalog",
                "connect_timeout": 30,
            }
        return engine_kwargs

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False, autoflush=True)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that commits on success and always closes."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed: {}: {}",
                type(e).__name__,
                e,
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
        """Release every pooled connection."""
        self._engine.dispose()
