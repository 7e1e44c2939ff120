"""
Database connection and session management module.
Provides the SQLAlchemy engine, session factory and the request-scoped
session dependency.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from todo_api.config import Settings
from todo_api.models import Base

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Raised when the database cannot be reached at startup."""


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Owns the engine and session factory for one application instance.

    Sessions are handed out through ``session()``; each one is rolled back
    on error and always closed, so a request never leaks a connection.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._initialized = False

    def _create_engine(self) -> Engine:
        url = self._settings.DATABASE_URL
        options: Dict[str, Any] = {
            "echo": self._settings.DB_ECHO,
            "pool_pre_ping": self._settings.DB_POOL_PRE_PING,
        }

        is_sqlite = url.startswith("sqlite")
        if is_sqlite:
            options["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every checkout sees an empty database
                options["poolclass"] = StaticPool

        engine = create_engine(url, **options)
        if is_sqlite:
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        logger.info(f"Creating database engine for {engine.url.render_as_string(hide_password=True)}")
        return engine

    def initialize(self) -> None:
        """Create the engine, verify connectivity and create missing tables."""
        if self._initialized:
            return

        try:
            self._engine = self._create_engine()
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            Base.metadata.create_all(bind=self._engine)

            self._session_factory = sessionmaker(
                bind=self._engine,
                autoflush=False,
                expire_on_commit=False,
            )
            self._initialized = True
            logger.info("Database connection initialized successfully")
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize database: {e}")
            raise DatabaseConnectionError(f"Database initialization failed: {e}") from e

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Get a database session scoped to the caller.

        Usage:
            with database.session() as session:
                session.add(obj)
                session.commit()
        """
        if not self._initialized:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session_instance: Session = self._session_factory()
        start_time = time.perf_counter()
        try:
            yield session_instance
        except SQLAlchemyError as e:
            session_instance.rollback()
            logger.error(f"Database session error: {e}")
            raise
        except Exception:
            session_instance.rollback()
            raise
        finally:
            session_instance.close()
            logger.debug(f"Session closed after {time.perf_counter() - start_time:.3f}s")

    def is_healthy(self) -> bool:
        """Run a trivial query; used by the readiness check."""
        if not self._initialized:
            return False
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if not self._initialized:
            return
        self._engine.dispose()
        self._initialized = False
        self._engine = None
        self._session_factory = None
        logger.info("Database connections closed")


def get_db(request: Request) -> Iterator[Session]:
    """
    FastAPI dependency for getting a request-scoped database session.

    Usage in FastAPI routes:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...
    """
    database: DatabaseManager = request.app.state.database
    with database.session() as session:
        yield session


__all__ = [
    "DatabaseManager",
    "DatabaseConnectionError",
    "get_db",
]
