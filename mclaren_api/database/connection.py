"""
Connection management for the selected storage backend.

This module handles engine initialization, schema creation, shutdown and
the session factory from which every request-scoped DataContext is built.
"""

import asyncio
import logging
import time

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..constants import (
    DEFAULT_HEALTH_TIMEOUT_SECONDS,
    DEFAULT_MAX_OVERFLOW,
    DEFAULT_POOL_RECYCLE_SECONDS,
    DEFAULT_POOL_SIZE,
)
from ..exceptions import InitializationError
from ..models import Base
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation
from .context import DataContext
from .providers import StorageConfiguration

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith(":"))


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Manages the engine lifecycle for the configured backend.

    One instance exists per process. It owns the connection pool; DataContext
    instances borrow sessions from it and give them back when disposed.
    """

    def __init__(
        self,
        storage: StorageConfiguration,
        pool_size: int = DEFAULT_POOL_SIZE,
        max_overflow: int = DEFAULT_MAX_OVERFLOW,
        echo: bool = False,
    ) -> None:
        """
        Initialize the database manager.

        Args:
            storage: Selected storage configuration
            pool_size: Connection pool size (ignored for SQLite)
            max_overflow: Connections allowed above pool_size (ignored for SQLite)
            echo: Log every SQL statement
        """
        self.storage = storage
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.echo = echo

        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._initialized: bool = False

    def _engine_options(self) -> dict:
        url = self.storage.url
        if self.storage.is_embedded:
            options: dict = {"connect_args": {"check_same_thread": False}}
            if _is_memory_sqlite(url):
                # Every session must see the same in-memory database
                options["poolclass"] = StaticPool
            return options
        return {
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_recycle": DEFAULT_POOL_RECYCLE_SECONDS,
            "pool_pre_ping": True,
        }

    async def initialize(self) -> None:
        """
        Create the engine and verify connectivity.

        Raises:
            InitializationError: If the backend cannot be reached
        """
        start_time = time.time()

        if self._initialized:
            logger.warning("DatabaseManager already initialized. Skipping re-initialization.")
            return

        contextual_logger.info(
            "Initializing database connection",
            extra={
                "provider": self.storage.provider.value,
                "url": self.storage.safe_url,
            },
        )

        try:
            self._engine = create_async_engine(
                self.storage.url, echo=self.echo, **self._engine_options()
            )
            if self._engine.dialect.name == "sqlite":
                event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            self._session_factory = async_sessionmaker(
                self._engine, expire_on_commit=False, autoflush=False
            )
            self._initialized = True
            duration_ms = (time.time() - start_time) * 1000
            record_operation("database.initialize", duration_ms, success=True)
            contextual_logger.info(
                "Database connection initialized successfully",
                extra={
                    "provider": self.storage.provider.value,
                    "duration_ms": round(duration_ms, 2),
                },
            )
        except (SQLAlchemyError, OSError, ImportError) as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation("database.initialize", duration_ms, success=False)
            contextual_logger.critical(
                "Database connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            if self._engine is not None:
                await self._engine.dispose()
                self._engine = None
            raise InitializationError(
                f"Failed to connect to database: {e}",
                provider=self.storage.provider.value,
                context={"error_type": type(e).__name__, "url": self.storage.safe_url},
            ) from e

    async def create_schema(self) -> None:
        """Create any missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def drop_schema(self) -> None:
        """Drop every table (used by tests and `init-db --reset`)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database schema dropped")

    async def shutdown(self) -> None:
        """
        Dispose the engine and its pool.

        This method is idempotent - it's safe to call multiple times.
        """
        if not self._initialized:
            return

        contextual_logger.info("Shutting down database connection...")
        if self._engine is not None:
            await self._engine.dispose()

        self._initialized = False
        self._engine = None
        self._session_factory = None
        contextual_logger.info("Database connection shutdown complete")

    async def ping(self, timeout_seconds: float = DEFAULT_HEALTH_TIMEOUT_SECONDS) -> bool:
        """Run a trivial query against the backend."""

        async def _ping() -> None:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        await asyncio.wait_for(_ping(), timeout=timeout_seconds)
        return True

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("DatabaseManager is not initialized. Call initialize() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("DatabaseManager is not initialized. Call initialize() first.")
        return self._session_factory

    def create_context(self) -> DataContext:
        """Create a new DataContext bound to this backend."""
        return DataContext(self.session_factory)
