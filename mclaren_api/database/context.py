"""
Data Context

Owns one AsyncSession for the lifetime of a request scope. Repositories hold
a reference to the context and go through it for every read and write; they
never create or close sessions themselves.
"""

import logging
from typing import Any, Generic, TypeVar

from sqlalchemy import exists, inspect, select
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import Executable, Select

from ..models import Car, Driver, GrandPrix

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntitySet(Generic[T]):
    """
    Typed accessor for one entity kind inside a DataContext.

    Usage:
        drivers = context.set(Driver)
        stmt = drivers.select(Driver.team == "McLaren")
        driver = await drivers.find(1)
    """

    def __init__(self, context: "DataContext", model: type[T]):
        self._context = context
        self.model = model

    @property
    def primary_key(self) -> Any:
        return inspect(self.model).primary_key[0]

    def select(self, *predicates: Any) -> Select:
        """
        Build a SELECT over this entity kind filtered by predicates.

        Rows overwrite entities already held by the session, relationships
        included, so results reflect the committed state.
        """
        stmt = select(self.model).execution_options(populate_existing=True)
        if predicates:
            stmt = stmt.where(*predicates)
        return stmt.order_by(self.primary_key)

    async def find(self, id: Any) -> T | None:
        """Load an entity by primary key (None if absent)."""
        return await self._context.session.get(self.model, id, populate_existing=True)

    async def contains(self, id: Any) -> bool:
        """Check for a stored row without loading or refreshing any entity."""
        stmt = select(exists().where(self.primary_key == id))
        result = await self._context.session.execute(stmt)
        return bool(result.scalar())

    def add(self, entity: T) -> None:
        """Stage a new entity; it is written on the next save_changes()."""
        self._context.session.add(entity)

    async def remove(self, entity: T) -> None:
        """Stage a deletion; it is written on the next save_changes()."""
        await self._context.session.delete(entity)


class DataContext:
    """
    Request-scoped unit through which all entity reads and writes occur.

    The session is opened lazily on first use, so a request that never touches
    the database never checks a connection out of the pool.

    Usage:
        async with manager.create_context() as ctx:
            ctx.drivers.add(Driver(name="Lando"))
            await ctx.save_changes()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self._sets: dict[type, EntitySet] = {}
        self._disposed = False

    @property
    def session(self) -> AsyncSession:
        if self._disposed:
            raise RuntimeError("DataContext has been disposed")
        if self._session is None:
            self._session = self._session_factory()
            logger.debug("DataContext session opened")
        return self._session

    def set(self, model: type[T]) -> EntitySet[T]:
        """Get the typed accessor for an entity kind."""
        if model not in self._sets:
            self._sets[model] = EntitySet(self, model)
        return self._sets[model]

    @property
    def grand_prixes(self) -> EntitySet[GrandPrix]:
        return self.set(GrandPrix)

    @property
    def cars(self) -> EntitySet[Car]:
        return self.set(Car)

    @property
    def drivers(self) -> EntitySet[Driver]:
        return self.set(Driver)

    async def execute(self, statement: Executable) -> Result:
        return await self.session.execute(statement)

    async def flush(self) -> None:
        await self.session.flush()

    async def save_changes(self) -> None:
        """Commit every staged change."""
        await self.session.commit()

    async def rollback(self) -> None:
        if self._session is not None:
            await self._session.rollback()

    async def merge(self, entity: T) -> T:
        return await self.session.merge(entity)

    async def reload(self, entity: T) -> T:
        """
        Re-read an entity and its eagerly loaded relationships.

        Used after a commit so that relationships assigned by foreign key
        (e.g. ``car_id``) are populated before serialization.
        """
        model = type(entity)
        pk = inspect(model).primary_key[0]
        identity = inspect(entity).identity
        if identity is None:
            return entity
        stmt = (
            select(model)
            .where(pk == identity[0])
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().one()

    async def dispose(self) -> None:
        """
        Close the session and release its connection back to the pool.

        Called automatically at the end of a request scope.
        """
        if self._disposed:
            return
        self._disposed = True
        self._sets.clear()
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug("DataContext disposed")

    async def __aenter__(self) -> "DataContext":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.dispose()
        return False
