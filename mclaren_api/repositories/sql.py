"""
SQL Repository Implementation

Implements the Repository interface once, generically, over a DataContext.
Every resource repository reuses this class unchanged; only resource-specific
queries are added in subclasses.
"""

import logging
import re
import time
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any, Generic, TypeVar

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..database.context import DataContext
from ..exceptions import NotFoundError, StorageError, ValidationError
from ..observability import record_operation
from .base import Repository

logger = logging.getLogger(__name__)

T = TypeVar("T")

# sqlite: "UNIQUE constraint failed: drivers.number"
_SQLITE_CONSTRAINT = re.compile(r"constraint failed: ([\w.]+(?:, [\w.]+)*)")
# postgresql: "Key (number)=(4) already exists."
_POSTGRES_KEY = re.compile(r"Key \(([^)]+)\)=")

# Integer keys are signed 64-bit on every supported backend
MIN_ID, MAX_ID = -(2**63), 2**63 - 1


def constraint_fields(error: IntegrityError) -> list[str]:
    """Best-effort extraction of the columns named in a constraint violation."""
    message = str(error.orig) if error.orig is not None else str(error)

    match = _SQLITE_CONSTRAINT.search(message)
    if match:
        return [part.split(".")[-1] for part in match.group(1).split(", ")]

    match = _POSTGRES_KEY.search(message)
    if match:
        return [part.strip() for part in match.group(1).split(",")]

    return []


class SqlRepository(Repository[T], Generic[T]):
    """
    SQLAlchemy implementation of the Repository interface.

    Each mutating call commits exactly once through the bound DataContext and
    rolls back on failure. Backend exceptions are translated to
    ValidationError (constraint violations) or StorageError (anything else).

    Example:
        async with manager.create_context() as ctx:
            repo = SqlRepository(ctx, Driver)
            driver = await repo.add(Driver(name="Lando"))
            same = await repo.get_by_id(driver.id)
    """

    def __init__(self, context: DataContext, model: type[T]):
        """
        Initialize the repository.

        Args:
            context: Request-scoped DataContext (referenced, never owned)
            model: Mapped entity class
        """
        self._context = context
        self.model = model
        self._set = context.set(model)

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    async def get_all(self) -> list[T]:
        result = await self._run("get_all", self._context.execute(self._set.select()))
        return list(result.scalars().all())

    async def get_by_id(self, id: Any) -> T | None:
        if not _storable_id(id):
            return None
        return await self._run("get_by_id", self._set.find(id))

    async def add(self, entity: T) -> T:
        self._validate_required(entity)
        self._set.add(entity)
        await self._commit("add")
        logger.debug(f"Added {self.entity_name} {self._identity_of(entity)}")
        return await self._context.reload(entity)

    async def update(self, entity: T) -> T:
        entity_id = self._identity_of(entity)
        if entity_id is None:
            raise ValidationError(
                f"{self.entity_name} id is required for update",
                field_errors=[{"field": "id", "message": "Field is required."}],
            )

        if not await self.exists(entity_id):
            raise NotFoundError(self.entity_name, entity_id)

        # Nothing reaches the session until the incoming fields pass validation
        self._validate_required(entity, assigned_only=True)
        merged = await self._context.merge(entity)
        await self._commit("update")
        logger.debug(f"Updated {self.entity_name} {entity_id}")
        return await self._context.reload(merged)

    async def remove(self, id: Any) -> None:
        existing = await self.get_by_id(id)
        if existing is None:
            raise NotFoundError(self.entity_name, id)

        await self._set.remove(existing)
        await self._commit("remove")
        logger.debug(f"Removed {self.entity_name} {id}")

    async def query(self, *predicates: Any) -> AsyncIterator[T]:
        result = await self._run("query", self._context.execute(self._set.select(*predicates)))
        for entity in result.scalars():
            yield entity

    async def first(self, *predicates: Any) -> T | None:
        """First entity matching the predicates, in id order (None if no match)."""
        async with aclosing(self.query(*predicates)) as results:
            async for entity in results:
                return entity
        return None

    async def count(self, *predicates: Any) -> int:
        stmt = select(func.count()).select_from(self.model)
        if predicates:
            stmt = stmt.where(*predicates)
        result = await self._run("count", self._context.execute(stmt))
        return int(result.scalar_one())

    async def exists(self, id: Any) -> bool:
        if not _storable_id(id):
            return False
        return await self._run("exists", self._set.contains(id))

    def _identity_of(self, entity: T) -> Any:
        pk = inspect(self.model).primary_key[0]
        return getattr(entity, pk.key)

    def _validate_required(self, entity: T, assigned_only: bool = False) -> None:
        """
        Reject entities missing a non-nullable column that has no default.

        With ``assigned_only`` only attributes present on the instance are
        checked, so a partial update may leave required fields unset.
        """
        values = inspect(entity).dict
        errors = []
        for prop in inspect(self.model).column_attrs:
            column = prop.columns[0]
            if column.primary_key or column.nullable:
                continue
            if column.default is not None or column.server_default is not None:
                continue
            if assigned_only and prop.key not in values:
                continue
            if values.get(prop.key) is None:
                errors.append({"field": prop.key, "message": "Field is required."})

        if errors:
            raise ValidationError(f"{self.entity_name} is missing required fields", errors)

    async def _run(self, operation: str, awaitable: Any) -> Any:
        start_time = time.time()
        success = True
        try:
            return await awaitable
        except SQLAlchemyError as e:
            success = False
            raise StorageError(
                f"Storage failure during {operation} of {self.entity_name}",
                context={"operation": operation, "entity": self.entity_name},
            ) from e
        finally:
            duration_ms = (time.time() - start_time) * 1000
            record_operation(
                f"repository.{operation}", duration_ms, success, entity=self.entity_name
            )

    async def _commit(self, operation: str) -> None:
        start_time = time.time()
        success = False
        try:
            await self._context.save_changes()
            success = True
        except IntegrityError as e:
            await self._context.rollback()
            fields = constraint_fields(e)
            raise ValidationError(
                f"{self.entity_name} violates a storage constraint",
                field_errors=[
                    {"field": name, "message": "Value violates a constraint."} for name in fields
                ],
                context={"operation": operation, "entity": self.entity_name},
            ) from e
        except SQLAlchemyError as e:
            await self._context.rollback()
            raise StorageError(
                f"Storage failure during {operation} of {self.entity_name}",
                context={"operation": operation, "entity": self.entity_name},
            ) from e
        finally:
            duration_ms = (time.time() - start_time) * 1000
            record_operation(
                f"repository.{operation}", duration_ms, success, entity=self.entity_name
            )


def _storable_id(id: Any) -> bool:
    """False for integers no backend can hold; such ids never match a row."""
    return not isinstance(id, int) or MIN_ID <= id <= MAX_ID
