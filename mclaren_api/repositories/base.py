"""
Data-access contract shared by every resource.

Services are written against Repository only; SqlRepository is the one
implementation and works the same on every storage provider.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """
    CRUD plus lazy querying for one entity kind.

    A missing id is not an error for ``get_by_id`` (it returns None) but is
    one for ``update`` and ``remove``, which raise NotFoundError. Constraint
    violations from ``add`` and ``update`` surface as ValidationError and
    leave the data context usable.
    """

    @abstractmethod
    async def get_all(self) -> list[T]:
        """All stored entities, possibly empty."""

    @abstractmethod
    async def get_by_id(self, id: Any) -> T | None:
        ...

    @abstractmethod
    async def add(self, entity: T) -> T:
        """
        Store ``entity`` and return it with its generated id filled in.

        Raises:
            ValidationError: a required field is null or a unique or foreign
                key constraint fails
        """

    @abstractmethod
    async def update(self, entity: T) -> T:
        """
        Write the fields set on ``entity`` over the stored row with the same id.

        Raises:
            NotFoundError: nothing is stored under that id
            ValidationError: the resulting row breaks a constraint
        """

    @abstractmethod
    async def remove(self, id: Any) -> None:
        """Delete by id, raising NotFoundError when nothing matches."""

    @abstractmethod
    def query(self, *predicates: Any) -> AsyncIterator[T]:
        """
        Deferred filter over the store.

        The statement runs when the first item is pulled, yields every match
        once and is then exhausted. Predicates are column expressions joined
        with AND.
        """

    @abstractmethod
    async def count(self, *predicates: Any) -> int:
        ...

    @abstractmethod
    async def exists(self, id: Any) -> bool:
        ...
