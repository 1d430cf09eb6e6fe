"""
Service lifetimes and the per-request instance cache.

The request cache lives in a ContextVar, so concurrent requests served by the
same event loop never see each other's DataContext.
"""

import inspect
import logging
from collections.abc import Callable
from contextvars import ContextVar
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

_request_scope: ContextVar[dict[type, Any] | None] = ContextVar("request_scope", default=None)

# Failures of dispose() that are logged instead of failing the response
_DISPOSE_ERRORS = (AttributeError, RuntimeError, TypeError, OSError, SQLAlchemyError)


class Scope(Enum):
    """
    Service lifetimes.

    SINGLETON is used for AppConfig, DatabaseManager and LogService; REQUEST
    for the DataContext and everything built on it; TRANSIENT is available
    for stateless helpers.
    """

    SINGLETON = "singleton"
    REQUEST = "request"
    TRANSIENT = "transient"


class ScopeManager:
    """
    Opens and closes request scopes.

    RequestScopeMiddleware wraps every request in ``request_scope()``;
    instances created inside are disposed, newest first, when it exits.
    """

    @classmethod
    def begin_request(cls) -> dict[type, Any]:
        instances: dict[type, Any] = {}
        _request_scope.set(instances)
        return instances

    @classmethod
    async def end_request(cls) -> None:
        """
        Dispose every instance of the current scope and close it.

        ``dispose()`` may be sync or async; DataContext closes its
        AsyncSession this way.
        """
        instances = _request_scope.get() or {}
        for instance in reversed(list(instances.values())):
            await cls._dispose(instance)
        instances.clear()
        _request_scope.set(None)

    @staticmethod
    async def _dispose(instance: Any) -> None:
        dispose = getattr(instance, "dispose", None)
        if not callable(dispose):
            return
        try:
            result = dispose()
            if inspect.isawaitable(result):
                await result
        except _DISPOSE_ERRORS as e:
            logger.warning(f"Error disposing {type(instance).__name__}: {e}")

    @classmethod
    def get_request_scope(cls) -> dict[type, Any] | None:
        return _request_scope.get()

    @classmethod
    def get_or_create(cls, key: type, factory: Callable[[], Any]) -> Any:
        """
        Return the scope's instance for ``key``, building it on first use.

        Raises:
            RuntimeError: If no request scope is active
        """
        instances = _request_scope.get()
        if instances is None:
            raise RuntimeError(
                f"No active request scope while resolving {key.__name__}; "
                "request-scoped services are only available inside request_scope()"
            )
        if key not in instances:
            instances[key] = factory()
        return instances[key]

    @classmethod
    def request_scope(cls) -> "_RequestScopeContext":
        """
        Async context manager around one request.

        Usage:
            async with ScopeManager.request_scope():
                service = container.resolve(DriversService)
        """
        return _RequestScopeContext()


class _RequestScopeContext:
    async def __aenter__(self) -> "_RequestScopeContext":
        ScopeManager.begin_request()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await ScopeManager.end_request()
        return False
