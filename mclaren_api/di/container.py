"""
Dependency Injection Container

Everything is registered once, at the composition root (mclaren_api.app);
request handlers only ever resolve.
"""

import logging
from collections.abc import Iterator
from typing import Any, TypeVar

from .providers import Builder, Provider
from .scopes import Scope

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Container:
    """
    Registry of service providers keyed by service type.

    Usage:
        container = Container()
        container.register_instance(AppConfig, config)
        container.register_factory(
            DataContext,
            lambda c: c.resolve(DatabaseManager).create_context(),
            scope=Scope.REQUEST,
        )
        container.register(DriversRepository, scope=Scope.REQUEST)

        async with ScopeManager.request_scope():
            drivers = container.resolve(DriversService)

    Registering a type again replaces the previous registration.
    """

    def __init__(self):
        self._providers: dict[type, Provider[Any]] = {}
        self._instances: dict[type, Any] = {}

    def register(
        self,
        service_type: type[T],
        implementation: type[T] | None = None,
        scope: Scope = Scope.SINGLETON,
    ) -> "Container":
        """
        Register a class, built by autowiring its constructor.

        Args:
            service_type: The type callers resolve
            implementation: Concrete class to build (defaults to service_type)
            scope: Service lifetime
        """
        provider = Provider.for_class(service_type, implementation or service_type, scope)
        return self._add(service_type, provider)

    def register_factory(
        self,
        service_type: type[T],
        factory: Builder,
        scope: Scope = Scope.SINGLETON,
    ) -> "Container":
        """Register a factory called with the container to build the service."""
        return self._add(service_type, Provider(service_type, factory, scope))

    def register_instance(self, service_type: type[T], instance: T) -> "Container":
        """Register an already built singleton."""
        self._providers.pop(service_type, None)
        self._instances[service_type] = instance
        logger.debug(f"Registered instance for {service_type.__name__}")
        return self

    def _add(self, service_type: type, provider: Provider[Any]) -> "Container":
        self._instances.pop(service_type, None)
        self._providers[service_type] = provider
        logger.debug(f"Registered {service_type.__name__} as {provider.scope.value}")
        return self

    def resolve(self, service_type: type[T]) -> T:
        """
        Resolve a service instance.

        Raises:
            KeyError: If the service (or one of its dependencies) is not registered
            RuntimeError: If a request-scoped service is resolved outside a request
        """
        if service_type in self._instances:
            return self._instances[service_type]

        provider = self._providers.get(service_type)
        if provider is None:
            raise KeyError(f"Service {service_type.__name__} is not registered")
        return provider.get(self)

    def try_resolve(self, service_type: type[T]) -> T | None:
        """Resolve a service, returning None if it is not registered."""
        try:
            return self.resolve(service_type)
        except KeyError:
            return None

    def registrations(self) -> Iterator[tuple[type, Scope]]:
        """Yield every registered type with its lifetime."""
        for service_type in self._instances:
            yield service_type, Scope.SINGLETON
        for service_type, provider in self._providers.items():
            yield service_type, provider.scope

    def reset(self) -> None:
        """Forget every registration and cached singleton."""
        for provider in self._providers.values():
            provider.reset()
        self._providers.clear()
        self._instances.clear()

    def __contains__(self, service_type: type) -> bool:
        return service_type in self._providers or service_type in self._instances
