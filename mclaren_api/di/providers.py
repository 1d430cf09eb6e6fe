"""
Service Providers for Dependency Injection

A Provider pairs a builder with a lifetime. Builders take the container so
they can resolve their own dependencies; classes registered without a
factory get a builder that autowires their constructor.
"""

import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .scopes import Scope, ScopeManager

if TYPE_CHECKING:
    from .container import Container

logger = logging.getLogger(__name__)

T = TypeVar("T")

Builder = Callable[["Container"], T]

# Annotations the container never tries to resolve
_VALUE_TYPES = (str, int, float, bool, bytes)


def autowire(service_type: type, implementation: type) -> Builder:
    """
    Build ``implementation`` by resolving its class-annotated constructor
    parameters from the container.

    Parameters annotated with unions, generics or value types are left to
    their defaults. A required parameter whose type is not registered fails
    with KeyError naming the service being built.
    """
    parameters = list(inspect.signature(implementation).parameters.values())

    def build(container: "Container") -> Any:
        kwargs: dict[str, Any] = {}
        for param in parameters:
            annotation = param.annotation
            if not isinstance(annotation, type) or annotation in _VALUE_TYPES:
                continue
            if annotation in container:
                kwargs[param.name] = container.resolve(annotation)
            elif param.default is inspect.Parameter.empty:
                raise KeyError(
                    f"Cannot build {service_type.__name__}: dependency "
                    f"{annotation.__name__} for parameter '{param.name}' is not registered"
                )
        return implementation(**kwargs)

    return build


class Provider(Generic[T]):
    """
    Creates instances of one service type according to its Scope.

    - SINGLETON: built on first resolve, then cached on the provider
    - REQUEST: cached in the active request scope (see ScopeManager)
    - TRANSIENT: built on every resolve
    """

    def __init__(self, service_type: type[T], build: Builder, scope: Scope):
        self.service_type = service_type
        self.scope = scope
        self._build = build
        self._instance: T | None = None

    @classmethod
    def for_class(
        cls, service_type: type[T], implementation: type[T], scope: Scope
    ) -> "Provider[T]":
        return cls(service_type, autowire(service_type, implementation), scope)

    def get(self, container: "Container") -> T:
        if self.scope is Scope.REQUEST:
            return ScopeManager.get_or_create(self.service_type, lambda: self._build(container))

        if self.scope is Scope.TRANSIENT:
            return self._build(container)

        if self._instance is None:
            self._instance = self._build(container)
            logger.debug(f"Created singleton: {self.service_type.__name__}")
        return self._instance

    def reset(self) -> None:
        """Drop a cached singleton."""
        self._instance = None


__all__ = ["Builder", "Provider", "autowire"]
