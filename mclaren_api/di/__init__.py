"""
McLaren API Dependency Injection Module

DI container with explicit service lifetimes:
- SINGLETON: One instance per application lifetime
- REQUEST: One instance per HTTP request
- TRANSIENT: New instance on every injection

Usage:
    from mclaren_api.di import Container, Scope

    container = Container()
    container.register(LogService, scope=Scope.SINGLETON)
    container.register(DriversService, scope=Scope.REQUEST)

    # In FastAPI routes
    @router.get("")
    async def list_drivers(service: DriversService = Depends(inject(DriversService))):
        return await service.list_drivers()
"""

from .container import Container
from .providers import Provider, autowire
from .scopes import Scope, ScopeManager

__all__ = [
    "Container",
    "Provider",
    "Scope",
    "ScopeManager",
    "autowire",
]
