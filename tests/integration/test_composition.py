"""
Integration tests for the composition root.

Tests service lifetimes across request scopes and disposal of the
request-scoped DataContext.
"""

import pytest
import pytest_asyncio

from mclaren_api.app import build_container
from mclaren_api.authorization import AllowAllPolicy, AuthorizationPolicy
from mclaren_api.config import AppConfig
from mclaren_api.database import DatabaseManager, DataContext
from mclaren_api.di import Scope, ScopeManager
from mclaren_api.observability import LogService
from mclaren_api.repositories import DriversRepository
from mclaren_api.services import CarsService, DriversService


@pytest.fixture
def container(app_config, memory_storage):
    return build_container(app_config, memory_storage)


@pytest_asyncio.fixture
async def started(container):
    """Container whose DatabaseManager is initialized with the schema created."""
    database = container.resolve(DatabaseManager)
    await database.initialize()
    await database.create_schema()
    yield container
    await database.shutdown()


class TestRegistrations:
    def test_lifetimes(self, container):
        lifetimes = dict(container.registrations())

        assert lifetimes[DatabaseManager] == Scope.SINGLETON
        assert lifetimes[AuthorizationPolicy] == Scope.SINGLETON
        assert lifetimes[DataContext] == Scope.REQUEST
        assert lifetimes[DriversRepository] == Scope.REQUEST
        assert lifetimes[DriversService] == Scope.REQUEST

    def test_singletons(self, container, app_config):
        assert container.resolve(AppConfig) is app_config
        assert container.resolve(DatabaseManager) is container.resolve(DatabaseManager)
        assert isinstance(container.resolve(AuthorizationPolicy), AllowAllPolicy)
        assert isinstance(container.resolve(LogService), LogService)

    def test_request_services_need_a_scope(self, container):
        with pytest.raises(RuntimeError, match="No active request scope"):
            container.resolve(DriversService)


class TestRequestScope:
    @pytest.mark.asyncio
    async def test_services_share_one_context_per_request(self, started):
        container = started
        async with ScopeManager.request_scope():
            drivers = container.resolve(DriversService)
            cars = container.resolve(CarsService)
            context = container.resolve(DataContext)

            assert drivers._drivers._context is context
            assert cars._cars._context is context
            assert container.resolve(DriversService) is drivers

    @pytest.mark.asyncio
    async def test_each_request_gets_its_own_context(self, started):
        container = started
        async with ScopeManager.request_scope():
            first = container.resolve(DataContext)
        async with ScopeManager.request_scope():
            second = container.resolve(DataContext)

        assert first is not second

    @pytest.mark.asyncio
    async def test_context_disposed_with_scope(self, started):
        async with ScopeManager.request_scope():
            context = started.resolve(DataContext)
            repository = started.resolve(DriversRepository)
            assert await repository.count() == 0

        with pytest.raises(RuntimeError, match="disposed"):
            context.session
