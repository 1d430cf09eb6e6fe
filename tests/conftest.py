"""
Pytest configuration and shared fixtures for McLaren API tests.

This module provides:
- In-memory SQLite DatabaseManager / DataContext fixtures
- Fully composed FastAPI app and TestClient fixtures
- Entity factories
"""

from collections.abc import AsyncIterator, Iterator
from datetime import date

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from mclaren_api.app import create_app
from mclaren_api.config import AppConfig
from mclaren_api.constants import SQLITE_CONNECTION_NAME
from mclaren_api.database import (DatabaseManager, DataContext,
                                  StorageConfiguration, StorageProvider)
from mclaren_api.models import Car, Driver, GrandPrix
from mclaren_api.observability import get_metrics_collector

MEMORY_URL = "sqlite+aiosqlite:///:memory:"

# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture
def memory_storage() -> StorageConfiguration:
    """Embedded storage configuration pointing at an in-memory database."""
    return StorageConfiguration(
        provider=StorageProvider.EMBEDDED_SQLITE,
        url=MEMORY_URL,
        connection_name=SQLITE_CONNECTION_NAME,
    )


@pytest_asyncio.fixture
async def database(memory_storage) -> AsyncIterator[DatabaseManager]:
    """Initialized DatabaseManager with the schema created."""
    manager = DatabaseManager(memory_storage)
    await manager.initialize()
    await manager.create_schema()
    yield manager
    await manager.shutdown()


@pytest_asyncio.fixture
async def context(database) -> AsyncIterator[DataContext]:
    """A DataContext disposed at the end of the test."""
    async with database.create_context() as ctx:
        yield ctx


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================


@pytest.fixture
def app_config() -> AppConfig:
    """Development configuration over an in-memory database."""
    return AppConfig(
        environment="Development",
        sqlite_connection=MEMORY_URL,
        enforce_https=True,
        create_schema=True,
        seed_data=False,
        log_level="WARNING",
    )


@pytest.fixture
def app(app_config):
    return create_app(app_config)


@pytest.fixture
def client(app) -> Iterator[TestClient]:
    """TestClient running the app lifespan, speaking HTTPS."""
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with an empty metrics collector."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


# ============================================================================
# ENTITY FACTORIES
# ============================================================================


@pytest.fixture
def make_driver():
    def _make(**overrides) -> Driver:
        values = {"name": "Lando Norris", "number": 4, "nationality": "British"}
        values.update(overrides)
        return Driver(**values)

    return _make


@pytest.fixture
def make_car():
    def _make(**overrides) -> Car:
        values = {"model": "MCL38", "season": 2024, "engine": "Mercedes"}
        values.update(overrides)
        return Car(**values)

    return _make


@pytest.fixture
def make_grand_prix():
    def _make(**overrides) -> GrandPrix:
        values = {
            "name": "British Grand Prix",
            "location": "Silverstone",
            "race_date": date(2024, 7, 7),
            "laps": 52,
        }
        values.update(overrides)
        return GrandPrix(**values)

    return _make
