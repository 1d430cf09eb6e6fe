"""
Unit tests for the resource services.

Repositories are replaced with AsyncMock objects specced on the real classes,
so these tests cover orchestration only.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from mclaren_api.exceptions import NotFoundError, ValidationError
from mclaren_api.models import Car, Driver, GrandPrix
from mclaren_api.observability import LogService
from mclaren_api.repositories import (CarsRepository, DriversRepository,
                                      GrandPrixesRepository)
from mclaren_api.services import (CarsService, DriversService,
                                  GrandPrixesService)


@pytest.fixture
def log() -> MagicMock:
    return MagicMock(spec=LogService)


@pytest.fixture
def drivers_repo() -> AsyncMock:
    return AsyncMock(spec=DriversRepository)


@pytest.fixture
def cars_repo() -> AsyncMock:
    return AsyncMock(spec=CarsRepository)


@pytest.fixture
def grand_prixes_repo() -> AsyncMock:
    return AsyncMock(spec=GrandPrixesRepository)


@pytest.fixture
def drivers_service(drivers_repo, cars_repo, log) -> DriversService:
    return DriversService(drivers_repo, cars_repo, log)


@pytest.fixture
def cars_service(cars_repo, grand_prixes_repo, log) -> CarsService:
    return CarsService(cars_repo, grand_prixes_repo, log)


@pytest.fixture
def grand_prixes_service(grand_prixes_repo, log) -> GrandPrixesService:
    return GrandPrixesService(grand_prixes_repo, log)


class TestDriversService:
    @pytest.mark.asyncio
    async def test_get_driver_not_found(self, drivers_service, drivers_repo):
        drivers_repo.get_by_id.return_value = None
        with pytest.raises(NotFoundError) as exc_info:
            await drivers_service.get_driver(99)
        assert exc_info.value.entity == "Driver"
        assert exc_info.value.entity_id == 99

    @pytest.mark.asyncio
    async def test_create_driver_without_car(self, drivers_service, drivers_repo, cars_repo, log):
        driver = Driver(name="Lando Norris")
        drivers_repo.add.return_value = Driver(id=1, name="Lando Norris")

        created = await drivers_service.create_driver(driver)

        assert created.id == 1
        drivers_repo.add.assert_awaited_once_with(driver)
        cars_repo.exists.assert_not_awaited()
        log.info.assert_called_once()

    @pytest.mark.asyncio
    async def test_create_driver_with_unknown_car(self, drivers_service, drivers_repo, cars_repo):
        cars_repo.exists.return_value = False
        with pytest.raises(ValidationError) as exc_info:
            await drivers_service.create_driver(Driver(name="Lando Norris", car_id=7))
        assert exc_info.value.field_errors[0]["field"] == "car_id"
        drivers_repo.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_driver_sets_id(self, drivers_service, drivers_repo):
        driver = Driver(name="Lando Norris")
        drivers_repo.update.return_value = driver
        await drivers_service.update_driver(4, driver)
        assert driver.id == 4
        drivers_repo.update.assert_awaited_once_with(driver)

    @pytest.mark.asyncio
    async def test_repository_errors_pass_through(self, drivers_service, drivers_repo):
        error = NotFoundError("Driver", 5)
        drivers_repo.remove.side_effect = error
        with pytest.raises(NotFoundError) as exc_info:
            await drivers_service.delete_driver(5)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_drivers_by_team(self, drivers_service, drivers_repo):
        drivers_repo.find_by_team.return_value = [Driver(name="Lando Norris")]
        result = await drivers_service.drivers_by_team("McLaren")
        assert len(result) == 1
        drivers_repo.find_by_team.assert_awaited_once_with("McLaren")

    @pytest.mark.asyncio
    async def test_assign_car(self, drivers_service, drivers_repo, cars_repo):
        driver = Driver(id=1, name="Lando Norris")
        car = Car(id=2, model="MCL38", season=2024)
        drivers_repo.get_by_id.return_value = driver
        cars_repo.get_by_id.return_value = car
        drivers_repo.update.return_value = driver

        result = await drivers_service.assign_car(1, 2)

        assert result.car is car
        drivers_repo.update.assert_awaited_once_with(driver)

    @pytest.mark.asyncio
    async def test_assign_unknown_car(self, drivers_service, drivers_repo, cars_repo):
        drivers_repo.get_by_id.return_value = Driver(id=1, name="Lando Norris")
        cars_repo.get_by_id.return_value = None
        with pytest.raises(NotFoundError) as exc_info:
            await drivers_service.assign_car(1, 2)
        assert exc_info.value.entity == "Car"
        drivers_repo.update.assert_not_awaited()


class TestCarsService:
    @pytest.mark.asyncio
    async def test_get_car_not_found(self, cars_service, cars_repo):
        cars_repo.get_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await cars_service.get_car(1)

    @pytest.mark.asyncio
    async def test_enter_grand_prix(self, cars_service, cars_repo, grand_prixes_repo):
        car = Car(id=1, model="MCL38", season=2024)
        grand_prix = GrandPrix(id=3, name="British Grand Prix", location="Silverstone")
        cars_repo.get_by_id.return_value = car
        grand_prixes_repo.get_by_id.return_value = grand_prix
        cars_repo.update.return_value = car

        await cars_service.enter_grand_prix(1, 3)
        await cars_service.enter_grand_prix(1, 3)

        assert car.grand_prixes == [grand_prix]
        assert cars_repo.update.await_count == 2

    @pytest.mark.asyncio
    async def test_enter_unknown_grand_prix(self, cars_service, cars_repo, grand_prixes_repo):
        cars_repo.get_by_id.return_value = Car(id=1, model="MCL38", season=2024)
        grand_prixes_repo.get_by_id.return_value = None
        with pytest.raises(NotFoundError) as exc_info:
            await cars_service.enter_grand_prix(1, 3)
        assert exc_info.value.entity == "GrandPrix"
        cars_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cars_by_season(self, cars_service, cars_repo):
        cars_repo.find_by_season.return_value = []
        assert await cars_service.cars_by_season(2024) == []
        cars_repo.find_by_season.assert_awaited_once_with(2024)


class TestGrandPrixesService:
    @pytest.mark.asyncio
    async def test_get_grand_prix_not_found(self, grand_prixes_service, grand_prixes_repo):
        grand_prixes_repo.get_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await grand_prixes_service.get_grand_prix(1)

    @pytest.mark.asyncio
    async def test_upcoming_passes_date(self, grand_prixes_service, grand_prixes_repo):
        grand_prixes_repo.find_upcoming.return_value = []
        await grand_prixes_service.upcoming(date(2024, 8, 1))
        grand_prixes_repo.find_upcoming.assert_awaited_once_with(date(2024, 8, 1))

    @pytest.mark.asyncio
    async def test_by_season_and_location(self, grand_prixes_service, grand_prixes_repo):
        grand_prixes_repo.find_by_season.return_value = []
        grand_prixes_repo.find_by_location.return_value = []
        await grand_prixes_service.grand_prixes_by_season(2024)
        await grand_prixes_service.grand_prixes_at("Monza")
        grand_prixes_repo.find_by_season.assert_awaited_once_with(2024)
        grand_prixes_repo.find_by_location.assert_awaited_once_with("Monza")

    @pytest.mark.asyncio
    async def test_delete_logs(self, grand_prixes_service, grand_prixes_repo, log):
        await grand_prixes_service.delete_grand_prix(3)
        grand_prixes_repo.remove.assert_awaited_once_with(3)
        log.info.assert_called_once()
