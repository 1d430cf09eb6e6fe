"""
Drivers service.

Exposes driver operations to the HTTP layer. Persistence goes through
DriversRepository; the car lookups needed for assignment go through
CarsRepository.
"""

from ..exceptions import NotFoundError, ValidationError
from ..models import Driver
from ..observability import LogService
from ..repositories import CarsRepository, DriversRepository


class DriversService:
    def __init__(self, drivers: DriversRepository, cars: CarsRepository, log: LogService):
        self._drivers = drivers
        self._cars = cars
        self._log = log

    async def list_drivers(self) -> list[Driver]:
        return await self._drivers.get_all()

    async def get_driver(self, driver_id: int) -> Driver:
        driver = await self._drivers.get_by_id(driver_id)
        if driver is None:
            raise NotFoundError("Driver", driver_id)
        return driver

    async def create_driver(self, driver: Driver) -> Driver:
        await self._check_car(driver.car_id)
        created = await self._drivers.add(driver)
        self._log.info("Driver created", driver_id=created.id)
        return created

    async def update_driver(self, driver_id: int, driver: Driver) -> Driver:
        driver.id = driver_id
        await self._check_car(driver.car_id)
        updated = await self._drivers.update(driver)
        self._log.info("Driver updated", driver_id=driver_id)
        return updated

    async def delete_driver(self, driver_id: int) -> None:
        await self._drivers.remove(driver_id)
        self._log.info("Driver deleted", driver_id=driver_id)

    async def drivers_by_team(self, team: str) -> list[Driver]:
        return await self._drivers.find_by_team(team)

    async def assign_car(self, driver_id: int, car_id: int) -> Driver:
        """
        Put a driver in a car.

        Both sides are loaded first and the change is written with a single
        repository update, so the assignment commits once.

        Raises:
            NotFoundError: If the driver or the car does not exist
        """
        driver = await self.get_driver(driver_id)
        car = await self._cars.get_by_id(car_id)
        if car is None:
            raise NotFoundError("Car", car_id)

        driver.car = car
        updated = await self._drivers.update(driver)
        self._log.info("Driver assigned to car", driver_id=driver_id, car_id=car_id)
        return updated

    async def _check_car(self, car_id: int | None) -> None:
        if car_id is not None and not await self._cars.exists(car_id):
            raise ValidationError(
                f"Car with id {car_id} does not exist",
                field_errors=[{"field": "car_id", "message": "Unknown car."}],
            )
