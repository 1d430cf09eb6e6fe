"""Cars service."""

from ..exceptions import NotFoundError
from ..models import Car
from ..observability import LogService
from ..repositories import CarsRepository, GrandPrixesRepository


class CarsService:
    def __init__(
        self, cars: CarsRepository, grand_prixes: GrandPrixesRepository, log: LogService
    ):
        self._cars = cars
        self._grand_prixes = grand_prixes
        self._log = log

    async def list_cars(self) -> list[Car]:
        return await self._cars.get_all()

    async def get_car(self, car_id: int) -> Car:
        car = await self._cars.get_by_id(car_id)
        if car is None:
            raise NotFoundError("Car", car_id)
        return car

    async def create_car(self, car: Car) -> Car:
        created = await self._cars.add(car)
        self._log.info("Car created", car_id=created.id)
        return created

    async def update_car(self, car_id: int, car: Car) -> Car:
        car.id = car_id
        updated = await self._cars.update(car)
        self._log.info("Car updated", car_id=car_id)
        return updated

    async def delete_car(self, car_id: int) -> None:
        await self._cars.remove(car_id)
        self._log.info("Car deleted", car_id=car_id)

    async def cars_by_season(self, season: int) -> list[Car]:
        return await self._cars.find_by_season(season)

    async def enter_grand_prix(self, car_id: int, grand_prix_id: int) -> Car:
        """
        Enter a car in a race. Entering the same race twice is a no-op.

        Raises:
            NotFoundError: If the car or the grand prix does not exist
        """
        car = await self.get_car(car_id)
        grand_prix = await self._grand_prixes.get_by_id(grand_prix_id)
        if grand_prix is None:
            raise NotFoundError("GrandPrix", grand_prix_id)

        if grand_prix not in car.grand_prixes:
            car.grand_prixes.append(grand_prix)
        updated = await self._cars.update(car)
        self._log.info("Car entered in grand prix", car_id=car_id, grand_prix_id=grand_prix_id)
        return updated
