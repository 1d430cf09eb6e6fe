"""Car repository."""

from ..database.context import DataContext
from ..models import Car
from .sql import SqlRepository


class CarsRepository(SqlRepository[Car]):
    def __init__(self, context: DataContext):
        super().__init__(context, Car)

    async def find_by_model(self, model: str) -> Car | None:
        return await self.first(Car.model == model)

    async def find_by_season(self, season: int) -> list[Car]:
        return [car async for car in self.query(Car.season == season)]
