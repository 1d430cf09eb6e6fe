"""Driver repository."""

from ..database.context import DataContext
from ..models import Driver
from .sql import SqlRepository


class DriversRepository(SqlRepository[Driver]):
    def __init__(self, context: DataContext):
        super().__init__(context, Driver)

    async def find_by_team(self, team: str) -> list[Driver]:
        return [driver async for driver in self.query(Driver.team == team)]

    async def find_by_car(self, car_id: int) -> list[Driver]:
        return [driver async for driver in self.query(Driver.car_id == car_id)]

    async def find_by_name(self, name: str) -> list[Driver]:
        return [driver async for driver in self.query(Driver.name == name)]
