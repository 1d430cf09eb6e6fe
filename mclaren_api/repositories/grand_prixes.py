"""Grand prix (race) repository."""

from datetime import date

from sqlalchemy import func

from ..database.context import DataContext
from ..models import GrandPrix
from .sql import SqlRepository


class GrandPrixesRepository(SqlRepository[GrandPrix]):
    def __init__(self, context: DataContext):
        super().__init__(context, GrandPrix)

    async def find_by_season(self, year: int) -> list[GrandPrix]:
        """Races dated within the given calendar year."""
        start, end = date(year, 1, 1), date(year, 12, 31)
        return [gp async for gp in self.query(GrandPrix.race_date.between(start, end))]

    async def find_by_location(self, location: str) -> list[GrandPrix]:
        """Races at a location, compared case-insensitively."""
        predicate = func.lower(GrandPrix.location) == location.lower()
        return [gp async for gp in self.query(predicate)]

    async def find_upcoming(self, after: date | None = None) -> list[GrandPrix]:
        """Races on or after ``after`` (today by default), soonest first."""
        after = after or date.today()
        races = [gp async for gp in self.query(GrandPrix.race_date >= after)]
        return sorted(races, key=lambda gp: (gp.race_date, gp.id))
