"""Grand prixes service."""

from datetime import date

from ..exceptions import NotFoundError
from ..models import GrandPrix
from ..observability import LogService
from ..repositories import GrandPrixesRepository


class GrandPrixesService:
    def __init__(self, grand_prixes: GrandPrixesRepository, log: LogService):
        self._grand_prixes = grand_prixes
        self._log = log

    async def list_grand_prixes(self) -> list[GrandPrix]:
        return await self._grand_prixes.get_all()

    async def get_grand_prix(self, grand_prix_id: int) -> GrandPrix:
        grand_prix = await self._grand_prixes.get_by_id(grand_prix_id)
        if grand_prix is None:
            raise NotFoundError("GrandPrix", grand_prix_id)
        return grand_prix

    async def create_grand_prix(self, grand_prix: GrandPrix) -> GrandPrix:
        created = await self._grand_prixes.add(grand_prix)
        self._log.info("Grand prix created", grand_prix_id=created.id)
        return created

    async def update_grand_prix(self, grand_prix_id: int, grand_prix: GrandPrix) -> GrandPrix:
        grand_prix.id = grand_prix_id
        updated = await self._grand_prixes.update(grand_prix)
        self._log.info("Grand prix updated", grand_prix_id=grand_prix_id)
        return updated

    async def delete_grand_prix(self, grand_prix_id: int) -> None:
        await self._grand_prixes.remove(grand_prix_id)
        self._log.info("Grand prix deleted", grand_prix_id=grand_prix_id)

    async def grand_prixes_by_season(self, year: int) -> list[GrandPrix]:
        return await self._grand_prixes.find_by_season(year)

    async def grand_prixes_at(self, location: str) -> list[GrandPrix]:
        return await self._grand_prixes.find_by_location(location)

    async def upcoming(self, after: date | None = None) -> list[GrandPrix]:
        return await self._grand_prixes.find_upcoming(after)
