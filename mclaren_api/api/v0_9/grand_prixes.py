"""Grand prixes controller."""

from datetime import date

from fastapi import APIRouter, Depends, Response, status

from ...dependencies import inject
from ...schemas import GrandPrixPayload
from ...serialization import ReferenceJSONResponse
from ...services import GrandPrixesService

RESOURCE = "grand-prixes"

router = APIRouter(default_response_class=ReferenceJSONResponse)

Service = Depends(inject(GrandPrixesService))


@router.get("", summary="List grand prixes")
async def list_grand_prixes(
    location: str | None = None, service: GrandPrixesService = Service
) -> ReferenceJSONResponse:
    if location:
        return ReferenceJSONResponse(await service.grand_prixes_at(location))
    return ReferenceJSONResponse(await service.list_grand_prixes())


# Declared before "/{grand_prix_id}" so "upcoming" is not parsed as an id
@router.get("/upcoming", summary="List grand prixes still to be raced")
async def upcoming(
    after: date | None = None, service: GrandPrixesService = Service
) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.upcoming(after))


@router.get("/season/{year}", summary="List the grand prixes of a season")
async def grand_prixes_by_season(
    year: int, service: GrandPrixesService = Service
) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.grand_prixes_by_season(year))


@router.get("/{grand_prix_id}", summary="Get a grand prix")
async def get_grand_prix(
    grand_prix_id: int, service: GrandPrixesService = Service
) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.get_grand_prix(grand_prix_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a grand prix")
async def create_grand_prix(
    payload: GrandPrixPayload, service: GrandPrixesService = Service
) -> ReferenceJSONResponse:
    grand_prix = await service.create_grand_prix(payload.to_entity())
    return ReferenceJSONResponse(grand_prix, status_code=status.HTTP_201_CREATED)


@router.put("/{grand_prix_id}", summary="Replace a grand prix")
async def update_grand_prix(
    grand_prix_id: int, payload: GrandPrixPayload, service: GrandPrixesService = Service
) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(
        await service.update_grand_prix(grand_prix_id, payload.to_entity())
    )


@router.delete(
    "/{grand_prix_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a grand prix",
)
async def delete_grand_prix(grand_prix_id: int, service: GrandPrixesService = Service) -> Response:
    await service.delete_grand_prix(grand_prix_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
