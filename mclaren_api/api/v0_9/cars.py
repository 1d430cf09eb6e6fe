"""Cars controller."""

from fastapi import APIRouter, Depends, Response, status

from ...dependencies import inject
from ...schemas import CarPayload
from ...serialization import ReferenceJSONResponse
from ...services import CarsService

RESOURCE = "cars"

router = APIRouter(default_response_class=ReferenceJSONResponse)

Service = Depends(inject(CarsService))


@router.get("", summary="List cars")
async def list_cars(service: CarsService = Service) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.list_cars())


@router.get("/season/{season}", summary="List the cars of a season")
async def cars_by_season(season: int, service: CarsService = Service) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.cars_by_season(season))


@router.get("/{car_id}", summary="Get a car")
async def get_car(car_id: int, service: CarsService = Service) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.get_car(car_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a car")
async def create_car(payload: CarPayload, service: CarsService = Service) -> ReferenceJSONResponse:
    car = await service.create_car(payload.to_entity())
    return ReferenceJSONResponse(car, status_code=status.HTTP_201_CREATED)


@router.put("/{car_id}", summary="Replace a car")
async def update_car(
    car_id: int, payload: CarPayload, service: CarsService = Service
) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.update_car(car_id, payload.to_entity()))


@router.put("/{car_id}/grand-prixes/{grand_prix_id}", summary="Enter a car in a grand prix")
async def enter_grand_prix(
    car_id: int, grand_prix_id: int, service: CarsService = Service
) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.enter_grand_prix(car_id, grand_prix_id))


@router.delete(
    "/{car_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a car",
)
async def delete_car(car_id: int, service: CarsService = Service) -> Response:
    await service.delete_car(car_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
