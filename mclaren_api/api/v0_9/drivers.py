"""Drivers controller."""

from fastapi import APIRouter, Depends, Response, status

from ...dependencies import inject
from ...schemas import DriverPayload
from ...serialization import ReferenceJSONResponse
from ...services import DriversService

RESOURCE = "drivers"

router = APIRouter(default_response_class=ReferenceJSONResponse)

Service = Depends(inject(DriversService))


@router.get("", summary="List drivers")
async def list_drivers(service: DriversService = Service) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.list_drivers())


@router.get("/team/{team}", summary="List the drivers of a team")
async def drivers_by_team(team: str, service: DriversService = Service) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.drivers_by_team(team))


@router.get("/{driver_id}", summary="Get a driver")
async def get_driver(driver_id: int, service: DriversService = Service) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.get_driver(driver_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a driver")
async def create_driver(
    payload: DriverPayload, service: DriversService = Service
) -> ReferenceJSONResponse:
    driver = await service.create_driver(payload.to_entity())
    return ReferenceJSONResponse(driver, status_code=status.HTTP_201_CREATED)


@router.put("/{driver_id}", summary="Replace a driver")
async def update_driver(
    driver_id: int, payload: DriverPayload, service: DriversService = Service
) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.update_driver(driver_id, payload.to_entity()))


@router.put("/{driver_id}/car/{car_id}", summary="Assign a car to a driver")
async def assign_car(
    driver_id: int, car_id: int, service: DriversService = Service
) -> ReferenceJSONResponse:
    return ReferenceJSONResponse(await service.assign_car(driver_id, car_id))


@router.delete(
    "/{driver_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a driver",
)
async def delete_driver(driver_id: int, service: DriversService = Service) -> Response:
    await service.delete_driver(driver_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
