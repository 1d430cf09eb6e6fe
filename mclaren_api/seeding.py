"""
Initial Data Seeding

Seeds a small McLaren data set so a fresh database has something to serve.
Each table is only seeded while it is empty, so running the seed again is a
no-op.
"""

import logging
from datetime import date
from typing import Any

from .database import DataContext
from .models import Car, Driver, GrandPrix
from .observability import timed_operation
from .repositories import CarsRepository, DriversRepository, GrandPrixesRepository

logger = logging.getLogger(__name__)

INITIAL_GRAND_PRIXES: list[dict[str, Any]] = [
    {
        "name": "British Grand Prix",
        "location": "Silverstone",
        "race_date": date(2024, 7, 7),
        "laps": 52,
    },
    {
        "name": "Italian Grand Prix",
        "location": "Monza",
        "race_date": date(2024, 9, 1),
        "laps": 53,
    },
    {
        "name": "Abu Dhabi Grand Prix",
        "location": "Yas Marina",
        "race_date": date(2024, 12, 8),
        "laps": 58,
    },
]

INITIAL_CAR: dict[str, Any] = {"model": "MCL38", "season": 2024, "engine": "Mercedes"}

INITIAL_DRIVERS: list[dict[str, Any]] = [
    {"name": "Lando Norris", "number": 4, "nationality": "British"},
    {"name": "Oscar Piastri", "number": 81, "nationality": "Australian"},
]


@timed_operation("database.seed")
async def seed_initial_data(context: DataContext) -> dict[str, int]:
    """
    Seed initial data into empty tables.

    The car is entered in the seeded grand prixes and the drivers are put in
    the seeded car, but only for rows created by this call.

    Args:
        context: DataContext to write through

    Returns:
        Dictionary mapping table names to number of rows inserted
    """
    grand_prixes_repo = GrandPrixesRepository(context)
    cars_repo = CarsRepository(context)
    drivers_repo = DriversRepository(context)
    results = {"grand_prixes": 0, "cars": 0, "drivers": 0}

    grand_prixes: list[GrandPrix] = []
    if await grand_prixes_repo.count() == 0:
        for values in INITIAL_GRAND_PRIXES:
            grand_prixes.append(await grand_prixes_repo.add(GrandPrix(**values)))
        results["grand_prixes"] = len(grand_prixes)
    else:
        logger.info("Table 'grand_prixes' is not empty, skipping seed")

    car: Car | None = None
    if await cars_repo.count() == 0:
        car = await cars_repo.add(Car(**INITIAL_CAR, grand_prixes=grand_prixes))
        results["cars"] = 1
    else:
        logger.info("Table 'cars' is not empty, skipping seed")

    if await drivers_repo.count() == 0:
        car_id = car.id if car is not None else None
        for values in INITIAL_DRIVERS:
            await drivers_repo.add(Driver(**values, car_id=car_id))
        results["drivers"] = len(INITIAL_DRIVERS)
    else:
        logger.info("Table 'drivers' is not empty, skipping seed")

    logger.info(f"Seeded initial data: {results}")
    return results
