"""
Repository Pattern for McLaren API

A single generic data-access contract, implemented once over SQLAlchemy and
specialized per resource with resource-specific queries.

Usage:
    async with manager.create_context() as ctx:
        drivers = DriversRepository(ctx)
        lando = await drivers.add(Driver(name="Lando", number=4))
        mclaren = await drivers.find_by_team("McLaren")
"""

from .base import Repository
from .cars import CarsRepository
from .drivers import DriversRepository
from .grand_prixes import GrandPrixesRepository
from .sql import SqlRepository, constraint_fields

__all__ = [
    "Repository",
    "SqlRepository",
    "constraint_fields",
    "GrandPrixesRepository",
    "CarsRepository",
    "DriversRepository",
]
