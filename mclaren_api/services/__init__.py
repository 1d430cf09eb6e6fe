"""
Resource services.

One service per resource, each bound to its repository. Services hold no
state of their own and never touch the DataContext directly.
"""

from .cars import CarsService
from .drivers import DriversService
from .grand_prixes import GrandPrixesService

__all__ = ["CarsService", "DriversService", "GrandPrixesService"]
