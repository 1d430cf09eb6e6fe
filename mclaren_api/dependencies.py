"""
FastAPI dependencies for the McLaren API.

Usage:
    from fastapi import Depends
    from mclaren_api.dependencies import inject

    @router.get("")
    async def list_drivers(service: DriversService = Depends(inject(DriversService))):
        return await service.list_drivers()
"""

import logging
from collections.abc import Callable
from typing import TypeVar

from fastapi import Request

from .database import DataContext
from .di import Container
from .exceptions import NotAcceptableError
from .observability import LogService

logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_MEDIA_RANGES = ("application/json", "application/*", "*/*")


async def get_container(request: Request) -> Container:
    """Get the DI container built by the composition root."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Container not configured. Build the app with create_app().")
    return container


def inject(service_type: type[T]) -> Callable[..., T]:
    """Create a dependency that resolves a service from the DI container."""

    async def _resolve(request: Request) -> T:
        container = await get_container(request)
        return container.resolve(service_type)

    return _resolve


get_data_context = inject(DataContext)
get_log_service = inject(LogService)


def accepts_json(accept: str | None) -> bool:
    """
    Whether an Accept header admits a JSON response.

    A missing or empty header accepts anything. Media ranges with ``q=0`` are
    treated as refused.
    """
    if not accept or not accept.strip():
        return True

    for part in accept.split(","):
        media_type, _, params = part.partition(";")
        media_type = media_type.strip().lower()
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality <= 0:
            continue
        if media_type in JSON_MEDIA_RANGES or media_type.endswith("+json"):
            return True
    return False


async def require_json(request: Request) -> None:
    """
    Reject requests whose Accept header rules out JSON.

    Raises:
        NotAcceptableError: 406 when no acceptable media range matches
    """
    accept = request.headers.get("accept")
    if not accepts_json(accept):
        raise NotAcceptableError(accept or "")


__all__ = [
    "get_container",
    "inject",
    "get_data_context",
    "get_log_service",
    "accepts_json",
    "require_json",
]
