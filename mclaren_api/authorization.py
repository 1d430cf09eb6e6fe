"""
Authorization hook.

A policy decides whether a request that routing has already matched may be
dispatched to its controller. The default policy allows everything; concrete
policies are registered in the container in place of AllowAllPolicy.
"""

import logging
from abc import ABC, abstractmethod

from fastapi import Request

from .exceptions import AuthorizationError

logger = logging.getLogger(__name__)


class AuthorizationPolicy(ABC):
    """
    Contract for pluggable authorization policies.

    ``request.scope["route"]`` holds the matched route when the policy runs.
    """

    @abstractmethod
    async def authorize(self, request: Request) -> bool:
        """Return True to let the request through."""


class AllowAllPolicy(AuthorizationPolicy):
    async def authorize(self, request: Request) -> bool:
        return True


async def authorize_request(request: Request) -> None:
    """
    Router-level dependency enforcing the registered AuthorizationPolicy.

    Raises:
        AuthorizationError: If the policy denies the request
    """
    policy = request.app.state.container.resolve(AuthorizationPolicy)
    if await policy.authorize(request):
        return

    route = request.scope.get("route")
    route_path = getattr(route, "path", request.url.path)
    logger.warning(f"Authorization denied for {request.method} {route_path}")
    raise AuthorizationError(
        f"Access to {request.method} {request.url.path} is denied",
        context={"route": route_path, "method": request.method},
    )
