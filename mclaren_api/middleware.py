"""
Request pipeline middleware.

- HTTPSEnforcementMiddleware: redirects plain-HTTP requests to HTTPS; the
  documentation and health paths are exempt.
- RequestScopeMiddleware: assigns the correlation ID, opens the DI request
  scope (disposed when the response is produced) and reports the supported
  API versions.

Usage (configured by create_app()):
    app.add_middleware(RequestScopeMiddleware, supported_versions=("0.9",))
    app.add_middleware(HTTPSEnforcementMiddleware, exempt_routes=["/docs*", "/health"])
"""

import fnmatch
import logging
from collections.abc import Awaitable, Callable, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from .constants import API_PATH_PREFIX, CORRELATION_ID_HEADER, SUPPORTED_VERSIONS_HEADER
from .di import ScopeManager
from .observability import clear_request_context, set_correlation_id, set_request_context

logger = logging.getLogger(__name__)


class HTTPSEnforcementMiddleware(BaseHTTPMiddleware):
    """
    Redirect ``http://`` requests to the same URL over ``https://``.

    GET and HEAD are redirected with 307 so clients retry unchanged; other
    methods get 308 so the body is replayed.
    """

    def __init__(self, app, exempt_routes: Sequence[str] | None = None, https_port: int = 443):
        super().__init__(app)
        self.exempt_routes = list(exempt_routes or [])
        self.https_port = https_port

    def _is_exempt(self, path: str) -> bool:
        for pattern in self.exempt_routes:
            if fnmatch.fnmatch(path, pattern):
                return True
        return False

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.scheme == "https" or self._is_exempt(request.url.path):
            return await call_next(request)

        netloc = request.url.hostname or ""
        if self.https_port != 443:
            netloc = f"{netloc}:{self.https_port}"
        target = request.url.replace(scheme="https", netloc=netloc)
        status_code = 307 if request.method in ("GET", "HEAD") else 308
        logger.debug(f"Redirecting {request.url.path} to HTTPS")
        return RedirectResponse(str(target), status_code=status_code)


class RequestScopeMiddleware(BaseHTTPMiddleware):
    """
    Per-request correlation ID and DI scope.

    The correlation ID is taken from the X-Correlation-ID header when present,
    stored on ``request.state`` and echoed back in the response.
    """

    def __init__(self, app, supported_versions: Sequence[str] = ()):
        super().__init__(app)
        self.supported_versions = ", ".join(supported_versions)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.state.correlation_id = correlation_id
        set_request_context(method=request.method, path=request.url.path)

        try:
            async with ScopeManager.request_scope():
                response = await call_next(request)
        finally:
            clear_request_context()

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        if self.supported_versions and request.url.path.startswith(API_PATH_PREFIX):
            response.headers[SUPPORTED_VERSIONS_HEADER] = self.supported_versions
        return response
