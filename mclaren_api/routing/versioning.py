"""
API versioning.

Controllers are grouped by the package they live in: a module under a
``v<major>_<minor>`` package belongs to that version, e.g.
``mclaren_api.api.v0_9.drivers`` serves ``/api/v0.9/drivers``. The mapping is
built once at startup and is read-only afterwards.
"""

import importlib
import logging
import pkgutil
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from types import MappingProxyType, ModuleType
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.routing import APIRoute
from starlette.routing import compile_path

from ..constants import API_PATH_PREFIX, VERSION_GROUP_FORMAT
from ..exceptions import ConfigurationError, MethodNotAllowedError, RoutingError

logger = logging.getLogger(__name__)

_NAMESPACE_VERSION = re.compile(r"v(\d+)(?:_(\d+))?")

_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def version_from_namespace(namespace: str) -> str | None:
    """
    Map a controller namespace to its version string.

    ``"mclaren_api.api.v0_9"`` -> ``"0.9"``; ``"mclaren_api.api.v2"`` -> ``"2.0"``.
    Returns None when the last segment does not follow the convention.
    """
    match = _NAMESPACE_VERSION.fullmatch(namespace.rsplit(".", 1)[-1])
    if not match:
        return None
    major, minor = match.group(1), match.group(2) or "0"
    return f"{int(major)}.{int(minor)}"


def group_name(version: str) -> str:
    """Externally visible group name of a version (``"0.9"`` -> ``"v0.9"``)."""
    return VERSION_GROUP_FORMAT.format(version=version)


@dataclass(frozen=True)
class VersionedController:
    """A controller module resolved to its version."""

    module: str
    namespace: str
    version: str
    resource: str
    router: APIRouter

    @property
    def group(self) -> str:
        return group_name(self.version)

    @property
    def prefix(self) -> str:
        return f"{API_PATH_PREFIX}/{self.group}/{self.resource}"


class ApiVersionMap:
    """
    Immutable namespace -> version mapping plus the controllers behind it.

    Usage:
        version_map = ApiVersionMap.discover("mclaren_api.api")
        version_map.namespaces      # {"mclaren_api.api.v0_9": "0.9"}
        version_map.versions        # ("0.9",)
    """

    def __init__(self, controllers: Iterable[VersionedController]):
        controllers = tuple(controllers)
        namespaces: dict[str, str] = {}
        seen_routers: dict[int, str] = {}
        seen_resources: set[tuple[str, str]] = set()

        for controller in controllers:
            owner = seen_routers.get(id(controller.router))
            if owner is not None and owner != controller.namespace:
                raise ConfigurationError(
                    f"Controller {controller.module} belongs to two namespaces: "
                    f"{owner} and {controller.namespace}",
                    config_key="controllers",
                )
            seen_routers[id(controller.router)] = controller.namespace

            key = (controller.version, controller.resource)
            if key in seen_resources:
                raise ConfigurationError(
                    f"Resource '{controller.resource}' is mapped twice in version "
                    f"{controller.version}",
                    config_key="controllers",
                )
            seen_resources.add(key)
            namespaces[controller.namespace] = controller.version

        self._controllers = controllers
        self._namespaces = MappingProxyType(namespaces)

    @classmethod
    def from_modules(cls, modules: Iterable[ModuleType]) -> "ApiVersionMap":
        """
        Build the map from controller modules.

        Each module must expose ``router`` (an APIRouter) and ``RESOURCE`` (the
        URL segment it serves) and live in a versioned namespace package.

        Raises:
            ConfigurationError: If a module's namespace carries no version
        """
        controllers = []
        for module in modules:
            namespace = module.__name__.rpartition(".")[0]
            version = version_from_namespace(namespace)
            if version is None:
                raise ConfigurationError(
                    f"Controller {module.__name__} is not inside a versioned namespace "
                    f"(expected a package named like v0_9)",
                    config_key="controllers",
                    config_value=namespace,
                )
            controllers.append(
                VersionedController(
                    module=module.__name__,
                    namespace=namespace,
                    version=version,
                    resource=module.RESOURCE,
                    router=module.router,
                )
            )
        return cls(controllers)

    @classmethod
    def discover(cls, package: str) -> "ApiVersionMap":
        """Import every controller module below ``package`` and build the map."""
        root = importlib.import_module(package)
        modules = []
        for info in pkgutil.walk_packages(root.__path__, prefix=f"{package}."):
            if info.ispkg:
                continue
            module = importlib.import_module(info.name)
            if isinstance(getattr(module, "router", None), APIRouter):
                modules.append(module)
        return cls.from_modules(modules)

    @property
    def namespaces(self) -> MappingProxyType:
        return self._namespaces

    @property
    def controllers(self) -> tuple[VersionedController, ...]:
        return self._controllers

    @property
    def versions(self) -> tuple[str, ...]:
        return tuple(sorted(set(self._namespaces.values()), key=_version_key))

    @property
    def groups(self) -> tuple[str, ...]:
        return tuple(group_name(v) for v in self.versions)

    def version_for(self, namespace: str) -> str:
        try:
            return self._namespaces[namespace]
        except KeyError:
            raise RoutingError(f"Namespace {namespace} is not mapped to a version") from None

    def supports(self, version: str) -> bool:
        return version in self._namespaces.values()


def _version_key(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


class VersionedRouter:
    """
    Mounts every controller of an ApiVersionMap under its version prefix.

    ``dependencies`` run for every versioned route after the route is matched
    and before the endpoint executes (authorization, content negotiation).
    Anything under the API prefix that no controller claims is answered with
    a RoutingError, so an unmapped version never falls through to another
    version's controller.
    """

    def __init__(self, version_map: ApiVersionMap, dependencies: Sequence[Any] = ()):
        self.version_map = version_map
        self._dependencies = list(dependencies)
        self._patterns: list[tuple[re.Pattern, frozenset[str]]] = []

    def mount(self, app: FastAPI) -> None:
        for controller in self.version_map.controllers:
            app.include_router(
                controller.router,
                prefix=controller.prefix,
                tags=[controller.group],
                dependencies=self._dependencies,
            )
            self._patterns.extend(_route_patterns(controller))
            logger.info(f"Mounted {controller.module} at {controller.prefix}")

        app.add_api_route(
            f"{API_PATH_PREFIX}/{{version}}/{{path:path}}",
            self._unmatched,
            methods=_ALL_METHODS,
            include_in_schema=False,
        )
        app.add_api_route(
            f"{API_PATH_PREFIX}/{{version}}",
            self._unmatched,
            methods=_ALL_METHODS,
            include_in_schema=False,
        )

    async def _unmatched(self, request: Request, version: str, path: str = "") -> None:
        requested = version[1:] if version.startswith("v") else version
        if not self.version_map.supports(requested):
            raise RoutingError(
                f"API version '{version}' is not supported",
                path=request.url.path,
                version=version,
            )
        allowed = self.allowed_methods(request.url.path)
        if allowed:
            raise MethodNotAllowedError(
                request.method, request.url.path, sorted(allowed), version=requested
            )
        raise RoutingError(
            f"No resource matches '{path or '/'}' in API version {requested}",
            path=request.url.path,
            version=requested,
        )

    def allowed_methods(self, path: str) -> set[str]:
        """Methods the mounted controllers accept on ``path`` (empty if none match)."""
        allowed: set[str] = set()
        for pattern, methods in self._patterns:
            if pattern.match(path):
                allowed |= methods
        return allowed


def _route_patterns(controller: VersionedController) -> list[tuple[re.Pattern, frozenset[str]]]:
    patterns = []
    for route in controller.router.routes:
        if isinstance(route, APIRoute):
            regex, _, _ = compile_path(controller.prefix + route.path)
            patterns.append((regex, frozenset(route.methods)))
    return patterns
