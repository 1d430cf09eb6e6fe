"""
Versioned request routing.

Usage:
    from mclaren_api.routing import ApiVersionMap, VersionedRouter

    version_map = ApiVersionMap.discover("mclaren_api.api")
    VersionedRouter(version_map, dependencies=[Depends(authorize_request)]).mount(app)
"""

from .versioning import (
    ApiVersionMap,
    VersionedController,
    VersionedRouter,
    group_name,
    version_from_namespace,
)

__all__ = [
    "ApiVersionMap",
    "VersionedController",
    "VersionedRouter",
    "group_name",
    "version_from_namespace",
]
