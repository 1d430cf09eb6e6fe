"""
Composition Root

Builds the DI container and assembles the request pipeline, once, at startup:

    documentation -> HTTPS enforcement -> correlation/request scope
        -> routing -> authorization -> controller dispatch

Usage:
    uvicorn mclaren_api.app:create_app --factory

    # or, with explicit configuration
    app = create_app(AppConfig(environment="Development"))
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from .api import CONTROLLERS_PACKAGE
from .authorization import AllowAllPolicy, AuthorizationPolicy, authorize_request
from .config import AppConfig
from .constants import API_TITLE, DEFAULT_API_VERSION, DOCS_PATH_PREFIX, OPENAPI_PATH_TEMPLATE
from .database import DatabaseManager, DataContext, StorageConfiguration, select_storage
from .dependencies import require_json
from .di import Container, Scope
from .error_handlers import register_error_handlers
from .middleware import HTTPSEnforcementMiddleware, RequestScopeMiddleware
from .observability import (
    HealthChecker,
    HealthStatus,
    LogService,
    check_database_health,
    configure_logging,
    get_metrics_collector,
)
from .repositories import CarsRepository, DriversRepository, GrandPrixesRepository
from .routing import ApiVersionMap, VersionedRouter, group_name
from .seeding import seed_initial_data
from .services import CarsService, DriversService, GrandPrixesService

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"

REQUEST_SCOPED = (
    GrandPrixesRepository,
    CarsRepository,
    DriversRepository,
    GrandPrixesService,
    CarsService,
    DriversService,
)


def build_container(
    config: AppConfig, storage: StorageConfiguration, log: LogService | None = None
) -> Container:
    """
    Register every service with its lifetime.

    Singletons: AppConfig, StorageConfiguration, DatabaseManager, LogService,
    AuthorizationPolicy. Everything touching a session is request-scoped and
    disposed with the request.
    """
    container = Container()
    container.register_instance(AppConfig, config)
    container.register_instance(StorageConfiguration, storage)
    container.register_instance(LogService, log or LogService())
    container.register_factory(
        DatabaseManager,
        lambda c: DatabaseManager(
            c.resolve(StorageConfiguration),
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
        ),
        scope=Scope.SINGLETON,
    )
    container.register(AuthorizationPolicy, AllowAllPolicy)

    container.register_factory(
        DataContext,
        lambda c: c.resolve(DatabaseManager).create_context(),
        scope=Scope.REQUEST,
    )
    for service_type in REQUEST_SCOPED:
        container.register(service_type, scope=Scope.REQUEST)

    return container


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    The storage backend is selected here, once, from the configured
    environment; nothing re-reads the environment afterwards.

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = config or AppConfig()
    configure_logging(config.log_level)
    config.validate()

    storage = select_storage(config.environment, config)
    container = build_container(config, storage)
    log = container.resolve(LogService)
    version_map = ApiVersionMap.discover(CONTROLLERS_PACKAGE)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database = container.resolve(DatabaseManager)
        await database.initialize()
        if config.create_schema:
            await database.create_schema()
        if config.seed_data:
            async with database.create_context() as context:
                await seed_initial_data(context)
        log.info(
            "McLaren API started",
            environment=config.environment,
            provider=storage.provider.value,
            versions=list(version_map.versions),
        )
        try:
            yield
        finally:
            await database.shutdown()
            log.info("McLaren API stopped")

    app = FastAPI(
        title=API_TITLE,
        version=DEFAULT_API_VERSION,
        debug=config.is_development,
        docs_url=DOCS_PATH_PREFIX,
        redoc_url=None,
        openapi_url=OPENAPI_PATH_TEMPLATE.format(group=group_name(DEFAULT_API_VERSION)),
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.config = config
    app.state.version_map = version_map

    register_error_handlers(app, log)

    VersionedRouter(
        version_map,
        dependencies=[Depends(authorize_request), Depends(require_json)],
    ).mount(app)

    health_checker = HealthChecker()

    async def database_check():
        return await check_database_health(container.resolve(DatabaseManager))

    health_checker.register_check(database_check)

    @app.get(HEALTH_PATH, include_in_schema=False)
    async def health() -> JSONResponse:
        report = await health_checker.check_all()
        report["metrics"] = get_metrics_collector().get_summary()["summary"]
        status_code = 200 if report["status"] == HealthStatus.HEALTHY.value else 503
        return JSONResponse(report, status_code=status_code)

    # Added innermost first: the last middleware added runs first
    app.add_middleware(RequestScopeMiddleware, supported_versions=version_map.versions)
    if config.enforce_https:
        app.add_middleware(
            HTTPSEnforcementMiddleware,
            exempt_routes=[f"{DOCS_PATH_PREFIX}*", HEALTH_PATH],
        )

    return app
