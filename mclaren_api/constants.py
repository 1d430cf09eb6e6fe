"""
Constants for the McLaren API.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# API VERSIONING CONSTANTS
# ============================================================================

API_TITLE: Final[str] = "McLaren API"
"""Title shown in the generated API documentation."""

DEFAULT_API_VERSION: Final[str] = "0.9"
"""Default documented API version."""

API_PATH_PREFIX: Final[str] = "/api"
"""Prefix under which every versioned controller is mounted."""

VERSION_GROUP_FORMAT: Final[str] = "v{version}"
"""Format of the externally visible version group name (e.g. v0.9)."""

SUPPORTED_VERSIONS_HEADER: Final[str] = "api-supported-versions"
"""Response header listing every mapped API version."""

# ============================================================================
# DOCUMENTATION CONSTANTS
# ============================================================================

DOCS_PATH_PREFIX: Final[str] = "/docs"
"""Path of the human-readable documentation UI."""

OPENAPI_PATH_TEMPLATE: Final[str] = "/docs/{group}/docs.json"
"""Path template of the machine-readable API description."""

# ============================================================================
# ENVIRONMENT CONSTANTS
# ============================================================================

ENVIRONMENT_ENV_VAR: Final[str] = "MCLAREN_ENVIRONMENT"
"""Environment variable selecting the deployment environment."""

LEGACY_ENVIRONMENT_ENV_VAR: Final[str] = "ASPNETCORE_ENVIRONMENT"
"""Fallback environment variable kept for existing deployments."""

PRODUCTION_ENVIRONMENT: Final[str] = "Production"
"""Environment name selecting the managed cloud database."""

DEVELOPMENT_ENVIRONMENT: Final[str] = "Development"
"""Default environment name."""

SQLITE_CONNECTION_ENV_VAR: Final[str] = "SQLITE_CONNECTION"
"""Environment variable holding the embedded database connection string."""

CLOUD_SQL_CONNECTION_ENV_VAR: Final[str] = "AZURE_SQL_CONNECTION"
"""Environment variable holding the managed cloud database connection string."""

SQLITE_CONNECTION_NAME: Final[str] = "SQLiteConnection"
"""Name of the embedded connection string in the settings file."""

CLOUD_SQL_CONNECTION_NAME: Final[str] = "AzureSQLConnection"
"""Name of the cloud connection string in the settings file."""

DEFAULT_SQLITE_CONNECTION: Final[str] = "sqlite+aiosqlite:///./mclaren.db"
"""Default embedded database location (relative to the working directory)."""

CORRELATION_ID_HEADER: Final[str] = "X-Correlation-ID"
"""Request/response header carrying the correlation ID."""

# ============================================================================
# DATABASE CONSTANTS
# ============================================================================

DEFAULT_POOL_SIZE: Final[int] = 5
"""Default connection pool size for the cloud backend."""

DEFAULT_MAX_OVERFLOW: Final[int] = 10
"""Default number of connections allowed above the pool size."""

DEFAULT_POOL_RECYCLE_SECONDS: Final[int] = 1800
"""Recycle pooled connections after this many seconds."""

DEFAULT_HEALTH_TIMEOUT_SECONDS: Final[float] = 5.0
"""Timeout for the database ping used by health checks."""
