"""
Configuration management for the McLaren API.

Configuration is read from environment variables, with an optional JSON
settings file for connection strings. Every value can also be passed to
AppConfig directly, which is what the tests do.
"""

import json
import os
from pathlib import Path
from typing import Any

from .constants import (
    CLOUD_SQL_CONNECTION_ENV_VAR,
    CLOUD_SQL_CONNECTION_NAME,
    DEFAULT_MAX_OVERFLOW,
    DEFAULT_POOL_SIZE,
    DEFAULT_SQLITE_CONNECTION,
    DEVELOPMENT_ENVIRONMENT,
    ENVIRONMENT_ENV_VAR,
    LEGACY_ENVIRONMENT_ENV_VAR,
    PRODUCTION_ENVIRONMENT,
    SQLITE_CONNECTION_ENV_VAR,
    SQLITE_CONNECTION_NAME,
)
from .exceptions import ConfigurationError

SUPPORTED_URL_SCHEMES = (
    "sqlite",
    "sqlite+aiosqlite",
    "postgresql",
    "postgresql+asyncpg",
    "postgres",
    "mssql",
    "mssql+aioodbc",
)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer", config_key=name, config_value=raw
        ) from e


def load_connection_strings(settings_file: str | None) -> dict[str, str]:
    """
    Load the ``ConnectionStrings`` section of a JSON settings file.

    Args:
        settings_file: Path to the settings file (None disables the lookup)

    Returns:
        Mapping of connection string name to value (empty if no file)

    Raises:
        ConfigurationError: If the file is missing or not valid JSON
    """
    if not settings_file:
        return {}

    path = Path(settings_file)
    if not path.exists():
        raise ConfigurationError(
            f"Settings file not found: {settings_file}", config_key="MCLAREN_SETTINGS_FILE"
        )

    try:
        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON in settings file: {e}", config_key="MCLAREN_SETTINGS_FILE"
        ) from e

    section = data.get("ConnectionStrings") or {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            "ConnectionStrings must be an object", config_key="ConnectionStrings"
        )
    return {str(k): str(v) for k, v in section.items() if v}


class AppConfig:
    """
    Application configuration.

    Example:
        # Using environment variables
        config = AppConfig()

        # Or using direct parameters
        config = AppConfig(
            environment="Development",
            sqlite_connection="sqlite+aiosqlite:///./mclaren.db",
        )
    """

    def __init__(
        self,
        environment: str | None = None,
        sqlite_connection: str | None = None,
        cloud_sql_connection: str | None = None,
        settings_file: str | None = None,
        enforce_https: bool | None = None,
        create_schema: bool | None = None,
        seed_data: bool | None = None,
        pool_size: int | None = None,
        max_overflow: int | None = None,
        log_level: str | None = None,
    ):
        """
        Initialize configuration.

        Args:
            environment: Deployment environment (defaults to MCLAREN_ENVIRONMENT,
                then ASPNETCORE_ENVIRONMENT, then "Development")
            sqlite_connection: Embedded database URL (defaults to SQLITE_CONNECTION)
            cloud_sql_connection: Cloud database URL (defaults to AZURE_SQL_CONNECTION)
            settings_file: Optional JSON settings file with a ConnectionStrings section
            enforce_https: Redirect plain HTTP requests (defaults to MCLAREN_ENFORCE_HTTPS)
            create_schema: Create missing tables at startup (defaults to MCLAREN_CREATE_SCHEMA)
            seed_data: Seed initial data at startup (defaults to MCLAREN_SEED_DATA)
            pool_size: Cloud connection pool size (defaults to DB_POOL_SIZE or 5)
            max_overflow: Cloud pool overflow (defaults to DB_MAX_OVERFLOW or 10)
            log_level: Root log level (defaults to LOG_LEVEL or INFO)
        """
        self.environment = (
            environment
            or os.getenv(ENVIRONMENT_ENV_VAR)
            or os.getenv(LEGACY_ENVIRONMENT_ENV_VAR)
            or DEVELOPMENT_ENVIRONMENT
        )
        self.settings_file = settings_file or os.getenv("MCLAREN_SETTINGS_FILE") or None
        file_strings = load_connection_strings(self.settings_file)

        self.sqlite_connection = (
            sqlite_connection
            or os.getenv(SQLITE_CONNECTION_ENV_VAR)
            or file_strings.get(SQLITE_CONNECTION_NAME)
            or DEFAULT_SQLITE_CONNECTION
        )
        self.cloud_sql_connection = (
            cloud_sql_connection
            or os.getenv(CLOUD_SQL_CONNECTION_ENV_VAR)
            or file_strings.get(CLOUD_SQL_CONNECTION_NAME)
            or ""
        )
        self.enforce_https = (
            enforce_https
            if enforce_https is not None
            else _env_bool("MCLAREN_ENFORCE_HTTPS", True)
        )
        self.create_schema = (
            create_schema
            if create_schema is not None
            else _env_bool("MCLAREN_CREATE_SCHEMA", True)
        )
        self.seed_data = (
            seed_data if seed_data is not None else _env_bool("MCLAREN_SEED_DATA", False)
        )
        self.pool_size = (
            pool_size if pool_size is not None else _env_int("DB_POOL_SIZE", DEFAULT_POOL_SIZE)
        )
        self.max_overflow = (
            max_overflow
            if max_overflow is not None
            else _env_int("DB_MAX_OVERFLOW", DEFAULT_MAX_OVERFLOW)
        )
        self.log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()

    @property
    def is_production(self) -> bool:
        """Whether the process runs in the production environment."""
        return self.environment == PRODUCTION_ENVIRONMENT

    @property
    def is_development(self) -> bool:
        """Whether the process runs in the development environment."""
        return self.environment == DEVELOPMENT_ENVIRONMENT

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if self.is_production:
            if not self.cloud_sql_connection:
                raise ConfigurationError(
                    f"{CLOUD_SQL_CONNECTION_ENV_VAR} is required in the "
                    f"{PRODUCTION_ENVIRONMENT} environment",
                    config_key=CLOUD_SQL_CONNECTION_ENV_VAR,
                )
            _check_scheme(self.cloud_sql_connection, CLOUD_SQL_CONNECTION_ENV_VAR)
        else:
            if not self.sqlite_connection:
                raise ConfigurationError(
                    f"{SQLITE_CONNECTION_ENV_VAR} must not be empty",
                    config_key=SQLITE_CONNECTION_ENV_VAR,
                )
            _check_scheme(self.sqlite_connection, SQLITE_CONNECTION_ENV_VAR)

        if self.pool_size < 1:
            raise ConfigurationError(
                f"pool_size must be >= 1, got {self.pool_size}", config_key="DB_POOL_SIZE"
            )

        if self.max_overflow < 0:
            raise ConfigurationError(
                f"max_overflow must be >= 0, got {self.max_overflow}",
                config_key="DB_MAX_OVERFLOW",
            )


def _check_scheme(url: str, key: str) -> None:
    scheme = url.split("://", 1)[0] if "://" in url else ""
    if scheme not in SUPPORTED_URL_SCHEMES:
        raise ConfigurationError(
            f"Unsupported database URL scheme '{scheme}'", config_key=key, config_value=scheme
        )
