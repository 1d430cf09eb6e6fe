"""
Storage provider selection.

Chooses the concrete persistence backend from the deployment environment.
The result is computed once at startup and injected everywhere else; nothing
downstream re-reads the environment.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from ..config import AppConfig
from ..constants import (
    CLOUD_SQL_CONNECTION_NAME,
    PRODUCTION_ENVIRONMENT,
    SQLITE_CONNECTION_NAME,
)

logger = logging.getLogger(__name__)

# Plain URLs are upgraded to the async driver for their dialect
_ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "postgresql": "postgresql+asyncpg",
    "postgres": "postgresql+asyncpg",
    "mssql": "mssql+aioodbc",
}


class StorageProvider(str, Enum):
    """Concrete storage backends known to the API."""

    EMBEDDED_SQLITE = "sqlite"
    CLOUD_SQL = "cloud_sql"


@dataclass(frozen=True)
class StorageConfiguration:
    """
    How to reach the active backend.

    Attributes:
        provider: Backend kind
        url: Async SQLAlchemy connection URL
        connection_name: Name of the connection string it was read from
    """

    provider: StorageProvider
    url: str
    connection_name: str

    @property
    def is_embedded(self) -> bool:
        return self.provider == StorageProvider.EMBEDDED_SQLITE

    @property
    def safe_url(self) -> str:
        """URL with credentials stripped, for logging."""
        if "@" not in self.url:
            return self.url
        scheme, _, rest = self.url.partition("://")
        return f"{scheme}://***@{rest.split('@', 1)[1]}"


def to_async_url(url: str) -> str:
    """Rewrite a plain database URL to use the async driver of its dialect."""
    scheme, sep, rest = url.partition("://")
    if not sep or "+" in scheme:
        return url
    driver = _ASYNC_DRIVERS.get(scheme)
    if driver is None:
        return url
    return f"{driver}://{rest}"


def select_storage(environment: str, config: AppConfig) -> StorageConfiguration:
    """
    Select the storage configuration for an environment.

    "Production" maps to the managed cloud database; any other value maps to
    the embedded SQLite file.

    Args:
        environment: Deployment environment flag
        config: Application configuration holding both connection strings

    Returns:
        The storage configuration for this process
    """
    if environment == PRODUCTION_ENVIRONMENT:
        selected = StorageConfiguration(
            provider=StorageProvider.CLOUD_SQL,
            url=to_async_url(config.cloud_sql_connection),
            connection_name=CLOUD_SQL_CONNECTION_NAME,
        )
    else:
        selected = StorageConfiguration(
            provider=StorageProvider.EMBEDDED_SQLITE,
            url=to_async_url(config.sqlite_connection),
            connection_name=SQLITE_CONNECTION_NAME,
        )

    logger.info(
        f"Selected storage provider '{selected.provider.value}' for environment "
        f"'{environment}' ({selected.safe_url})"
    )
    return selected
