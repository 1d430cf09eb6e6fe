"""
Database layer.

Provides storage provider selection, engine lifecycle management and the
request-scoped DataContext used by repositories.
"""

from .connection import DatabaseManager
from .context import DataContext, EntitySet
from .providers import StorageConfiguration, StorageProvider, select_storage, to_async_url

__all__ = [
    "DatabaseManager",
    "DataContext",
    "EntitySet",
    "StorageConfiguration",
    "StorageProvider",
    "select_storage",
    "to_async_url",
]
