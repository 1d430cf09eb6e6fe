"""
McLaren API

Versioned REST API for McLaren grand prixes, cars and drivers, backed by an
embedded SQLite database in development and a managed cloud SQL database in
production.
"""

# Composition root
from .app import build_container, create_app
# Configuration
from .config import AppConfig
# Errors
from .exceptions import (AuthorizationError, ConfigurationError,
                         InitializationError, McLarenAPIError,
                         MethodNotAllowedError, NotAcceptableError,
                         NotFoundError, RoutingError, StorageError,
                         ValidationError)

__version__ = "0.9.0"

__all__ = [
    # Composition root
    "create_app",
    "build_container",
    "AppConfig",
    # Errors
    "McLarenAPIError",
    "NotFoundError",
    "ValidationError",
    "RoutingError",
    "MethodNotAllowedError",
    "AuthorizationError",
    "NotAcceptableError",
    "StorageError",
    "ConfigurationError",
    "InitializationError",
]
