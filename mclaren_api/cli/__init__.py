"""
Command-line interface for the McLaren API.

Usage:
    mclaren-api serve --port 8000
    mclaren-api init-db --seed
    mclaren-api routes
"""

from .main import cli

__all__ = ["cli"]
