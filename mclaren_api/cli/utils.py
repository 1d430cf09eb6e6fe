"""
Utility functions for CLI commands.
"""

import click

from ..config import AppConfig
from ..exceptions import ConfigurationError


def load_config(environment: str | None = None) -> AppConfig:
    """
    Build and validate the configuration for a command.

    Raises:
        click.ClickException: If the configuration is invalid
    """
    try:
        config = AppConfig(environment=environment)
        config.validate()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    return config
