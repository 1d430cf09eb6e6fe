"""
Main CLI entry point.
"""

import click

from .commands.init_db import init_db
from .commands.routes import routes
from .commands.serve import serve


@click.group()
@click.version_option(package_name="mclaren-api")
def cli() -> None:
    """McLaren API - versioned REST API for McLaren grand prixes, cars and drivers."""


cli.add_command(serve)
cli.add_command(init_db)
cli.add_command(routes)


if __name__ == "__main__":
    cli()
