"""
Init-db command for CLI.

Creates the schema of the selected backend and optionally seeds it.
"""

import asyncio

import click

from ...database import DatabaseManager, select_storage
from ...exceptions import InitializationError
from ...observability import configure_logging
from ...seeding import seed_initial_data
from ..utils import load_config


async def _init_db(environment: str | None, seed: bool, reset: bool) -> dict[str, int]:
    config = load_config(environment)
    configure_logging(config.log_level)
    database = DatabaseManager(
        select_storage(config.environment, config),
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
    )
    await database.initialize()
    try:
        if reset:
            await database.drop_schema()
        await database.create_schema()
        if not seed:
            return {}
        async with database.create_context() as context:
            return await seed_initial_data(context)
    finally:
        await database.shutdown()


@click.command("init-db")
@click.option("--environment", "-e", default=None, help="Override MCLAREN_ENVIRONMENT")
@click.option("--seed", is_flag=True, help="Insert the initial data set into empty tables")
@click.option("--reset", is_flag=True, help="Drop every table before creating the schema")
def init_db(environment: str | None, seed: bool, reset: bool) -> None:
    """
    Create the database schema.

    Examples:
        mclaren-api init-db
        mclaren-api init-db --seed
        mclaren-api init-db --environment Production
    """
    try:
        results = asyncio.run(_init_db(environment, seed, reset))
    except InitializationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(click.style("Schema ready", fg="green"))
    for table, count in results.items():
        click.echo(f"  {table}: {count} row(s) seeded")
