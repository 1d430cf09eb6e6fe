"""
Routes command for CLI.

Prints the API version map and every mounted versioned route.
"""

import json

import click
from fastapi.routing import APIRoute

from ...api import CONTROLLERS_PACKAGE
from ...routing import ApiVersionMap, group_name


@click.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["pretty", "json"]),
    default="pretty",
    show_default=True,
)
def routes(output_format: str) -> None:
    """
    Show the API version map and its routes.

    Examples:
        mclaren-api routes
        mclaren-api routes --format json
    """
    version_map = ApiVersionMap.discover(CONTROLLERS_PACKAGE)
    listing = []
    for controller in version_map.controllers:
        for route in controller.router.routes:
            if isinstance(route, APIRoute):
                listing.append(
                    {
                        "version": controller.group,
                        "methods": sorted(route.methods),
                        "path": f"{controller.prefix}{route.path}",
                    }
                )

    if output_format == "json":
        click.echo(
            json.dumps(
                {"versions": dict(version_map.namespaces), "routes": listing},
                indent=2,
            )
        )
        return

    for namespace, version in version_map.namespaces.items():
        click.echo(f"{namespace} -> {group_name(version)}")
    for entry in listing:
        click.echo(f"  {','.join(entry['methods']):<7} {entry['path']}")
