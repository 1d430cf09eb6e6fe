"""
Serve command for CLI.

Runs the API under uvicorn.
"""

import click
import uvicorn


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Restart on code changes (development only)")
@click.option("--log-level", default="info", show_default=True, help="uvicorn log level")
def serve(host: str, port: int, reload: bool, log_level: str) -> None:
    """
    Serve the API.

    Configuration comes from the environment (MCLAREN_ENVIRONMENT,
    SQLITE_CONNECTION, AZURE_SQL_CONNECTION, ...).

    Examples:
        mclaren-api serve
        mclaren-api serve --host 0.0.0.0 --port 8080
    """
    uvicorn.run(
        "mclaren_api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
