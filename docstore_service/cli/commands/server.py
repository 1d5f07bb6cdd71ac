"""Server management commands."""

import click
import uvicorn

from docstore_service.cli.utils import info
from docstore_service.core.settings import get_app_settings


@click.group(name="server")
def server() -> None:
    """Server management commands."""


@server.command(name="run")
@click.option(
    "--host",
    default=None,
    help="Host to bind (default: APP_HOST)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind (default: APP_PORT)",
)
@click.option(
    "--reload/--no-reload",
    default=False,
    help="Enable auto-reload on code changes",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug", "trace"]),
    help="Uvicorn log level",
)
def run(host: str | None, port: int | None, reload: bool, log_level: str) -> None:
    """Run the API and WebSocket server with uvicorn.

    A single worker is always used: event buffers and connections live
    in process memory.
    """
    settings = get_app_settings()
    host = host or settings.host
    port = port or settings.port

    info(f"Server will run at: http://{host}:{port}")
    info(f"Environment: {settings.environment}")

    uvicorn.run(
        "docstore_service.app.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=1,
        log_level=log_level,
    )
