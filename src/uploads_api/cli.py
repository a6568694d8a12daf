# cli.py
import logging
from typing import Optional

import click
import uvicorn

from uploads_api.main import configure_logging, create_app
from uploads_api.settings import get_settings

# Configure logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for the Uploads API"""
    pass


@cli.command()
@click.option("--host", default=None, help="API host address (defaults to HOST)")
@click.option("--port", default=None, type=int, help="API port (defaults to PORT)")
@click.option("--reload/--no-reload", default=False, help="Enable/disable auto-reload for development")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Start the HTTP server"""
    settings = get_settings()
    configure_logging(settings.log_level)

    host = host or settings.host
    port = port or settings.port
    logger.info(f"Starting Uploads API on {host}:{port} (docs at {settings.base_url}/docs)")

    if reload:
        # reload needs an import string; the factory reads settings again in the child process
        uvicorn.run(
            "uploads_api.main:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level=settings.log_level,
        )
    else:
        # uvicorn exits with status 1 when the socket cannot be bound and
        # drains in-flight requests on SIGINT/SIGTERM before returning
        uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level)
    logger.info("Server closed")


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    print("Current Configuration:")
    for key, value in settings.summary().items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    cli()
