"""Entry point for the cocktail catalog API.

Starts the FastAPI application with Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Configuration such as the Supabase URL and key, the log level and the
listen address should be placed in a `.env` file in the same
directory.  See `.env.example` for a list of supported variables.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from cocktail_catalog_api.app.core.config import settings
from cocktail_catalog_api.app.main import app


async def run_api() -> None:
    """Serve the API on ``API_HOST``:``API_PORT`` (default ``0.0.0.0:8000``)."""
    config = Config(
        app=app,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


async def main() -> None:
    try:
        await run_api()
    except Exception as exc:
        logging.getLogger(__name__).exception("API server stopped", exc_info=exc)
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
