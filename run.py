"""Entry point for serving the CarVault API.

Starts the FastAPI application with Uvicorn.  Intended to be executed
from the project root, e.g. under Docker or a process manager, where
you only specify a single Python file to run.

Configuration is read from environment variables (see
``carvault_api/app/core/config.py``); host and port come from
``HOST`` and ``PORT``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from carvault_api.app.core.config import settings
from carvault_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted.

    Host and port are read from environment variables `HOST` and
    `PORT`. Defaults are `0.0.0.0` and `8000`.
    """
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    # Uvicorn's loggers propagate to the handlers set up by create_app.
    config = Config(
        app=app,
        host=host,
        port=port,
        reload=False,
        log_config=None,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info("Starting CarVault API on %s:%s", host, port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        pass
