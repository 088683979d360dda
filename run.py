"""Entry point for the TechTrove API server.

Serves the FastAPI application with Uvicorn.  Host and port come from
the ``HOST`` and ``PORT`` environment variables (defaults ``0.0.0.0``
and ``5000``); MongoDB credentials are read from ``DB_USER`` and
``DB_PASS`` or a full ``MONGODB_URI``.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from techtrove_api.app.core.config import settings
from techtrove_api.app.main import app


async def main() -> None:
    config = Config(app=app, host=settings.host, port=settings.port, reload=False, log_level=settings.log_level.lower())
    server = Server(config)
    logging.getLogger(__name__).info("Server is running on port: %s", settings.port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
