"""Entry point - starts the FastAPI server."""

import asyncio
import logging
import signal

import structlog
import uvicorn

from rolegate_service.rest.app import create_app
from rolegate_service.settings import settings

logger = structlog.get_logger()


async def main() -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level.upper())
        ),
    )

    app = create_app()
    config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=settings.rest_port,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)

    logger.info("starting_service", rest_port=settings.rest_port)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: setattr(server, "should_exit", True))

    await server.serve()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
