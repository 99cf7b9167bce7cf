"""Run the API with uvicorn: ``python -m app``."""

from __future__ import annotations

import logging

import uvicorn

from app.core.config import settings

logger = logging.getLogger(__name__)


def main() -> None:
    from app.main import app

    logger.info(
        "server.starting",
        extra={"url": f"http://{settings.app.host}:{settings.app.port}"},
    )
    # log_config=None keeps the JSON logging configured by the app factory
    uvicorn.run(app, host=settings.app.host, port=settings.app.port, log_config=None)


if __name__ == "__main__":
    main()
