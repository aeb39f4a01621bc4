"""
Process entry point: ``python -m app.server``.
"""

import logging
import sys

import uvicorn

from app.core.config import config

logger = logging.getLogger("app.server")


def configure_logging() -> None:
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _log_uncaught(exc_type, exc_value, exc_traceback) -> None:
    # The interpreter still exits with status 1 afterwards
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))


def main() -> None:
    configure_logging()
    sys.excepthook = _log_uncaught

    if not config.jwt_secret:
        logger.warning("JWT_SECRET is not set; login and protected routes will fail")

    logger.info(f"Starting server on {config.host}:{config.port} ({config.environment})")
    uvicorn.run(
        "app.main:app",
        host=config.host,
        port=config.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
