"""
Application lifecycle event handlers.

Checks that the server signing keys are provisioned at startup.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from core.keystore import get_key_store

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info(f"Starting {settings.APP_NAME} API...")

        key_store = get_key_store()
        if key_store.keys_exist():
            logger.info("signing_keys_loaded", keys_dir=str(key_store.private_key_path.parent))
        else:
            # Verification and issuing will fail until keys are generated
            logger.warning(
                "signing_keys_missing",
                keys_dir=str(key_store.private_key_path.parent),
                message="Run: python -m scripts.generate_keys",
            )

        logger.info(f"{settings.APP_NAME} API started successfully")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info(f"{settings.APP_NAME} API shutdown complete")

    return stop_app
