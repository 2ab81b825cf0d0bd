"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from past_forward.api.routes import router
from past_forward.app_logging import configure_logging
from past_forward.containers import AppContainer
from past_forward.eras import ERA_DESCRIPTIONS, ERAS


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting with batch concurrency %s",
            app.state.container.settings.batch_concurrency,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/eras")
    async def list_eras() -> dict[str, object]:
        """Return the selectable eras with their descriptions."""
        return {
            "eras": [
                {"key": era, "description": ERA_DESCRIPTIONS[era]} for era in ERAS
            ]
        }

    return app
