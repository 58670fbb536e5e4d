"""FastAPI application factory."""

import logging

from fastapi import FastAPI

from postseason.api.playoffs import router as playoffs_router
from postseason.config import Settings
from postseason.core.controller import PlayoffController
from postseason.core.event_bus import EventBus

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    controller: PlayoffController | None = None,
) -> FastAPI:
    """Create and configure the postseason FastAPI application.

    A controller passed in keeps its own event bus (which may be None);
    otherwise a fresh bus and controller are built from ``settings``.
    """
    settings = settings or Settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="NBA Postseason",
        version="0.1.0",
        description="Play-in, conference brackets and Finals progression engine",
        docs_url="/docs" if settings.postseason_env != "production" else None,
    )
    if controller is None:
        controller = PlayoffController(event_bus=EventBus(), settings=settings)
    app.state.settings = settings
    app.state.controller = controller
    app.state.event_bus = controller.event_bus

    app.include_router(playoffs_router)

    logger.info("app_created env=%s", settings.postseason_env)
    return app
