from __future__ import annotations

import logging

from fastapi import FastAPI

from .api.routes import router as api_router
from .core.config import Settings, get_settings
from .services.devices import fake_device_mode

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app; explicit ``settings`` replace the cached ones for every route."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if fake_device_mode():
        logger.warning("FAKE_DEVICE set; device nodes are synthesized, not read from the host.")
    logger.info(
        "Plugin %s (idx %s) running in %s mode",
        settings.plugin_name,
        settings.plugin_idx,
        settings.runtime_mode.value,
    )

    app = FastAPI(title=settings.app_name)
    app.include_router(api_router, prefix=settings.api_prefix)
    app.dependency_overrides[get_settings] = lambda: settings
    return app
