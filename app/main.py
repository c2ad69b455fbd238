from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import health_router, register_exception_handlers, router
from datastore.memory_store import build_default_store
from logging_config import configure_logging
from services.registry import build_default_registry
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_registry()
    logger.info("Farm registry ready")
    try:
        yield
    finally:
        # State is volatile: a restarted app starts from an empty store.
        build_default_registry.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title=settings.service_name,
        description="In-memory registry of farms, their sensors and sensor readings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(health_router)
    register_exception_handlers(app)
    return app

app = create_app()
