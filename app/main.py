from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from datastore.history_store import build_default_store
from logging_config import configure_logging
from services.pipeline import build_default_pipeline
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    pipeline = build_default_pipeline()
    if get_settings().autostart:
        pipeline.start_pipeline()
    else:
        logger.info("Pipeline autostart disabled")
    try:
        yield
    finally:
        pipeline.shutdown()
        build_default_pipeline.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Temperature Ingestion Service",
        description="Periodic sensor ingestion with bounded in-memory history and quality statistics.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
