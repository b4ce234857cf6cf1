"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from itemforge.api.health import router as health_router
from itemforge.api.items import router as items_router
from itemforge.config import settings
from itemforge.core.event_bus import EventBus
from itemforge.core.generation import (
    GenerationCache,
    ItemFactory,
    RngSource,
    load_generation_config,
)
from itemforge.core.logging import get_logger, setup_logging
from itemforge.services.item_generation_service import ItemGenerationService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


def build_generation_service(event_bus: EventBus) -> ItemGenerationService:
    """Wire config -> factory -> cache -> service from settings."""
    config = load_generation_config(settings.GENERATION_CONFIG_PATH)
    rng_source = RngSource(settings.GENERATION_SEED)
    factory = ItemFactory(
        rarity_table=config.rarity_table,
        catalog=config.catalog,
        affix_library=config.affix_library,
        level_scaling=config.level_scaling,
    )
    cache = GenerationCache(
        factory,
        rng_source=rng_source,
        growth_mode=settings.CACHE_GROWTH_MODE,
        preseed_on_miss=settings.CACHE_PRESEED_ON_MISS,
        max_templates=settings.CACHE_MAX_TEMPLATES,
        workers=settings.CACHE_WORKERS,
    )
    return ItemGenerationService(
        factory=factory,
        cache=cache,
        event_bus=event_bus,
        rng_source=rng_source,
        prewarm=config.prewarm,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Initializing item generation...")
    event_bus = EventBus()
    service = build_generation_service(event_bus)
    app.state.event_bus = event_bus
    app.state.generation_service = service
    logger.info("Item generation initialized.")

    if settings.PREWARM_ON_STARTUP:
        service.warm_all_async()

    yield

    logger.info("Shutting down...")
    service.shutdown()


app = FastAPI(title="ItemForge", lifespan=lifespan)

app.include_router(health_router)
app.include_router(items_router)
