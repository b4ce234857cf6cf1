"""Item generation API endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from itemforge.api.schemas import (
    CacheStatsResponse,
    DropRequest,
    ErrorResponse,
    GenerateRequest,
    ItemResponse,
    RarityTierInfo,
    WarmRequest,
    WarmResponse,
)
from itemforge.core.generation.cache import CacheStats
from itemforge.core.generation.errors import ConfigurationError
from itemforge.core.generation.models import ItemInstance
from itemforge.core.logging import get_logger
from itemforge.services.item_generation_service import ItemGenerationService

logger = get_logger(__name__)

router = APIRouter(prefix="/items", tags=["items"])


def get_generation_service(request: Request) -> ItemGenerationService:
    """ItemGenerationService from app state (dependency injection)"""
    service: ItemGenerationService = request.app.state.generation_service
    return service


def _item_response(item: ItemInstance) -> ItemResponse:
    return ItemResponse(**item.to_dict())


def _stats_response(kind: str, rarity: int, stats: CacheStats) -> CacheStatsResponse:
    return CacheStatsResponse(kind=kind, rarity=rarity, **stats.to_dict())


def _bad_request(error: ConfigurationError) -> JSONResponse:
    """ConfigurationError -> 400 with an ErrorResponse body"""
    body = ErrorResponse(error="configuration_error", detail=str(error))
    return JSONResponse(status_code=400, content=body.model_dump())


@router.get("/rarities", response_model=list[RarityTierInfo])
def list_rarities(
    service: ItemGenerationService = Depends(get_generation_service),
) -> list[RarityTierInfo]:
    """Configured rarity tiers, ascending rank"""
    return [
        RarityTierInfo(
            rank=t.rank,
            name=t.name,
            weight=t.weight,
            stat_multiplier=t.stat_multiplier,
            affix_count=[t.affix_min, t.affix_max],
            level_range=[t.level_min, t.level_max],
            adjective=t.adjective,
        )
        for t in service.rarity_tiers
    ]


@router.post(
    "/generate",
    response_model=ItemResponse,
    responses={400: {"model": ErrorResponse}},
)
def generate_item(
    request: GenerateRequest,
    service: ItemGenerationService = Depends(get_generation_service),
) -> ItemResponse | JSONResponse:
    """Generate a fresh item, bypassing the cache"""
    try:
        item = service.generate(request.kind, request.rarity, request.level)
    except ConfigurationError as e:
        logger.warning("Rejected generate request: %s", e)
        return _bad_request(e)
    return _item_response(item)


@router.post(
    "/drop",
    response_model=ItemResponse,
    responses={400: {"model": ErrorResponse}},
)
def drop_item(
    request: DropRequest,
    service: ItemGenerationService = Depends(get_generation_service),
) -> ItemResponse | JSONResponse:
    """Serve an item through the cache (get-or-generate)"""
    try:
        item = service.get_or_generate_item(request.rarity, request.kind, request.level)
    except ConfigurationError as e:
        logger.warning("Rejected drop request: %s", e)
        return _bad_request(e)
    return _item_response(item)


@router.post(
    "/cache/warm",
    response_model=WarmResponse,
    responses={400: {"model": ErrorResponse}},
)
def warm_cache(
    request: WarmRequest,
    service: ItemGenerationService = Depends(get_generation_service),
) -> WarmResponse | JSONResponse:
    """Add templates to one bucket"""
    try:
        added = service.warm_pool(request.kind, request.rarity, request.count)
        stats = service.get_cache_stats(request.kind, request.rarity)
        rank = service.factory.rarity_table.resolve(request.rarity).rank
    except ConfigurationError as e:
        return _bad_request(e)
    return WarmResponse(added=added, stats=_stats_response(request.kind, rank, stats))


@router.get(
    "/cache/stats",
    response_model=CacheStatsResponse,
    responses={400: {"model": ErrorResponse}},
)
def cache_stats(
    kind: str = Query(..., description="Item kind"),
    rarity: str = Query(..., description="Rarity rank or tier name"),
    service: ItemGenerationService = Depends(get_generation_service),
) -> CacheStatsResponse | JSONResponse:
    """Hits / misses / template count of one bucket"""
    try:
        stats = service.get_cache_stats(kind, rarity)
        rank = service.factory.rarity_table.resolve(rarity).rank
    except ConfigurationError as e:
        return _bad_request(e)
    return _stats_response(kind, rank, stats)
