"""API request/response schemas."""

from typing import Optional, Union

from pydantic import BaseModel, Field


# === Request Schemas ===


class GenerateRequest(BaseModel):
    """Direct generation request"""

    kind: str = Field(..., description="Item kind: weapon, armor")
    rarity: Optional[Union[int, str]] = Field(
        None, description="Rarity rank or tier name; omitted = weighted draw"
    )
    level: Optional[int] = Field(None, ge=0, description="Item level; omitted = tier band")


class DropRequest(BaseModel):
    """Cached (get-or-generate) request"""

    kind: str = Field(..., description="Item kind: weapon, armor")
    rarity: Union[int, str] = Field(..., description="Rarity rank or tier name")
    level: Optional[int] = Field(None, ge=0, description="Re-level the handed-out item")


class WarmRequest(BaseModel):
    """Bucket pre-warm request"""

    kind: str
    rarity: Union[int, str]
    count: int = Field(..., ge=0, le=10000)


# === Response Schemas ===


class AffixInfo(BaseModel):
    """Applied affix"""

    affix_id: str
    affix_type: str
    stat: str
    value: float


class ItemResponse(BaseModel):
    """Generated item"""

    instance_id: str
    name: str
    kind: str
    archetype_id: str
    sub_type: str
    rarity: int
    rarity_name: str
    level: int
    stats: dict[str, float]
    effective_stats: dict[str, float]
    affixes: list[AffixInfo] = []
    warnings: list[str] = []


class CacheStatsResponse(BaseModel):
    """Bucket counters"""

    kind: str
    rarity: int
    hits: int
    misses: int
    template_count: int
    total_generated: int
    state: str


class WarmResponse(BaseModel):
    """Warm result"""

    added: int
    stats: CacheStatsResponse


class RarityTierInfo(BaseModel):
    """Rarity tier table row"""

    rank: int
    name: str
    weight: float
    stat_multiplier: float
    affix_count: list[int]
    level_range: list[int]
    adjective: str = ""


class ErrorResponse(BaseModel):
    """Error response"""

    success: bool = False
    error: str
    detail: Optional[str] = None
