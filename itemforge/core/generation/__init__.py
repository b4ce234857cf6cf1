"""Procedural item generation Core: pure Python, no web or DB"""

from .errors import ConfigurationError, ExhaustionWarning
from .models import (
    AffixDefinition,
    AffixPosition,
    ArchetypeDefinition,
    ItemInstance,
    ItemKind,
    RarityTier,
    ResolvedAffix,
    StatRange,
)
from .rng import InstanceIdSource, RngSource
from .rarity import RarityTable
from .archetypes import ArchetypeCatalog
from .affixes import AffixDraw, AffixLibrary
from .factory import ItemFactory
from .cache import BucketState, CacheCheckout, CacheStats, GenerationCache, GrowthMode
from .loader import (
    DEFAULT_CONFIG_PATH,
    GenerationConfig,
    PrewarmEntry,
    load_generation_config,
    parse_generation_config,
)

__all__ = [
    "ConfigurationError",
    "ExhaustionWarning",
    "AffixDefinition",
    "AffixPosition",
    "ArchetypeDefinition",
    "ItemInstance",
    "ItemKind",
    "RarityTier",
    "ResolvedAffix",
    "StatRange",
    "InstanceIdSource",
    "RngSource",
    "RarityTable",
    "ArchetypeCatalog",
    "AffixDraw",
    "AffixLibrary",
    "ItemFactory",
    "BucketState",
    "CacheCheckout",
    "CacheStats",
    "GenerationCache",
    "GrowthMode",
    "DEFAULT_CONFIG_PATH",
    "GenerationConfig",
    "PrewarmEntry",
    "load_generation_config",
    "parse_generation_config",
]
