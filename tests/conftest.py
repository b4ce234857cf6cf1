"""Shared test fixtures."""

import random
from typing import Any

import pytest

from itemforge.core.event_bus import EventBus
from itemforge.core.generation import (
    GenerationCache,
    GenerationConfig,
    GrowthMode,
    InstanceIdSource,
    ItemFactory,
    RngSource,
    parse_generation_config,
)
from itemforge.services.item_generation_service import ItemGenerationService


def make_raw_config() -> dict[str, Any]:
    """Small generation config: 3 tiers, 2 weapons, 1 armor material x 2 slots."""
    return {
        "level_scaling_constant": 0.1,
        "rarity_tiers": [
            {
                "rank": 0,
                "name": "Common",
                "weight": 70,
                "stat_multiplier": 1.0,
                "affix_count": [0, 0],
                "level_range": [1, 5],
            },
            {
                "rank": 1,
                "name": "Uncommon",
                "weight": 25,
                "stat_multiplier": 1.5,
                "affix_count": [1, 2],
                "level_range": [5, 10],
                "adjective": "Fine",
            },
            {
                "rank": 2,
                "name": "Rare",
                "weight": 5,
                "stat_multiplier": 2.0,
                "affix_count": [5, 6],
                "level_range": [10, 20],
                "adjective": "Superior",
            },
        ],
        "weapons": [
            {
                "sub_type": "sword",
                "name": "Sword",
                "stats": {
                    "damage": {"min": 10, "max": 20},
                    "attack_speed": {"min": 1.0, "max": 1.5, "precision": 2, "scaled": False},
                },
            },
            {
                "sub_type": "bow",
                "name": "Bow",
                "stats": {
                    "damage": {"min": 8, "max": 16},
                    "range": {"min": 20, "max": 30, "precision": 1, "scaled": False},
                },
            },
        ],
        "armor": {
            "slots": {"head": 1.0, "chest": 2.0},
            "materials": [
                {
                    "sub_type": "leather",
                    "name": "Leather",
                    "stats": {"armor_value": {"min": 5, "max": 10}},
                }
            ],
        },
        "affixes": [
            {
                "affix_id": "sharp",
                "affix_type": "bonus_damage",
                "fragment": "Sharp",
                "position": "prefix",
                "stat": "damage",
                "kinds": ["weapon"],
                "min_rarity": 0,
                "value": {"min": 1, "max": 5},
            },
            {
                "affix_id": "vicious",
                "affix_type": "bonus_damage",
                "fragment": "Vicious",
                "position": "prefix",
                "stat": "damage",
                "kinds": ["weapon"],
                "min_rarity": "Uncommon",
                "value": {"min": 5, "max": 10},
            },
            {
                "affix_id": "of_the_bear",
                "affix_type": "strength",
                "fragment": "of the Bear",
                "position": "suffix",
                "stat": "strength",
                "kinds": ["weapon", "armor"],
                "min_rarity": 0,
                "value": {"min": 1, "max": 3},
            },
            {
                "affix_id": "of_haste",
                "affix_type": "attack_speed",
                "fragment": "of Haste",
                "position": "suffix",
                "stat": "attack_speed",
                "kinds": ["weapon"],
                "min_rarity": 1,
                "value": {"min": 0.05, "max": 0.15, "precision": 2},
            },
            {
                "affix_id": "fortified",
                "affix_type": "bonus_armor",
                "fragment": "Fortified",
                "position": "prefix",
                "stat": "armor_value",
                "kinds": ["armor"],
                "min_rarity": 1,
                "value": {"min": 2, "max": 4},
            },
        ],
        "prewarm": [
            {"kind": "weapon", "rarity": "Common", "count": 5},
            {"kind": "armor", "rarity": 1, "count": 3},
        ],
    }


@pytest.fixture()
def raw_config() -> dict[str, Any]:
    return make_raw_config()


@pytest.fixture()
def generation_config(raw_config: dict[str, Any]) -> GenerationConfig:
    return parse_generation_config(raw_config)


@pytest.fixture()
def factory(generation_config: GenerationConfig) -> ItemFactory:
    """Factory with its own id sequence (test-000001, ...)"""
    return ItemFactory(
        rarity_table=generation_config.rarity_table,
        catalog=generation_config.catalog,
        affix_library=generation_config.affix_library,
        level_scaling=generation_config.level_scaling,
        id_source=InstanceIdSource(prefix="test"),
    )


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def cache(factory: ItemFactory):
    """Synchronous-growth cache; workers shut down after the test."""
    cache = GenerationCache(
        factory, rng_source=RngSource(42), growth_mode=GrowthMode.SYNC, workers=1
    )
    try:
        yield cache
    finally:
        cache.shutdown()


@pytest.fixture()
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def service(factory: ItemFactory, cache: GenerationCache, event_bus: EventBus, generation_config):
    return ItemGenerationService(
        factory=factory,
        cache=cache,
        event_bus=event_bus,
        rng_source=RngSource(7),
        prewarm=generation_config.prewarm,
    )
