"""Item generation Service: external entry points over Factory + Cache, EventBus notifications

Consumers (loot policy, world-drop spawner, admin editors) receive this
service by injection; nothing here is a global singleton.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Iterable, Optional

from itemforge.core.event_bus import EventBus, ForgeEvent
from itemforge.core.event_types import EventTypes
from itemforge.core.generation.cache import CacheCheckout, CacheStats, GenerationCache
from itemforge.core.generation.factory import ItemFactory
from itemforge.core.generation.loader import PrewarmEntry
from itemforge.core.generation.models import ItemInstance, ItemKind, RarityTier, coerce_kind
from itemforge.core.generation.rarity import RarityRef
from itemforge.core.generation.rng import RngSource
from itemforge.core.logging import get_logger

logger = get_logger(__name__)

SOURCE = "item_generation_service"


class ItemGenerationService:
    """Generation + cache operations"""

    def __init__(
        self,
        factory: ItemFactory,
        cache: GenerationCache,
        event_bus: EventBus,
        rng_source: Optional[RngSource] = None,
        prewarm: Iterable[PrewarmEntry] = (),
    ):
        self._factory = factory
        self._cache = cache
        self._bus = event_bus
        self._rng_source = rng_source or RngSource()
        self._prewarm: tuple[PrewarmEntry, ...] = tuple(prewarm)

    @property
    def factory(self) -> ItemFactory:
        return self._factory

    @property
    def cache(self) -> GenerationCache:
        return self._cache

    @property
    def prewarm_plan(self) -> tuple[PrewarmEntry, ...]:
        return self._prewarm

    @property
    def rarity_tiers(self) -> tuple[RarityTier, ...]:
        return self._factory.rarity_table.tiers

    # === Direct generation ===

    def select_rarity(self) -> RarityTier:
        """Weighted tier draw."""
        return self._factory.rarity_table.select_rarity(self._rng_source.spawn())

    def generate(
        self,
        kind: ItemKind | str,
        rarity: Optional[RarityRef] = None,
        level: Optional[int] = None,
    ) -> ItemInstance:
        """Factory generation, bypassing the cache. rarity=None draws a weighted tier."""
        rng = self._rng_source.spawn()
        if rarity is None:
            rarity = self._factory.rarity_table.select_rarity(rng)
        item = self._factory.generate(kind, rarity, level, rng)
        self._emit_generated(item, cached=False)
        return item

    def generate_weapon(
        self, rarity: Optional[RarityRef] = None, level: Optional[int] = None
    ) -> ItemInstance:
        return self.generate(ItemKind.WEAPON, rarity, level)

    def generate_armor(
        self, rarity: Optional[RarityRef] = None, level: Optional[int] = None
    ) -> ItemInstance:
        return self.generate(ItemKind.ARMOR, rarity, level)

    # === Cache path ===

    def get_or_generate_item(
        self,
        rarity: RarityRef,
        kind: ItemKind | str,
        level: Optional[int] = None,
    ) -> ItemInstance:
        """Cached item for (kind, rarity). Always a caller-owned clone."""
        checkout: CacheCheckout = self._cache.checkout(kind, rarity, level)
        item = checkout.item
        self._bus.emit(
            ForgeEvent(
                event_type=EventTypes.CACHE_HIT if checkout.hit else EventTypes.CACHE_MISS,
                data={
                    "instance_id": item.instance_id,
                    "kind": item.kind.value,
                    "rarity": item.rarity,
                },
                source=SOURCE,
            )
        )
        self._emit_generated(item, cached=True)
        return item

    def warm_pool(self, kind: ItemKind | str, rarity: RarityRef, count: int) -> int:
        """Synchronously add up to `count` templates. Returns the number added."""
        added = self._cache.warm(kind, rarity, count)
        tier = self._factory.rarity_table.resolve(rarity)
        self._emit_warmed(coerce_kind(kind), tier.rank, added)
        return added

    def warm_all(
        self, plan: Optional[Iterable[PrewarmEntry]] = None
    ) -> dict[tuple[ItemKind, int], int]:
        """Warm every bucket of the plan (default: configured plan)."""
        entries = self._prewarm if plan is None else tuple(plan)
        results: dict[tuple[ItemKind, int], int] = {}
        for entry in entries:
            key = (entry.kind, entry.rarity)
            results[key] = results.get(key, 0) + self.warm_pool(
                entry.kind, entry.rarity, entry.count
            )
        logger.info(
            "Warm-up complete: %d templates across %d buckets",
            sum(results.values()),
            len(results),
        )
        return results

    def warm_all_async(self, plan: Optional[Iterable[PrewarmEntry]] = None) -> list[Future]:
        """Background warm-up on cache workers. One future per plan entry."""
        entries = self._prewarm if plan is None else tuple(plan)
        futures = []
        for entry in entries:
            future = self._cache.warm_async(entry.kind, entry.rarity, entry.count)
            future.add_done_callback(
                lambda f, e=entry: self._on_async_warm_done(f, e)
            )
            futures.append(future)
        logger.info("Background warm-up scheduled for %d buckets", len(futures))
        return futures

    def _on_async_warm_done(self, future: Future, entry: PrewarmEntry) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(
                "Background warm failed for %s/%d: %s", entry.kind.value, entry.rarity, error
            )
            return
        self._emit_warmed(entry.kind, entry.rarity, future.result())

    def get_cache_stats(self, kind: ItemKind | str, rarity: RarityRef) -> CacheStats:
        return self._cache.stats(kind, rarity)

    def clear_pool(
        self, kind: ItemKind | str | None = None, rarity: RarityRef | None = None
    ) -> int:
        dropped = self._cache.clear(kind, rarity)
        self._bus.emit(
            ForgeEvent(
                event_type=EventTypes.POOL_CLEARED,
                data={
                    "kind": coerce_kind(kind).value if kind is not None else None,
                    "rarity": (
                        self._factory.rarity_table.resolve(rarity).rank
                        if rarity is not None
                        else None
                    ),
                    "dropped": dropped,
                },
                source=SOURCE,
            )
        )
        return dropped

    def shutdown(self) -> None:
        self._cache.shutdown()

    # === Events ===

    def _emit_generated(self, item: ItemInstance, cached: bool) -> None:
        self._bus.emit(
            ForgeEvent(
                event_type=EventTypes.ITEM_GENERATED,
                data={
                    "instance_id": item.instance_id,
                    "kind": item.kind.value,
                    "rarity": item.rarity,
                    "level": item.level,
                    "cached": cached,
                },
                source=SOURCE,
            )
        )
        for warning in item.warnings:
            self._bus.emit(
                ForgeEvent(
                    event_type=EventTypes.AFFIX_POOL_EXHAUSTED,
                    data={
                        "instance_id": item.instance_id,
                        "kind": warning.kind,
                        "rarity": warning.rarity,
                        "requested": warning.requested,
                        "available": warning.available,
                    },
                    source=SOURCE,
                )
            )

    def _emit_warmed(self, kind: ItemKind, rarity: int, added: int) -> None:
        self._bus.emit(
            ForgeEvent(
                event_type=EventTypes.POOL_WARMED,
                data={"kind": kind.value, "rarity": rarity, "added": added},
                source=SOURCE,
            )
        )
