"""GenerationCache: (kind, rarity) buckets of pre-built templates

Clone-on-read: every item leaving the cache is a deep copy with a fresh
identifier. Templates themselves never reach a caller.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

from .errors import ConfigurationError
from .factory import ItemFactory, check_level
from .models import ItemInstance, ItemKind, coerce_kind
from .rarity import RarityRef
from .rng import RngSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_TEMPLATES = 500
BucketKey = tuple[ItemKind, int]


class GrowthMode(str, Enum):
    """How the replacement for a popped template is produced."""

    SYNC = "sync"  # on the caller's thread, before returning
    ASYNC = "async"  # on a cache worker thread


class BucketState(str, Enum):
    EMPTY = "empty"
    WARMING = "warming"
    READY = "ready"


@dataclass
class CacheBucket:
    """Templates + counters for one (kind, rarity). Mutated only under `lock`."""

    kind: ItemKind
    rarity: int
    templates: deque[ItemInstance] = field(default_factory=deque)
    hits: int = 0
    misses: int = 0
    total_generated: int = 0
    warming: int = 0  # in-flight warm operations
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def state(self) -> BucketState:
        if self.warming:
            return BucketState.WARMING
        return BucketState.READY if self.templates else BucketState.EMPTY


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    template_count: int
    total_generated: int = 0
    state: BucketState = BucketState.EMPTY

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "template_count": self.template_count,
            "total_generated": self.total_generated,
            "state": self.state.value,
        }


class CacheCheckout(NamedTuple):
    item: ItemInstance
    hit: bool


class GenerationCache:
    """
    Hybrid item cache.

    - checkout/get_or_generate: pop a template on hit (then refill), generate
      synchronously on miss (optionally pre-seeding the bucket).
    - warm: additive bulk generation, cancellable between items.
    - stats: per-bucket hits/misses/template count.
    """

    def __init__(
        self,
        factory: ItemFactory,
        rng_source: Optional[RngSource] = None,
        growth_mode: GrowthMode | str = GrowthMode.ASYNC,
        preseed_on_miss: bool = True,
        max_templates: int = DEFAULT_MAX_TEMPLATES,
        workers: int = 2,
    ) -> None:
        self._factory = factory
        self._rng_source = rng_source or RngSource()
        self._growth_mode = GrowthMode(growth_mode)
        self._preseed_on_miss = preseed_on_miss
        self._max_templates = max_templates
        self._buckets: dict[BucketKey, CacheBucket] = {}
        self._buckets_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, workers), thread_name_prefix="itemforge-cache"
        )
        self._closed = False

    @property
    def factory(self) -> ItemFactory:
        return self._factory

    @property
    def growth_mode(self) -> GrowthMode:
        return self._growth_mode

    # === Bucket access ===

    def _key(self, kind: ItemKind | str, rarity: RarityRef) -> BucketKey:
        """Validate and normalize before any bucket is touched.

        Invalid kind/rarity or a kind with no archetypes -> ConfigurationError.
        """
        tier = self._factory.rarity_table.resolve(rarity)
        kind = coerce_kind(kind)
        if not self._factory.catalog.for_kind(kind):
            raise ConfigurationError(f"No archetypes registered for kind {kind.value}")
        return kind, tier.rank

    def _bucket(self, key: BucketKey) -> CacheBucket:
        with self._buckets_lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = CacheBucket(kind=key[0], rarity=key[1])
                self._buckets[key] = bucket
            return bucket

    def _append(self, bucket: CacheBucket, template: ItemInstance) -> bool:
        """Caller holds bucket.lock. False when the bucket is full."""
        if len(bucket.templates) >= self._max_templates:
            return False
        bucket.templates.append(template)
        return True

    def _build(self, key: BucketKey, level: Optional[int] = None) -> ItemInstance:
        return self._factory.generate(key[0], key[1], level, self._rng_source.spawn())

    def _hand_out(self, template: ItemInstance, level: Optional[int]) -> ItemInstance:
        item = template.clone(instance_id=self._factory.new_instance_id())
        if level is not None and level != item.level:
            self._factory.rescale(item, level)
        return item

    # === Get-or-generate ===

    def checkout(
        self,
        kind: ItemKind | str,
        rarity: RarityRef,
        level: Optional[int] = None,
    ) -> CacheCheckout:
        """Serve one item for (kind, rarity) and report whether it was a hit.

        level=None keeps the template's rolled level; otherwise the clone is
        re-levelled.
        """
        key = self._key(kind, rarity)
        if level is not None:
            check_level(level)
        bucket = self._bucket(key)

        with bucket.lock:
            template = bucket.templates.popleft() if bucket.templates else None
            if template is not None:
                bucket.hits += 1
            else:
                bucket.misses += 1

        if template is not None:
            item = self._hand_out(template, level)
            self._refill(key)
            return CacheCheckout(item, True)

        logger.debug("Cache miss: %s/%d, generating on demand", key[0].value, key[1])
        # templates keep a tier-band level; only the caller's clone is re-levelled
        generated = self._build(key)
        with bucket.lock:
            bucket.total_generated += 1
            if self._preseed_on_miss:
                self._append(bucket, generated.clone())
        return CacheCheckout(self._hand_out(generated, level), False)

    def get_or_generate(
        self,
        kind: ItemKind | str,
        rarity: RarityRef,
        level: Optional[int] = None,
    ) -> ItemInstance:
        return self.checkout(kind, rarity, level).item

    def _refill(self, key: BucketKey) -> None:
        """Replace a popped template according to the growth mode."""
        if self._growth_mode == GrowthMode.SYNC or self._closed:
            self._refill_one(key)
            return
        try:
            future = self._executor.submit(self._refill_one, key)
        except RuntimeError:
            # executor already shut down
            self._refill_one(key)
            return
        future.add_done_callback(lambda f: self._on_refill_done(f, key))

    def _on_refill_done(self, future: Future, key: BucketKey) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(
                "Background refill failed for %s/%d: %s", key[0].value, key[1], error
            )

    def _refill_one(self, key: BucketKey) -> None:
        bucket = self._bucket(key)
        template = self._build(key)
        with bucket.lock:
            bucket.total_generated += 1
            self._append(bucket, template)

    # === Warm ===

    def warm(
        self,
        kind: ItemKind | str,
        rarity: RarityRef,
        count: int,
        cancel: Optional[threading.Event] = None,
    ) -> int:
        """Generate up to `count` templates into the bucket. Additive.

        Stops early on cancel or when the bucket is full; a partial warm
        leaves a valid bucket. Returns the number of templates added.
        """
        key = self._key(kind, rarity)
        bucket = self._bucket(key)
        added = 0

        with bucket.lock:
            bucket.warming += 1
        try:
            for _ in range(max(0, count)):
                if cancel is not None and cancel.is_set():
                    logger.info(
                        "Warm cancelled: %s/%d after %d of %d",
                        key[0].value,
                        key[1],
                        added,
                        count,
                    )
                    break
                template = self._build(key)
                with bucket.lock:
                    bucket.total_generated += 1
                    if not self._append(bucket, template):
                        logger.debug("Bucket %s/%d full", key[0].value, key[1])
                        break
                added += 1
        finally:
            with bucket.lock:
                bucket.warming -= 1

        logger.debug("Warmed %s/%d: +%d templates", key[0].value, key[1], added)
        return added

    def warm_async(
        self,
        kind: ItemKind | str,
        rarity: RarityRef,
        count: int,
        cancel: Optional[threading.Event] = None,
    ) -> Future:
        """warm() on a cache worker. Bad kind/rarity is reported before submission."""
        self._key(kind, rarity)
        return self._executor.submit(self.warm, kind, rarity, count, cancel)

    # === Observability / maintenance ===

    def stats(self, kind: ItemKind | str, rarity: RarityRef) -> CacheStats:
        bucket = self._bucket(self._key(kind, rarity))
        with bucket.lock:
            return CacheStats(
                hits=bucket.hits,
                misses=bucket.misses,
                template_count=len(bucket.templates),
                total_generated=bucket.total_generated,
                state=bucket.state,
            )

    def all_stats(self) -> dict[BucketKey, CacheStats]:
        with self._buckets_lock:
            keys = list(self._buckets)
        return {key: self.stats(*key) for key in keys}

    def template_count(self, kind: ItemKind | str, rarity: RarityRef) -> int:
        return self.stats(kind, rarity).template_count

    def clear(
        self,
        kind: ItemKind | str | None = None,
        rarity: RarityRef | None = None,
    ) -> int:
        """Drop templates of the buckets matching kind and/or rarity. Counters are kept.

        kind only -> every rarity of that kind; rarity only -> every kind at
        that rarity; neither -> every bucket. Returns the number discarded.
        """
        if kind is not None and rarity is not None:
            buckets = [self._bucket(self._key(kind, rarity))]
        else:
            kind_filter = coerce_kind(kind) if kind is not None else None
            rank_filter = (
                self._factory.rarity_table.resolve(rarity).rank if rarity is not None else None
            )
            with self._buckets_lock:
                buckets = [
                    bucket
                    for (bucket_kind, bucket_rank), bucket in self._buckets.items()
                    if (kind_filter is None or bucket_kind == kind_filter)
                    and (rank_filter is None or bucket_rank == rank_filter)
                ]

        dropped = 0
        for bucket in buckets:
            with bucket.lock:
                dropped += len(bucket.templates)
                bucket.templates.clear()
        logger.info("Cleared %d cached templates", dropped)
        return dropped

    def shutdown(self, wait: bool = True) -> None:
        """Stop worker threads. Later refills run synchronously."""
        self._closed = True
        self._executor.shutdown(wait=wait)
