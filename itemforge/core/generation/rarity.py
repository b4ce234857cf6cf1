"""Rarity table: weighted tier selection and tier lookup"""

from __future__ import annotations

import bisect
import logging
import random
from itertools import accumulate
from typing import Iterable, Union

from .errors import ConfigurationError
from .models import RarityTier

logger = logging.getLogger(__name__)

RarityRef = Union[int, str, RarityTier]


class RarityTable:
    """
    Static weighted distribution over rarity tiers.
    Tiers are ordered by rank; the cumulative-weight ladder is built once.
    """

    def __init__(self, tiers: Iterable[RarityTier]) -> None:
        ordered = sorted(tiers, key=lambda t: t.rank)
        _validate_tiers(ordered)
        self._tiers: tuple[RarityTier, ...] = tuple(ordered)
        self._by_name: dict[str, RarityTier] = {t.name.lower(): t for t in ordered}
        self._ladder: list[float] = list(accumulate(t.weight for t in ordered))

    @property
    def tiers(self) -> tuple[RarityTier, ...]:
        return self._tiers

    @property
    def total_weight(self) -> float:
        return self._ladder[-1]

    @property
    def max_rank(self) -> int:
        return self._tiers[-1].rank

    def select_rarity(self, rng: random.Random) -> RarityTier:
        """Weighted draw. First tier (ascending rank) whose cumulative bound exceeds the draw."""
        draw = rng.random() * self.total_weight
        index = bisect.bisect_right(self._ladder, draw)
        # float rounding can put draw exactly on the total
        return self._tiers[min(index, len(self._tiers) - 1)]

    def tier_for(self, rank: int) -> RarityTier:
        """Direct lookup by rank. Out-of-range rank -> ConfigurationError."""
        if isinstance(rank, bool) or not isinstance(rank, int):
            raise ConfigurationError(f"Rarity rank must be an int, got {rank!r}")
        if rank < 0 or rank >= len(self._tiers):
            raise ConfigurationError(
                f"Rarity rank {rank} outside configured range 0-{self.max_rank}"
            )
        return self._tiers[rank]

    def resolve(self, rarity: RarityRef) -> RarityTier:
        """Rank, tier name (case-insensitive) or RarityTier -> configured tier."""
        if isinstance(rarity, RarityTier):
            return self.tier_for(rarity.rank)
        if isinstance(rarity, str):
            key = rarity.strip().lower()
            if key.isdigit():
                return self.tier_for(int(key))
            tier = self._by_name.get(key)
            if tier is None:
                raise ConfigurationError(f"Unknown rarity: {rarity!r}")
            return tier
        return self.tier_for(rarity)

    def roll_level(self, tier: RarityTier, rng: random.Random) -> int:
        """Item level rolled inside the tier's level band (inclusive)."""
        return rng.randint(tier.level_min, tier.level_max)


def _validate_tiers(tiers: list[RarityTier]) -> None:
    if not tiers:
        raise ConfigurationError("Rarity table is empty")

    previous_multiplier = 0.0
    for expected_rank, tier in enumerate(tiers):
        if tier.rank != expected_rank:
            raise ConfigurationError(
                f"Rarity ranks must be contiguous from 0: expected {expected_rank}, "
                f"got {tier.rank} ({tier.name})"
            )
        if tier.weight <= 0:
            raise ConfigurationError(f"Rarity {tier.name}: weight must be > 0")
        if tier.stat_multiplier < 1.0:
            raise ConfigurationError(f"Rarity {tier.name}: stat_multiplier must be >= 1.0")
        if tier.stat_multiplier < previous_multiplier:
            raise ConfigurationError(
                f"Rarity {tier.name}: stat_multiplier decreases with rank"
            )
        if not 0 <= tier.affix_min <= tier.affix_max:
            raise ConfigurationError(
                f"Rarity {tier.name}: invalid affix_count [{tier.affix_min}, {tier.affix_max}]"
            )
        if not 1 <= tier.level_min <= tier.level_max:
            raise ConfigurationError(
                f"Rarity {tier.name}: invalid level_range [{tier.level_min}, {tier.level_max}]"
            )
        previous_multiplier = tier.stat_multiplier

    names = [t.name.lower() for t in tiers]
    if len(set(names)) != len(names):
        raise ConfigurationError("Rarity tier names must be unique")

    logger.debug("Validated %d rarity tiers", len(tiers))
