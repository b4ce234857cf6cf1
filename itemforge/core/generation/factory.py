"""ItemFactory: builds one item per request (archetype, scaled stats, affixes, name, id)

Stateless with respect to the cache. Never calls back into GenerationCache.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional

from .affixes import AffixLibrary
from .archetypes import ArchetypeCatalog
from .errors import ConfigurationError
from .models import (
    AffixPosition,
    ArchetypeDefinition,
    ItemInstance,
    ItemKind,
    RarityTier,
    ResolvedAffix,
    StatRange,
    coerce_kind,
    round_within,
)
from .rarity import RarityRef, RarityTable
from .rng import DEFAULT_ID_SOURCE

logger = logging.getLogger(__name__)

DEFAULT_LEVEL_SCALING = 0.05  # k in 1 + level * k


class ItemFactory:
    """Builds ItemInstances from the rarity table, archetype catalog and affix library."""

    def __init__(
        self,
        rarity_table: RarityTable,
        catalog: ArchetypeCatalog,
        affix_library: AffixLibrary,
        level_scaling: float = DEFAULT_LEVEL_SCALING,
        id_source: Callable[[], str] = DEFAULT_ID_SOURCE,
    ) -> None:
        if level_scaling < 0:
            raise ConfigurationError("level_scaling_constant must be >= 0")
        self._rarities = rarity_table
        self._catalog = catalog
        self._affixes = affix_library
        self._level_scaling = level_scaling
        self._id_source = id_source

    @property
    def rarity_table(self) -> RarityTable:
        return self._rarities

    @property
    def catalog(self) -> ArchetypeCatalog:
        return self._catalog

    @property
    def affix_library(self) -> AffixLibrary:
        return self._affixes

    def new_instance_id(self) -> str:
        return self._id_source()

    def level_scaling_factor(self, level: int) -> float:
        """1 + level * k. Shared by every stat of one item."""
        return 1.0 + level * self._level_scaling

    def generate(
        self,
        kind: ItemKind | str,
        rarity: RarityRef,
        level: Optional[int],
        rng: random.Random,
    ) -> ItemInstance:
        """Generate one item.

        level=None rolls a level inside the tier's level band.
        Invalid rarity/kind/level -> ConfigurationError.
        A short affix pool yields fewer affixes plus a warning on the item.
        """
        kind = coerce_kind(kind)
        tier = self._rarities.resolve(rarity)
        archetype = self._catalog.pick_archetype(kind, rng)
        if level is None:
            level = self._rarities.roll_level(tier, rng)
        check_level(level)

        factor = tier.stat_multiplier * self.level_scaling_factor(level)
        base_rolls: dict[str, float] = {}
        stats: dict[str, float] = {}
        for stat_range in archetype.stat_ranges:
            base = stat_range.low + rng.random() * (stat_range.high - stat_range.low)
            base_rolls[stat_range.name] = base
            stats[stat_range.name] = _scale(stat_range, base, factor)

        affix_count = tier.affix_min + rng.randrange(tier.affix_span + 1)
        draw = self._affixes.draw_affixes(kind, tier.rank, affix_count, rng)
        warnings = []
        if draw.warning is not None:
            logger.warning("%s (archetype=%s)", draw.warning, archetype.archetype_id)
            warnings.append(draw.warning)

        item = ItemInstance(
            instance_id=self._id_source(),
            name=self.compose_name(archetype, tier, draw.affixes),
            kind=kind,
            archetype_id=archetype.archetype_id,
            sub_type=archetype.sub_type,
            rarity=tier.rank,
            rarity_name=tier.name,
            level=level,
            stats=stats,
            base_rolls=base_rolls,
            affixes=draw.affixes,
            warnings=warnings,
        )
        logger.debug(
            "Generated %s '%s' (%s, lvl %d, %d affixes)",
            item.instance_id,
            item.name,
            tier.name,
            level,
            len(item.affixes),
        )
        return item

    def rescale(self, item: ItemInstance, level: int) -> ItemInstance:
        """Re-level an item in place from its unscaled rolls. Returns the same item."""
        check_level(level)
        tier = self._rarities.tier_for(item.rarity)
        archetype = self._catalog.get(item.archetype_id)
        if archetype is None:
            raise ConfigurationError(f"Unknown archetype: {item.archetype_id}")

        factor = tier.stat_multiplier * self.level_scaling_factor(level)
        for stat_range in archetype.stat_ranges:
            base = item.base_rolls.get(stat_range.name)
            if base is None:
                continue
            item.stats[stat_range.name] = _scale(stat_range, base, factor)
        item.level = level
        return item

    def stat_bounds(
        self, archetype: ArchetypeDefinition, rarity: RarityRef, level: int
    ) -> dict[str, tuple[float, float]]:
        """Allowed [lo, hi] per stat for archetype at rarity/level."""
        tier = self._rarities.resolve(rarity)
        factor = tier.stat_multiplier * self.level_scaling_factor(level)
        return {r.name: r.bounds(factor) for r in archetype.stat_ranges}

    @staticmethod
    def compose_name(
        archetype: ArchetypeDefinition,
        tier: RarityTier,
        affixes: list[ResolvedAffix],
    ) -> str:
        """[prefixes] fragment [suffixes]; affix-less items get the tier adjective."""
        if not affixes:
            return f"{tier.adjective} {archetype.naming_fragment}".strip()
        parts = [a.fragment for a in affixes if a.position == AffixPosition.PREFIX]
        parts.append(archetype.naming_fragment)
        parts.extend(a.fragment for a in affixes if a.position == AffixPosition.SUFFIX)
        return " ".join(parts)


def _scale(stat_range: StatRange, base: float, factor: float) -> float:
    low, high = stat_range.bounds(factor)
    value = base * factor if stat_range.scaled else base
    return round_within(value, low, high, stat_range.precision)


def check_level(level: int) -> None:
    """Levels are non-negative ints. Anything else -> ConfigurationError."""
    if isinstance(level, bool) or not isinstance(level, int):
        raise ConfigurationError(f"Level must be an int, got {level!r}")
    if level < 0:
        raise ConfigurationError(f"Level must be >= 0, got {level}")
