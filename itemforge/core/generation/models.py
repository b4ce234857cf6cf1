"""Item generation domain models (no IO)"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .errors import ConfigurationError, ExhaustionWarning


class ItemKind(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"


def coerce_kind(kind: ItemKind | str) -> ItemKind:
    """"weapon" / ItemKind.WEAPON -> ItemKind. Unknown kinds -> ConfigurationError."""
    if isinstance(kind, ItemKind):
        return kind
    try:
        return ItemKind(str(kind).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown item kind: {kind!r}") from None


def round_within(value: float, low: float, high: float, precision: int) -> float:
    """Round to `precision` decimals without leaving [low, high].

    precision 0 returns an int. If no value of that precision fits in the
    interval, the unrounded value (clamped) is kept.
    """
    scale = 10**precision
    rounded = round(value, precision) if precision else round(value)
    if rounded < low:
        rounded = math.ceil(low * scale) / scale
    elif rounded > high:
        rounded = math.floor(high * scale) / scale
    if rounded < low or rounded > high:
        return min(max(value, low), high)
    return int(rounded) if precision == 0 else rounded


class AffixPosition(str, Enum):
    PREFIX = "prefix"
    SUFFIX = "suffix"


@dataclass(frozen=True)
class RarityTier:
    """Rarity tier. Immutable, loaded once from generation_config.json."""

    rank: int  # 0 = Common
    name: str  # "Common", "Legendary", ...
    weight: float  # selection weight (> 0)
    stat_multiplier: float  # >= 1.0, non-decreasing with rank
    affix_min: int
    affix_max: int
    level_min: int = 1
    level_max: int = 1
    adjective: str = ""  # name prefix for affix-less items ("Fine", "Divine")

    @property
    def affix_span(self) -> int:
        """affix_max - affix_min"""
        return self.affix_max - self.affix_min


@dataclass(frozen=True)
class StatRange:
    """Base roll range of one stat."""

    name: str  # "damage", "armor_value"
    low: float
    high: float
    precision: int = 0  # decimal places kept after rounding
    scaled: bool = True  # False = not multiplied by rarity/level (attack_speed, range)

    def bounds(self, factor: float) -> tuple[float, float]:
        """Allowed [lo, hi] after applying the rarity * level factor."""
        if not self.scaled:
            return self.low, self.high
        return self.low * factor, self.high * factor


@dataclass(frozen=True)
class ArchetypeDefinition:
    """Item sub-type with base stat ranges. Immutable."""

    archetype_id: str  # "sword", "plate_chest"
    kind: ItemKind
    sub_type: str  # "sword" / "plate"
    naming_fragment: str  # "Sword", "Plate Chest"
    stat_ranges: tuple[StatRange, ...]
    slot: Optional[str] = None  # armor only: "head", "chest", ...

    def stat_range(self, name: str) -> Optional[StatRange]:
        for stat_range in self.stat_ranges:
            if stat_range.name == name:
                return stat_range
        return None


@dataclass(frozen=True)
class AffixDefinition:
    """Prefix/suffix catalog entry. Immutable."""

    affix_id: str  # "sharp", "of_the_bear"
    affix_type: str  # "bonus_damage", "critical_chance"
    fragment: str  # "Sharp", "of the Bear"
    position: AffixPosition
    stat: str  # stat the rolled value is added to
    eligible_kinds: frozenset[ItemKind]
    min_rarity: int  # minimum rarity rank
    value_low: float
    value_high: float
    precision: int = 0  # 0 = flat stat, 1 = percentage

    def is_eligible(self, kind: ItemKind, rarity: int) -> bool:
        return kind in self.eligible_kinds and self.min_rarity <= rarity


@dataclass
class ResolvedAffix:
    """Affix applied to one item, with its concrete rolled value."""

    affix_id: str
    affix_type: str
    fragment: str
    position: AffixPosition
    stat: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "affix_id": self.affix_id,
            "affix_type": self.affix_type,
            "stat": self.stat,
            "value": self.value,
        }


@dataclass
class ItemInstance:
    """Generated item. Mutable, owned by exactly one caller once handed out."""

    instance_id: str
    name: str
    kind: ItemKind
    archetype_id: str
    sub_type: str
    rarity: int  # RarityTier.rank
    rarity_name: str
    level: int

    # rarity/level scaled values
    stats: dict[str, float] = field(default_factory=dict)
    # unscaled rolls, kept so the item can be re-levelled
    base_rolls: dict[str, float] = field(default_factory=dict)
    affixes: list[ResolvedAffix] = field(default_factory=list)
    warnings: list[ExhaustionWarning] = field(default_factory=list)

    def clone(self, instance_id: str | None = None) -> ItemInstance:
        """Deep copy (stats, rolls, affix list). Optionally re-identified."""
        twin = copy.deepcopy(self)
        if instance_id is not None:
            twin.instance_id = instance_id
        return twin

    def effective_stats(self) -> dict[str, float]:
        """Base stats plus affix bonuses, summed per stat."""
        totals = dict(self.stats)
        for affix in self.affixes:
            totals[affix.stat] = round(totals.get(affix.stat, 0) + affix.value, 4)
        return totals

    @property
    def prefixes(self) -> list[ResolvedAffix]:
        return [a for a in self.affixes if a.position == AffixPosition.PREFIX]

    @property
    def suffixes(self) -> list[ResolvedAffix]:
        return [a for a in self.affixes if a.position == AffixPosition.SUFFIX]

    def to_dict(self) -> dict[str, Any]:
        """Serializable view for editors, save systems and the HTTP API."""
        return {
            "instance_id": self.instance_id,
            "name": self.name,
            "kind": self.kind.value,
            "archetype_id": self.archetype_id,
            "sub_type": self.sub_type,
            "rarity": self.rarity,
            "rarity_name": self.rarity_name,
            "level": self.level,
            "stats": dict(self.stats),
            "effective_stats": self.effective_stats(),
            "affixes": [a.to_dict() for a in self.affixes],
            "warnings": [w.message for w in self.warnings],
        }
