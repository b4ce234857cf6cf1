"""generation_config.json loader: rarity tiers, archetypes, affixes, pre-warm plan"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .affixes import AffixLibrary
from .archetypes import ArchetypeCatalog
from .errors import ConfigurationError
from .factory import DEFAULT_LEVEL_SCALING
from .models import (
    AffixDefinition,
    AffixPosition,
    ArchetypeDefinition,
    ItemKind,
    RarityTier,
    StatRange,
    coerce_kind,
)
from .rarity import RarityTable

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "data" / "generation_config.json"


@dataclass(frozen=True)
class PrewarmEntry:
    kind: ItemKind
    rarity: int
    count: int


@dataclass(frozen=True)
class GenerationConfig:
    """Validated generation data. Built once at startup."""

    rarity_table: RarityTable
    catalog: ArchetypeCatalog
    affix_library: AffixLibrary
    level_scaling: float = DEFAULT_LEVEL_SCALING
    prewarm: tuple[PrewarmEntry, ...] = ()


def load_generation_config(path: str | Path = DEFAULT_CONFIG_PATH) -> GenerationConfig:
    """Read and validate a generation config file. Any defect -> ConfigurationError."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw: dict[str, Any] = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read generation config {path}: {e}") from e

    config = parse_generation_config(raw)
    logger.info(
        "Loaded generation config from %s: %d tiers, %d archetypes, %d affixes",
        path,
        len(config.rarity_table.tiers),
        config.catalog.count(),
        config.affix_library.count(),
    )
    return config


def parse_generation_config(raw: dict[str, Any]) -> GenerationConfig:
    """Build a GenerationConfig from already-decoded JSON data."""
    if not isinstance(raw, dict):
        raise ConfigurationError("Generation config must be a JSON object")

    level_scaling = _number(
        raw.get("level_scaling_constant", DEFAULT_LEVEL_SCALING), "level_scaling_constant"
    )
    if level_scaling < 0:
        raise ConfigurationError("level_scaling_constant must be >= 0")

    rarity_table = RarityTable(
        _parse_tier(entry) for entry in _list(raw, "rarity_tiers")
    )

    catalog = ArchetypeCatalog()
    for entry in raw.get("weapons", []):
        catalog.register(_parse_weapon(entry))
    armor = raw.get("armor")
    if armor is not None:
        for archetype in _expand_armor(armor):
            catalog.register(archetype)

    affix_library = AffixLibrary()
    for entry in raw.get("affixes", []):
        affix_library.register(_parse_affix(entry, rarity_table))

    prewarm = tuple(_parse_prewarm(entry, rarity_table) for entry in raw.get("prewarm", []))

    return GenerationConfig(
        rarity_table=rarity_table,
        catalog=catalog,
        affix_library=affix_library,
        level_scaling=level_scaling,
        prewarm=prewarm,
    )


# === entry parsers ===


def _parse_tier(raw: dict[str, Any]) -> RarityTier:
    name = raw.get("name", "?")
    try:
        affix_min, affix_max = raw.get("affix_count", [0, 0])
        level_min, level_max = raw.get("level_range", [1, 1])
        return RarityTier(
            rank=int(raw["rank"]),
            name=str(raw["name"]),
            weight=_number(raw["weight"], f"{name}.weight"),
            stat_multiplier=_number(raw["stat_multiplier"], f"{name}.stat_multiplier"),
            affix_min=int(affix_min),
            affix_max=int(affix_max),
            level_min=int(level_min),
            level_max=int(level_max),
            adjective=str(raw.get("adjective", "")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed rarity tier {name}: {e}") from e


def _parse_stats(raw: dict[str, Any], owner: str, multiplier: float = 1.0) -> tuple[StatRange, ...]:
    ranges = []
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{owner}: stats must be an object, got {raw!r}")
    for stat_name, spec in raw.items():
        try:
            ranges.append(
                StatRange(
                    name=stat_name,
                    low=_number(spec["min"], f"{owner}.{stat_name}.min") * multiplier,
                    high=_number(spec["max"], f"{owner}.{stat_name}.max") * multiplier,
                    precision=int(spec.get("precision", 0)),
                    scaled=bool(spec.get("scaled", True)),
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(f"Malformed stat {owner}.{stat_name}: {e}") from e
    return tuple(ranges)


def _parse_weapon(raw: dict[str, Any]) -> ArchetypeDefinition:
    try:
        sub_type = str(raw["sub_type"])
        return ArchetypeDefinition(
            archetype_id=sub_type,
            kind=ItemKind.WEAPON,
            sub_type=sub_type,
            naming_fragment=str(raw["name"]),
            stat_ranges=_parse_stats(raw["stats"], sub_type),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ConfigurationError(f"Malformed weapon archetype {raw!r}: {e}") from e


def _expand_armor(raw: dict[str, Any]) -> list[ArchetypeDefinition]:
    """material x slot -> one archetype each, ranges scaled by the slot multiplier."""
    try:
        slots: dict[str, Any] = raw["slots"]
        materials: list[dict[str, Any]] = raw["materials"]
    except (KeyError, TypeError) as e:
        raise ConfigurationError(f"Malformed armor section: {e}") from e
    if not isinstance(slots, dict):
        raise ConfigurationError(f"armor.slots must be an object, got {slots!r}")

    archetypes = []
    for material in materials:
        try:
            sub_type = str(material["sub_type"])
            material_name = str(material["name"])
            stats = material["stats"]
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Malformed armor material {material!r}: {e}") from e

        for slot, multiplier in slots.items():
            multiplier = _number(multiplier, f"armor.slots.{slot}")
            if multiplier <= 0:
                raise ConfigurationError(f"armor.slots.{slot}: multiplier must be > 0")
            archetype_id = f"{sub_type}_{slot}"
            archetypes.append(
                ArchetypeDefinition(
                    archetype_id=archetype_id,
                    kind=ItemKind.ARMOR,
                    sub_type=sub_type,
                    naming_fragment=f"{material_name} {slot.replace('_', ' ').title()}",
                    stat_ranges=_parse_stats(stats, archetype_id, multiplier),
                    slot=slot,
                )
            )
    return archetypes


def _parse_affix(raw: dict[str, Any], rarity_table: RarityTable) -> AffixDefinition:
    affix_id = raw.get("affix_id", "?")
    try:
        value = raw["value"]
        return AffixDefinition(
            affix_id=str(raw["affix_id"]),
            affix_type=str(raw["affix_type"]),
            fragment=str(raw["fragment"]),
            position=AffixPosition(raw["position"]),
            stat=str(raw["stat"]),
            eligible_kinds=frozenset(coerce_kind(k) for k in raw["kinds"]),
            min_rarity=rarity_table.resolve(raw.get("min_rarity", 0)).rank,
            value_low=_number(value["min"], f"{affix_id}.value.min"),
            value_high=_number(value["max"], f"{affix_id}.value.max"),
            precision=int(value.get("precision", 0)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed affix {affix_id}: {e}") from e


def _parse_prewarm(raw: dict[str, Any], rarity_table: RarityTable) -> PrewarmEntry:
    try:
        count = int(raw["count"])
        kind = coerce_kind(raw["kind"])
        rank = rarity_table.resolve(raw["rarity"]).rank
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed prewarm entry {raw!r}: {e}") from e
    if count < 0:
        raise ConfigurationError(f"Prewarm count must be >= 0: {raw!r}")
    return PrewarmEntry(kind=kind, rarity=rank, count=count)


# === helpers ===


def _list(raw: dict[str, Any], key: str) -> list[Any]:
    value = raw.get(key)
    if not isinstance(value, list) or not value:
        raise ConfigurationError(f"'{key}' must be a non-empty list")
    return value


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{where}: expected a number, got {value!r}")
    return float(value)
