"""Archetype catalog: per-kind base stat ranges and naming fragments"""

from __future__ import annotations

import logging
import random
from typing import Optional

from .errors import ConfigurationError
from .models import ArchetypeDefinition, ItemKind, coerce_kind

logger = logging.getLogger(__name__)


class ArchetypeCatalog:
    """
    Archetype store, keyed by archetype_id and grouped by kind.
    Filled once at startup; read-only afterwards.
    """

    def __init__(self) -> None:
        self._archetypes: dict[str, ArchetypeDefinition] = {}
        self._by_kind: dict[ItemKind, list[ArchetypeDefinition]] = {}

    def register(self, archetype: ArchetypeDefinition) -> None:
        """Register one archetype. Duplicate ids and empty/inverted ranges are rejected."""
        if archetype.archetype_id in self._archetypes:
            raise ConfigurationError(f"Duplicate archetype: {archetype.archetype_id}")
        if not archetype.stat_ranges:
            raise ConfigurationError(f"Archetype {archetype.archetype_id} has no stats")
        for stat_range in archetype.stat_ranges:
            if stat_range.low < 0 or stat_range.low > stat_range.high:
                raise ConfigurationError(
                    f"Archetype {archetype.archetype_id}: invalid range for "
                    f"{stat_range.name} [{stat_range.low}, {stat_range.high}]"
                )
        self._archetypes[archetype.archetype_id] = archetype
        logger.debug("Registered archetype %s (%s)", archetype.archetype_id, archetype.kind.value)
        self._by_kind.setdefault(archetype.kind, []).append(archetype)

    def get(self, archetype_id: str) -> Optional[ArchetypeDefinition]:
        return self._archetypes.get(archetype_id)

    def for_kind(self, kind: ItemKind) -> list[ArchetypeDefinition]:
        """Archetypes registered for kind, in registration order."""
        return list(self._by_kind.get(kind, []))

    def get_all(self) -> list[ArchetypeDefinition]:
        return list(self._archetypes.values())

    def count(self) -> int:
        return len(self._archetypes)

    def pick_archetype(self, kind: ItemKind | str, rng: random.Random) -> ArchetypeDefinition:
        """Uniform pick among kind's archetypes. None registered -> ConfigurationError."""
        kind = coerce_kind(kind)
        candidates = self._by_kind.get(kind)
        if not candidates:
            raise ConfigurationError(f"No archetypes registered for kind {kind.value}")
        return candidates[rng.randrange(len(candidates))]
