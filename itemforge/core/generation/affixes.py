"""Affix library: prefix/suffix pool and bounded, non-repeating draws"""

from __future__ import annotations

import logging
import random
from typing import NamedTuple, Optional

from .errors import ConfigurationError, ExhaustionWarning
from .models import AffixDefinition, ItemKind, ResolvedAffix, coerce_kind, round_within

logger = logging.getLogger(__name__)


class AffixDraw(NamedTuple):
    affixes: list[ResolvedAffix]
    warning: Optional[ExhaustionWarning]


class AffixLibrary:
    """
    Affix definition pool.
    Eligibility = item kind listed AND min_rarity <= requested rarity rank.
    """

    def __init__(self) -> None:
        self._affixes: dict[str, AffixDefinition] = {}

    def register(self, affix: AffixDefinition) -> None:
        if affix.affix_id in self._affixes:
            raise ConfigurationError(f"Duplicate affix: {affix.affix_id}")
        if affix.value_low > affix.value_high:
            raise ConfigurationError(
                f"Affix {affix.affix_id}: invalid value range "
                f"[{affix.value_low}, {affix.value_high}]"
            )
        if not affix.eligible_kinds:
            raise ConfigurationError(f"Affix {affix.affix_id}: no eligible kinds")
        if affix.min_rarity < 0:
            raise ConfigurationError(f"Affix {affix.affix_id}: negative min_rarity")
        self._affixes[affix.affix_id] = affix
        logger.debug("Registered affix %s (%s)", affix.affix_id, affix.position.value)

    def get(self, affix_id: str) -> Optional[AffixDefinition]:
        return self._affixes.get(affix_id)

    def get_all(self) -> list[AffixDefinition]:
        return list(self._affixes.values())

    def count(self) -> int:
        return len(self._affixes)

    def eligible(self, kind: ItemKind | str, rarity: int) -> list[AffixDefinition]:
        """Eligible definitions in registration order."""
        kind = coerce_kind(kind)
        return [a for a in self._affixes.values() if a.is_eligible(kind, rarity)]

    def draw_affixes(
        self,
        kind: ItemKind | str,
        rarity: int,
        count: int,
        rng: random.Random,
    ) -> AffixDraw:
        """Up to `count` distinct eligible affixes, each with a rolled value.

        Pool smaller than count -> every eligible affix plus an
        ExhaustionWarning. Never raises for a small pool.
        """
        kind = coerce_kind(kind)
        if count <= 0:
            return AffixDraw([], None)

        pool = self.eligible(kind, rarity)
        warning: Optional[ExhaustionWarning] = None
        if len(pool) < count:
            warning = ExhaustionWarning(kind.value, rarity, count, len(pool))
            chosen = rng.sample(pool, len(pool))
        else:
            chosen = rng.sample(pool, count)

        return AffixDraw([self.roll(a, rng) for a in chosen], warning)

    @staticmethod
    def roll(affix: AffixDefinition, rng: random.Random) -> ResolvedAffix:
        """Uniform real in [low, high], rounded to the affix's precision."""
        raw = affix.value_low + rng.random() * (affix.value_high - affix.value_low)
        return ResolvedAffix(
            affix_id=affix.affix_id,
            affix_type=affix.affix_type,
            fragment=affix.fragment,
            position=affix.position,
            stat=affix.stat,
            value=round_within(raw, affix.value_low, affix.value_high, affix.precision),
        )
