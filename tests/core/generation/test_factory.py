"""ItemFactory: bounded stats, affix counts, naming, determinism, re-levelling"""

import random

import pytest

from itemforge.core.generation import (
    AffixLibrary,
    ArchetypeCatalog,
    ConfigurationError,
    ExhaustionWarning,
    InstanceIdSource,
    ItemFactory,
    ItemKind,
    ResolvedAffix,
    AffixPosition,
    parse_generation_config,
)


def _make_factory(raw_config, id_prefix: str = "f") -> ItemFactory:
    config = parse_generation_config(raw_config)
    return ItemFactory(
        config.rarity_table,
        config.catalog,
        config.affix_library,
        level_scaling=config.level_scaling,
        id_source=InstanceIdSource(prefix=id_prefix),
    )


def _resolved(fragment: str, position: AffixPosition) -> ResolvedAffix:
    return ResolvedAffix(fragment.lower(), "t", fragment, position, "damage", 1)


class TestStatBounds:
    @pytest.mark.parametrize("kind", [ItemKind.WEAPON, ItemKind.ARMOR])
    @pytest.mark.parametrize("rarity", [0, 1, 2])
    def test_stats_inside_scaled_bounds(self, factory, rng, kind, rarity):
        for _ in range(100):
            level = rng.randint(0, 60)
            item = factory.generate(kind, rarity, level, rng)
            archetype = factory.catalog.get(item.archetype_id)
            bounds = factory.stat_bounds(archetype, rarity, level)
            assert set(item.stats) == set(bounds)
            for stat, value in item.stats.items():
                low, high = bounds[stat]
                assert low <= value <= high, (stat, value, bounds[stat])

    def test_unscaled_stats_ignore_rarity_and_level(self, factory, rng):
        for _ in range(100):
            item = factory.generate(ItemKind.WEAPON, 2, 50, rng)
            if "attack_speed" in item.stats:
                assert 1.0 <= item.stats["attack_speed"] <= 1.5
            if "range" in item.stats:
                assert 20 <= item.stats["range"] <= 30

    def test_scaled_stat_grows_with_level(self, factory):
        low = factory.generate(ItemKind.ARMOR, 0, 0, random.Random(5))
        high = factory.generate(ItemKind.ARMOR, 0, 40, random.Random(5))
        assert low.archetype_id == high.archetype_id
        assert high.stats["armor_value"] > low.stats["armor_value"]

    def test_armor_slot_multiplier(self, factory):
        head = factory.catalog.get("leather_head")
        chest = factory.catalog.get("leather_chest")
        assert factory.stat_bounds(chest, 0, 0)["armor_value"] == (10, 20)
        assert factory.stat_bounds(head, 0, 0)["armor_value"] == (5, 10)

    def test_level_scaling_factor(self, factory):
        assert factory.level_scaling_factor(0) == 1.0
        assert factory.level_scaling_factor(10) == pytest.approx(2.0)


class TestAffixes:
    def test_affix_count_within_tier_range(self, factory, rng):
        tier = factory.rarity_table.tier_for(1)
        for _ in range(200):
            item = factory.generate(ItemKind.WEAPON, 1, None, rng)
            assert tier.affix_min <= len(item.affixes) <= tier.affix_max
            assert len({a.affix_id for a in item.affixes}) == len(item.affixes)
            assert item.warnings == []

    def test_common_items_have_no_affixes(self, factory, rng):
        for _ in range(50):
            assert factory.generate("weapon", "Common", None, rng).affixes == []

    def test_exhausted_pool_attaches_warning(self, factory, rng):
        """Rare weapon asks for 5-6 affixes; only 4 are eligible"""
        item = factory.generate(ItemKind.WEAPON, "Rare", 15, rng)
        assert len(item.affixes) == 4
        assert len(item.warnings) == 1
        assert isinstance(item.warnings[0], ExhaustionWarning)
        assert item.warnings[0].available == 4

    def test_affix_ineligible_for_kind_never_drawn(self, factory, rng):
        for _ in range(100):
            item = factory.generate(ItemKind.ARMOR, 1, None, rng)
            assert {a.affix_id for a in item.affixes} <= {"of_the_bear", "fortified"}


class TestNaming:
    def test_prefixes_fragment_suffixes(self, factory):
        archetype = factory.catalog.get("sword")
        tier = factory.rarity_table.tier_for(2)
        affixes = [
            _resolved("of the Bear", AffixPosition.SUFFIX),
            _resolved("Sharp", AffixPosition.PREFIX),
            _resolved("Vicious", AffixPosition.PREFIX),
        ]
        assert ItemFactory.compose_name(archetype, tier, affixes) == "Sharp Vicious Sword of the Bear"

    def test_affixless_uses_tier_adjective(self, factory):
        archetype = factory.catalog.get("leather_chest")
        assert ItemFactory.compose_name(archetype, factory.rarity_table.tier_for(2), []) == (
            "Superior Leather Chest"
        )
        assert ItemFactory.compose_name(archetype, factory.rarity_table.tier_for(0), []) == (
            "Leather Chest"
        )


class TestDeterminism:
    def test_same_seed_same_item(self, raw_config):
        a = _make_factory(raw_config, "a").generate("weapon", 2, None, random.Random(99))
        b = _make_factory(raw_config, "b").generate("weapon", 2, None, random.Random(99))
        assert a.name == b.name
        assert a.stats == b.stats
        assert a.level == b.level
        assert [(x.affix_id, x.value) for x in a.affixes] == [
            (x.affix_id, x.value) for x in b.affixes
        ]
        assert a.instance_id != b.instance_id

    def test_ids_unique(self, factory, rng):
        ids = {factory.generate("armor", 0, 1, rng).instance_id for _ in range(100)}
        assert len(ids) == 100


class TestLevels:
    def test_level_none_rolls_in_tier_band(self, factory, rng):
        tier = factory.rarity_table.tier_for(1)
        for _ in range(50):
            level = factory.generate("weapon", 1, None, rng).level
            assert tier.level_min <= level <= tier.level_max

    def test_negative_level_rejected(self, factory, rng):
        with pytest.raises(ConfigurationError):
            factory.generate("weapon", 0, -1, rng)

    def test_rescale_round_trip(self, factory, rng):
        item = factory.generate(ItemKind.ARMOR, 1, 5, rng)
        original = dict(item.stats)
        factory.rescale(item, 30)
        assert item.level == 30
        assert item.stats["armor_value"] > original["armor_value"]
        factory.rescale(item, 5)
        assert item.stats == original


class TestErrors:
    def test_invalid_rarity(self, factory, rng):
        with pytest.raises(ConfigurationError):
            factory.generate("weapon", 7, None, rng)

    def test_invalid_kind(self, factory, rng):
        with pytest.raises(ConfigurationError):
            factory.generate("potion", 0, None, rng)

    def test_kind_without_archetypes(self, generation_config, rng):
        catalog = ArchetypeCatalog()
        for archetype in generation_config.catalog.for_kind(ItemKind.WEAPON):
            catalog.register(archetype)
        factory = ItemFactory(generation_config.rarity_table, catalog, AffixLibrary())
        with pytest.raises(ConfigurationError):
            factory.generate(ItemKind.ARMOR, 0, 1, rng)

    def test_negative_level_scaling(self, generation_config):
        with pytest.raises(ConfigurationError):
            ItemFactory(
                generation_config.rarity_table,
                generation_config.catalog,
                generation_config.affix_library,
                level_scaling=-0.1,
            )
