"""ItemGenerationService: entry points and event notifications"""

import pytest

from itemforge.core.event_types import EventTypes
from itemforge.core.generation import ConfigurationError, ItemKind, PrewarmEntry


def _collect(bus, *event_types):
    received = []
    for event_type in event_types:
        bus.subscribe(event_type, received.append)
    return received


class TestGenerate:
    def test_generate_with_explicit_rarity(self, service):
        item = service.generate("armor", "Uncommon", 7)
        assert item.kind == ItemKind.ARMOR
        assert item.rarity == 1
        assert item.level == 7

    def test_generate_draws_rarity_when_omitted(self, service):
        ranks = {service.generate_weapon().rarity for _ in range(300)}
        assert 0 in ranks
        assert ranks <= {0, 1, 2}

    def test_generate_emits_item_generated(self, service, event_bus):
        events = _collect(event_bus, EventTypes.ITEM_GENERATED)
        item = service.generate_armor(0, 3)
        assert len(events) == 1
        assert events[0].data["instance_id"] == item.instance_id
        assert events[0].data["cached"] is False

    def test_exhausted_pool_emits_event(self, service, event_bus):
        events = _collect(event_bus, EventTypes.AFFIX_POOL_EXHAUSTED)
        service.generate_weapon("Rare", 12)
        assert len(events) == 1
        assert events[0].data["available"] == 4

    def test_select_rarity(self, service):
        assert service.select_rarity().rank in (0, 1, 2)

    def test_invalid_rarity_propagates(self, service, event_bus):
        events = _collect(event_bus, EventTypes.ITEM_GENERATED)
        with pytest.raises(ConfigurationError):
            service.generate("weapon", "Mythic")
        assert events == []


class TestCachePath:
    def test_miss_then_hit_events(self, service, event_bus):
        events = _collect(event_bus, EventTypes.CACHE_HIT, EventTypes.CACHE_MISS)
        service.get_or_generate_item(0, "weapon")
        service.get_or_generate_item(0, "weapon")
        assert [e.event_type for e in events] == [EventTypes.CACHE_MISS, EventTypes.CACHE_HIT]

    def test_cached_item_generated_flag(self, service, event_bus):
        events = _collect(event_bus, EventTypes.ITEM_GENERATED)
        service.get_or_generate_item("Common", ItemKind.ARMOR)
        assert events[-1].data["cached"] is True

    def test_cache_stats(self, service):
        service.warm_pool("weapon", 1, 4)
        service.get_or_generate_item(1, "weapon")
        stats = service.get_cache_stats("weapon", "Uncommon")
        assert stats.hits == 1
        assert stats.template_count == 4

    def test_warm_pool_emits_event(self, service, event_bus):
        events = _collect(event_bus, EventTypes.POOL_WARMED)
        assert service.warm_pool("armor", "Rare", 3) == 3
        assert events[0].data == {"kind": "armor", "rarity": 2, "added": 3}

    def test_warm_all_uses_configured_plan(self, service):
        results = service.warm_all()
        assert results == {(ItemKind.WEAPON, 0): 5, (ItemKind.ARMOR, 1): 3}

    def test_warm_all_custom_plan(self, service):
        results = service.warm_all([PrewarmEntry(ItemKind.ARMOR, 2, 2)])
        assert results == {(ItemKind.ARMOR, 2): 2}
        assert service.get_cache_stats("armor", 2).template_count == 2

    def test_warm_all_async(self, service, event_bus):
        events = _collect(event_bus, EventTypes.POOL_WARMED)
        futures = service.warm_all_async()
        assert [f.result(timeout=10) for f in futures] == [5, 3]
        service.shutdown()
        assert len(events) == 2

    def test_clear_pool(self, service, event_bus):
        events = _collect(event_bus, EventTypes.POOL_CLEARED)
        service.warm_pool("weapon", 0, 3)
        assert service.clear_pool("weapon", 0) == 3
        assert events[0].data == {"kind": "weapon", "rarity": 0, "dropped": 3}

    def test_clear_pool_by_kind_only(self, service, event_bus):
        events = _collect(event_bus, EventTypes.POOL_CLEARED)
        service.warm_pool("weapon", 0, 2)
        service.warm_pool("armor", 0, 3)
        assert service.clear_pool("weapon") == 2
        assert service.get_cache_stats("armor", 0).template_count == 3
        assert events[0].data == {"kind": "weapon", "rarity": None, "dropped": 2}
