"""ModuleManager tests"""

from itemforge.core.event_types import EventTypes
from itemforge.modules.base import GameModule, TickContext
from itemforge.modules.module_manager import ModuleManager


class AlphaModule(GameModule):
    def __init__(self):
        super().__init__()
        self.enable_called = False
        self.disable_called = False
        self.ticks = []

    @property
    def name(self):
        return "alpha"

    def on_enable(self):
        self.enable_called = True

    def on_disable(self):
        self.disable_called = True

    def on_tick(self, context):
        self.ticks.append(context.tick)


class BetaModule(AlphaModule):
    """depends on alpha"""

    @property
    def name(self):
        return "beta"

    @property
    def dependencies(self):
        return ["alpha"]


class TestRegisterEnable:
    def test_enable(self):
        manager = ModuleManager()
        alpha = AlphaModule()
        manager.register(alpha)
        assert manager.enable("alpha")
        assert alpha.enable_called
        assert manager.is_enabled("alpha")

    def test_enable_unknown(self):
        assert not ModuleManager().enable("ghost")

    def test_enable_twice_is_noop(self):
        manager = ModuleManager()
        manager.register(AlphaModule())
        manager.enable("alpha")
        assert manager.enable("alpha")

    def test_missing_dependency(self):
        manager = ModuleManager()
        manager.register(BetaModule())
        assert not manager.enable("beta")

    def test_disabled_dependency(self):
        manager = ModuleManager()
        manager.register(AlphaModule())
        manager.register(BetaModule())
        assert not manager.enable("beta")
        manager.enable("alpha")
        assert manager.enable("beta")


class TestDisable:
    def test_cascade(self):
        manager = ModuleManager()
        alpha, beta = AlphaModule(), BetaModule()
        manager.register(alpha)
        manager.register(beta)
        manager.enable("alpha")
        manager.enable("beta")

        manager.disable("alpha")
        assert not manager.is_enabled("beta")
        assert beta.disable_called
        assert alpha.disable_called


class TestTick:
    def test_only_enabled_modules_tick(self):
        manager = ModuleManager()
        alpha, beta = AlphaModule(), BetaModule()
        manager.register(alpha)
        manager.register(beta)
        manager.enable("alpha")

        manager.process_tick()
        manager.process_tick()
        assert alpha.ticks == [1, 2]
        assert beta.ticks == []
        assert manager.current_tick == 2

    def test_explicit_context(self):
        manager = ModuleManager()
        manager.register(AlphaModule())
        manager.enable("alpha")
        context = TickContext(tick=42, extra={"frame_ms": 16})
        assert manager.process_tick(context) is context

    def test_tick_event(self):
        manager = ModuleManager()
        received = []
        manager.event_bus.subscribe(EventTypes.TICK_PROCESSED, received.append)
        manager.process_tick()
        assert received[0].data == {"tick": 1}
