"""Module manager: register, enable/disable with dependency checks, tick propagation"""

from typing import Dict, List, Optional

from itemforge.core.event_bus import EventBus, ForgeEvent
from itemforge.core.event_types import EventTypes
from itemforge.core.logging import get_logger
from itemforge.modules.base import GameModule, TickContext

logger = get_logger(__name__)


class ModuleManager:
    """Module toggling and lifecycle"""

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self._modules: Dict[str, GameModule] = {}
        self._event_bus: EventBus = event_bus or EventBus()
        self._tick = 0

    @property
    def event_bus(self) -> EventBus:
        """EventBus shared with modules"""
        return self._event_bus

    @property
    def modules(self) -> Dict[str, GameModule]:
        """Registered modules (copy)"""
        return dict(self._modules)

    @property
    def current_tick(self) -> int:
        return self._tick

    def get_enabled_modules(self) -> List[GameModule]:
        return [m for m in self._modules.values() if m.enabled]

    def register(self, module: GameModule) -> None:
        """Register a module. Same name twice: warn and overwrite."""
        if module.name in self._modules:
            logger.warning("Overwriting module: %s", module.name)
        self._modules[module.name] = module
        logger.info("Module registered: %s", module.name)

    def enable(self, name: str) -> bool:
        """Enable a module. False if unknown or a dependency is missing/disabled."""
        module = self._modules.get(name)
        if not module:
            logger.error("Module not registered: %s", name)
            return False

        if module.enabled:
            return True

        for dep in module.dependencies:
            dep_module = self._modules.get(dep)
            if not dep_module:
                logger.warning("Missing dependency: %s requires %s", name, dep)
                return False
            if not dep_module.enabled:
                logger.warning("Dependency disabled: %s requires %s", name, dep)
                return False

        module.on_enable()
        module.enabled = True
        logger.info("Module enabled: %s", name)
        return True

    def disable(self, name: str) -> bool:
        """Disable a module, dependents first (cascade)."""
        module = self._modules.get(name)
        if not module:
            logger.error("Module not registered: %s", name)
            return False

        if not module.enabled:
            return True

        for other in self._modules.values():
            if name in other.dependencies and other.enabled:
                logger.info("Cascade disable: %s (depends on %s)", other.name, name)
                self.disable(other.name)

        module.on_disable()
        module.enabled = False
        logger.info("Module disabled: %s", name)
        return True

    def process_tick(self, context: Optional[TickContext] = None) -> TickContext:
        """Run on_tick of every enabled module, in registration order."""
        self._tick += 1
        if context is None:
            context = TickContext(tick=self._tick)
        for module in self._modules.values():
            if module.enabled:
                module.on_tick(context)
        self._event_bus.emit(
            ForgeEvent(
                event_type=EventTypes.TICK_PROCESSED,
                data={"tick": context.tick},
                source="module_manager",
            )
        )
        return context

    def is_enabled(self, name: str) -> bool:
        module = self._modules.get(name)
        return module.enabled if module else False
