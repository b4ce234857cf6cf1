"""Host-loop module interface"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class TickContext:
    """State handed to modules once per host-loop tick (frame)"""

    tick: int
    # modules may publish per-tick data here
    extra: Dict[str, Any] = field(default_factory=dict)


class GameModule(ABC):
    """Base interface for modules driven by a frame-based host loop

    Rules:
    - modules never import each other
    - cross-module communication goes through the EventBus
    - on_tick must return quickly; bulk work is chunked across ticks
    """

    _enabled: bool

    def __init__(self) -> None:
        self._enabled = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique module name (e.g. 'item_generation')"""
        ...

    @property
    def dependencies(self) -> List[str]:
        """Names of modules that must be enabled first. Default: none."""
        return []

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    @abstractmethod
    def on_enable(self) -> None:
        """Called once when the module is enabled."""
        ...

    @abstractmethod
    def on_disable(self) -> None:
        """Called once when the module is disabled."""
        ...

    @abstractmethod
    def on_tick(self, context: TickContext) -> None:
        """Called every tick while enabled."""
        ...
