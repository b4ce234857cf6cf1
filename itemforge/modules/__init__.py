"""Host-loop module system"""

from itemforge.modules.base import GameModule, TickContext
from itemforge.modules.module_manager import ModuleManager

__all__ = ["GameModule", "TickContext", "ModuleManager"]
