"""ItemForge Core"""
__version__ = "0.1.0"

from itemforge.core.event_bus import EventBus, ForgeEvent
from itemforge.core.event_types import EventTypes

__all__ = [
    "EventBus",
    "ForgeEvent",
    "EventTypes",
]
