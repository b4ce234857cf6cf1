"""EventBus: in-process notifications between services and modules

Rules:
- payloads carry identifiers only (instance_id, kind, rarity)
- propagation depth is capped at MAX_DEPTH per thread
- handler errors are logged and never reach the emitter
- safe to emit from cache worker threads
"""

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from itemforge.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # nested emit limit


@dataclass
class ForgeEvent:
    """Event data container

    Args:
        event_type: event name (see EventTypes)
        data: payload (ids and scalars, no heavy objects)
        source: emitting service/module name
    """

    event_type: str
    data: Dict[str, Any]
    source: str

    # internal bookkeeping, not set by callers
    _depth: int = field(default=0, repr=False)


EventHandler = Callable[[ForgeEvent], None]


class EventBus:
    """Synchronous, thread-safe event bus

    Usage:
        bus = EventBus()
        bus.subscribe("cache_miss", metrics.on_cache_miss)
        bus.emit(ForgeEvent(event_type="cache_miss", data={"kind": "weapon"}, source="cache"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._lock = threading.Lock()
        self._local = threading.local()

    def _get_depth(self) -> int:
        return getattr(self._local, "depth", 0)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        with self._lock:
            self._handlers[event_type].append(handler)
        logger.debug("EventBus subscribe: %s -> %s", event_type, handler.__qualname__)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            try:
                handlers.remove(handler)
            except ValueError:
                logger.warning(
                    "Handler not subscribed: %s -> %s", event_type, handler.__qualname__
                )
                return
        logger.debug("EventBus unsubscribe: %s -> %s", event_type, handler.__qualname__)

    def emit(self, event: ForgeEvent) -> None:
        """Call every handler of event.event_type on the emitting thread.

        Events emitted deeper than MAX_DEPTH are dropped with a warning.
        """
        depth = self._get_depth()
        if depth >= MAX_DEPTH:
            logger.warning(
                "EventBus depth limit (%d) reached: %s:%s dropped",
                MAX_DEPTH,
                event.source,
                event.event_type,
            )
            return

        with self._lock:
            handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            return

        event._depth = depth
        self._local.depth = depth + 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "EventBus handler error: %s (event=%s)",
                        handler.__qualname__,
                        event.event_type,
                    )
        finally:
            self._local.depth = depth

    def clear(self) -> None:
        """Drop every subscription (tests)"""
        with self._lock:
            self._handlers.clear()

    @property
    def handler_count(self) -> int:
        with self._lock:
            return sum(len(h) for h in self._handlers.values())
