"""ItemGenerationModule: cache pre-warm spread across host-loop ticks"""

import logging
from collections import deque
from typing import Deque, List, Optional

from itemforge.core.generation.loader import PrewarmEntry
from itemforge.modules.base import GameModule, TickContext
from itemforge.services.item_generation_service import ItemGenerationService

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8  # templates per tick


class ItemGenerationModule(GameModule):
    """Item generation module

    Responsibilities:
    - queue the pre-warm plan when enabled
    - warm at most `chunk_size` templates per tick so a frame never stalls
    - publish warm progress into context.extra["item_generation"]

    Disabling drops whatever is still queued; partially warmed buckets stay valid.
    """

    def __init__(
        self,
        service: ItemGenerationService,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        plan: Optional[List[PrewarmEntry]] = None,
    ) -> None:
        super().__init__()
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._service = service
        self._chunk_size = chunk_size
        self._plan = plan
        # [kind, rarity, remaining]
        self._queue: Deque[list] = deque()
        self._done = 0

    @property
    def name(self) -> str:
        return "item_generation"

    @property
    def pending(self) -> int:
        """Templates still queued for warming"""
        return sum(entry[2] for entry in self._queue)

    @property
    def done(self) -> int:
        """Templates warmed by this module so far"""
        return self._done

    def on_enable(self) -> None:
        plan = self._plan if self._plan is not None else self._service.prewarm_plan
        for entry in plan:
            if entry.count > 0:
                self._queue.append([entry.kind, entry.rarity, entry.count])
        logger.info("Queued %d templates for tick warm-up", self.pending)

    def on_disable(self) -> None:
        if self._queue:
            logger.info("Dropping %d queued templates", self.pending)
        self._queue.clear()

    def on_tick(self, context: TickContext) -> None:
        budget = self._chunk_size
        while budget > 0 and self._queue:
            entry = self._queue[0]
            kind, rarity, remaining = entry
            step = min(budget, remaining)
            added = self._service.warm_pool(kind, rarity, step)
            self._done += added
            budget -= step
            entry[2] = remaining - step
            # a full bucket cannot take the rest of its quota
            if entry[2] <= 0 or added < step:
                self._queue.popleft()

        context.extra["item_generation"] = {
            "pending": self.pending,
            "done": self._done,
        }
