"""Injectable random sources and instance identifiers"""

from __future__ import annotations

import itertools
import random
import threading
from typing import Optional


class RngSource:
    """Spawns independent random.Random handles.

    One handle per generation call or per worker; the engine never touches
    the module-level `random` state. With a seed, the sequence of spawned
    handles (and therefore every roll) is reproducible.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._seed = seed
        self._master = random.Random(seed)
        self._lock = threading.Lock()

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def spawn(self) -> random.Random:
        with self._lock:
            child_seed = self._master.getrandbits(64)
        return random.Random(child_seed)


class InstanceIdSource:
    """Process-unique item identifiers: item-000001, item-000002, ..."""

    def __init__(self, prefix: str = "item", start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self._prefix}-{n:06d}"

    __call__ = next_id


# shared default so ids never collide across factories within one process
DEFAULT_ID_SOURCE = InstanceIdSource()
