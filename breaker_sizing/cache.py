"""
Memoized engine wrapper.

calculate() is deterministic for a given design, table and settings, so
results can be reused. Entries are keyed by the design itself (frozen
dataclasses hash by value) and evicted least-recently-used beyond maxsize.
"""

import logging
import threading
from collections import OrderedDict
from typing import NamedTuple, Union

from .engine import CalculationEngine
from .models import BaseDesign, CalculationResult, DesignInput, InputParameters

logger = logging.getLogger(__name__)


class CacheInfo(NamedTuple):
    hits: int
    misses: int
    maxsize: int
    currsize: int


class CachedEngine:
    def __init__(self, engine: CalculationEngine, maxsize: int = 128):
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.engine = engine
        self.maxsize = maxsize
        self._entries: "OrderedDict[DesignInput, CalculationResult]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def calculate(self, design: Union[DesignInput, InputParameters]) -> CalculationResult:
        key = BaseDesign(design) if isinstance(design, InputParameters) else design
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self._hits += 1
                return self._entries[key]
            self._misses += 1

        # Invalid designs raise here and are never cached
        result = self.engine.calculate(key)

        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)
                logger.debug("Evicted least recently used result")
        return result

    def cache_info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(self._hits, self._misses, self.maxsize, len(self._entries))

    def cache_clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
