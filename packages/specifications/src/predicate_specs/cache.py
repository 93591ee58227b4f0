"""CompositionCache - memo of composite specifications, injected explicitly."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .operators import LogicalOperator
    from .specification import Specification

CacheKey = tuple[str, int, int]

DEFAULT_MAX_SIZE = 1024


class CompositionCache:
    """
    Memoizes ``(operator, left, right) -> composite`` results.

    Keys use the identity of the operand specifications. Each entry keeps
    its operands alive, so an ``id()`` cannot be recycled while the entry
    is cached. Once ``max_size`` entries are held, the least recently used
    one is evicted; ``max_size=None`` disables the bound.

    Usage::

        cache = CompositionCache(max_size=256)
        engine = CombinatorEngine(cache=cache)
        spec = in_stock.and_(cheap, engine=engine)
    """

    def __init__(self, max_size: int | None = DEFAULT_MAX_SIZE) -> None:
        if max_size is not None and max_size <= 0:
            raise ValueError("max_size must be a positive integer")
        self._max_size = max_size
        self._entries: OrderedDict[
            CacheKey,
            tuple[Specification, Specification | None, Specification],
        ] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def max_size(self) -> int | None:
        return self._max_size

    @staticmethod
    def _key(
        operator: LogicalOperator,
        left: Specification,
        right: Specification | None,
    ) -> CacheKey:
        return (operator.value, id(left), id(right) if right is not None else 0)

    def get(
        self,
        operator: LogicalOperator,
        left: Specification,
        right: Specification | None = None,
    ) -> Specification | None:
        """Return the cached composite or ``None``."""
        key = self._key(operator, left, right)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return entry[2]

    def put(
        self,
        operator: LogicalOperator,
        left: Specification,
        right: Specification | None,
        composite: Specification,
    ) -> None:
        key = self._key(operator, left, right)
        with self._lock:
            self._entries[key] = (left, right, composite)
            self._entries.move_to_end(key)
            if self._max_size is not None:
                while len(self._entries) > self._max_size:
                    self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)
