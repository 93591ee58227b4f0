"""
Equality and ordering operators: eq, neq, lt, lte, gt, gte.

Ordering against ``None`` is never satisfied, so a missing optional value
fails ``>`` and ``<`` alike instead of raising ``TypeError``.
"""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import ComparisonOperator


class EqualOperator(MemoryOperator):
    """``left == right``; ``None`` equals only ``None``."""

    @property
    def name(self) -> ComparisonOperator:
        return ComparisonOperator.EQ

    def evaluate(self, left: Any, right: Any) -> bool:
        return bool(left == right)


class NotEqualOperator(MemoryOperator):
    """``left != right``."""

    @property
    def name(self) -> ComparisonOperator:
        return ComparisonOperator.NEQ

    def evaluate(self, left: Any, right: Any) -> bool:
        return bool(left != right)


class GreaterThanOperator(MemoryOperator):
    """``left > right``: False when either side is ``None``."""

    @property
    def name(self) -> ComparisonOperator:
        return ComparisonOperator.GT

    def evaluate(self, left: Any, right: Any) -> bool:
        if left is None or right is None:
            return False
        return bool(left > right)


class LessThanOperator(MemoryOperator):
    """``left < right``: False when either side is ``None``."""

    @property
    def name(self) -> ComparisonOperator:
        return ComparisonOperator.LT

    def evaluate(self, left: Any, right: Any) -> bool:
        if left is None or right is None:
            return False
        return bool(left < right)


class GreaterEqualOperator(MemoryOperator):
    """``left >= right``: False when either side is ``None``."""

    @property
    def name(self) -> ComparisonOperator:
        return ComparisonOperator.GTE

    def evaluate(self, left: Any, right: Any) -> bool:
        if left is None or right is None:
            return False
        return bool(left >= right)


class LessEqualOperator(MemoryOperator):
    """``left <= right``: False when either side is ``None``."""

    @property
    def name(self) -> ComparisonOperator:
        return ComparisonOperator.LTE

    def evaluate(self, left: Any, right: Any) -> bool:
        if left is None or right is None:
            return False
        return bool(left <= right)
