"""Membership operators: in, contains."""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import ComparisonOperator


class InOperator(MemoryOperator):
    """``left in right``: the value is one of a collection."""

    @property
    def name(self) -> ComparisonOperator:
        return ComparisonOperator.IN

    def evaluate(self, left: Any, right: Any) -> bool:
        if right is None:
            return False
        return left in right


class ContainsOperator(MemoryOperator):
    """``right in left``: a collection (or string) holds the value."""

    @property
    def name(self) -> ComparisonOperator:
        return ComparisonOperator.CONTAINS

    def evaluate(self, left: Any, right: Any) -> bool:
        if left is None:
            return False
        return right in left
