"""
In-memory operator implementations.

Provides concrete MemoryOperator subclasses for each ComparisonOperator
and a factory function to create registries.

Usage::

    from predicate_specs.operators_memory import build_default_registry

    registry = build_default_registry()
    result = registry.evaluate(ComparisonOperator.EQ, actual, expected)
"""

from __future__ import annotations

from ..evaluator import MemoryOperatorRegistry
from .membership import ContainsOperator, InOperator
from .standard import (
    EqualOperator,
    GreaterEqualOperator,
    GreaterThanOperator,
    LessEqualOperator,
    LessThanOperator,
    NotEqualOperator,
)


def build_default_registry() -> MemoryOperatorRegistry:
    """
    Create a registry with all built-in operators.

    Each call returns a fresh instance, so registries can be injected
    and extended independently.

    Example:
        >>> registry = build_default_registry()
        >>> registry.evaluate(ComparisonOperator.EQ, "active", "active")
        True
    """
    registry = MemoryOperatorRegistry()
    registry.register_all(
        # Standard comparison
        EqualOperator(),
        NotEqualOperator(),
        GreaterThanOperator(),
        LessThanOperator(),
        GreaterEqualOperator(),
        LessEqualOperator(),
        # Membership
        InOperator(),
        ContainsOperator(),
    )
    return registry


__all__ = [
    "build_default_registry",
    "MemoryOperatorRegistry",
]
