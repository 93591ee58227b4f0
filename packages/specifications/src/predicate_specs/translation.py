"""
Translation of predicate expressions for external consumers.

A query backend pattern-matches the closed node set by implementing
:class:`ExpressionVisitor`. :class:`DictTranslator` is the built-in
translator; it produces the dictionary shape accepted by
:class:`~predicate_specs.factory.SpecificationFactory`::

    {"op": "and", "conditions": [
        {"op": ">", "attr": "price", "val": 100},
        {"op": "=", "attr": "category", "val": "Electronics"},
    ]}
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .exceptions import InvariantViolationError
from .expressions import (
    Comparison,
    FieldAccess,
    Literal,
    LogicalAnd,
    LogicalNot,
    LogicalOr,
    NodeVariant,
    Parameter,
    chain_operands,
)
from .operators import ComparisonOperator, LogicalOperator

if TYPE_CHECKING:
    from .expressions import PredicateExpression

R = TypeVar("R")


class ExpressionVisitor(ABC, Generic[R]):
    """Base class for translators: one ``visit_*`` method per node variant."""

    def visit(self, node: PredicateExpression) -> R:
        variant = getattr(node, "variant", None)
        if not isinstance(variant, NodeVariant):
            raise InvariantViolationError(
                f"Unknown expression node: {type(node).__name__}"
            )
        method = getattr(self, f"visit_{variant.value}")
        result: R = method(node)
        return result

    @abstractmethod
    def visit_parameter(self, node: Parameter) -> R: ...

    @abstractmethod
    def visit_field_access(self, node: FieldAccess) -> R: ...

    @abstractmethod
    def visit_comparison(self, node: Comparison) -> R: ...

    @abstractmethod
    def visit_literal(self, node: Literal) -> R: ...

    @abstractmethod
    def visit_and(self, node: LogicalAnd) -> R: ...

    @abstractmethod
    def visit_or(self, node: LogicalOr) -> R: ...

    @abstractmethod
    def visit_not(self, node: LogicalNot) -> R: ...


def _field_path(node: PredicateExpression) -> str | None:
    """Dotted path when *node* reads a field off the parameter."""
    if isinstance(node, FieldAccess) and isinstance(node.root, Parameter):
        return node.path
    return None


class DictTranslator(ExpressionVisitor[dict[str, Any]]):
    """
    Serialises an expression to nested ``op`` / ``conditions`` dictionaries.

    Nested AND (or OR) chains are flattened into one ``conditions`` list.
    A comparison between a parameter field and a literal becomes a leaf
    ``{"op", "attr", "val"}``; anything else keeps explicit ``left`` and
    ``right`` operands.

    A bare parameter field in condition position (``entity.active``) is a
    truthiness test in memory but serialises as ``{"op": "=", "attr":
    "active", "val": True}``. The two agree for boolean fields only; a
    truthy non-boolean value such as ``"yes"`` is not equal to ``True``,
    so rules over such fields should compare explicitly before being
    serialised.
    """

    def visit_parameter(self, node: Parameter) -> dict[str, Any]:
        return {"param": node.name}

    def visit_field_access(self, node: FieldAccess) -> dict[str, Any]:
        # Equality with True; see the class docstring for non-boolean fields.
        path = _field_path(node)
        if path is not None:
            return {"op": ComparisonOperator.EQ.symbol, "attr": path, "val": True}
        return self._operand(node)

    def visit_comparison(self, node: Comparison) -> dict[str, Any]:
        left_path = _field_path(node.left)
        if left_path is not None and isinstance(node.right, Literal):
            return {
                "op": node.operator.symbol,
                "attr": left_path,
                "val": node.right.value,
            }
        right_path = _field_path(node.right)
        mirrored = node.operator.mirrored
        if (
            right_path is not None
            and isinstance(node.left, Literal)
            and mirrored is not None
        ):
            return {"op": mirrored.symbol, "attr": right_path, "val": node.left.value}
        return {
            "op": node.operator.symbol,
            "left": self._operand(node.left),
            "right": self._operand(node.right),
        }

    def visit_literal(self, node: Literal) -> dict[str, Any]:
        return {"literal": node.value}

    def visit_and(self, node: LogicalAnd) -> dict[str, Any]:
        return {
            "op": LogicalOperator.AND.value,
            "conditions": [self.visit(n) for n in chain_operands(node)],
        }

    def visit_or(self, node: LogicalOr) -> dict[str, Any]:
        return {
            "op": LogicalOperator.OR.value,
            "conditions": [self.visit(n) for n in chain_operands(node)],
        }

    def visit_not(self, node: LogicalNot) -> dict[str, Any]:
        return {"op": LogicalOperator.NOT.value, "conditions": [self.visit(node.operand)]}

    # -- internals -----------------------------------------------------------

    def _operand(self, node: PredicateExpression) -> dict[str, Any]:
        if isinstance(node, FieldAccess):
            path = _field_path(node)
            if path is not None:
                return {"field": path}
            return {"field": node.field_name, "of": self._operand(node.target)}
        return self.visit(node)


def to_dict(expression: PredicateExpression) -> dict[str, Any]:
    """Serialise *expression* with :class:`DictTranslator`."""
    return DictTranslator().visit(expression)
