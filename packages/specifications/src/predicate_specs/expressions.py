"""
Predicate expression tree.

A predicate expression describes "given an entity, produce a boolean" as
an immutable AST instead of an opaque callable, so that it can be
inspected, evaluated in memory or translated by a query backend.

Every node is a frozen pydantic model tagged with a closed ``variant``.
Nodes are never mutated: any change is expressed by building new nodes.
``Parameter`` nodes compare and hash by identity because the tree binds
the tested entity to one specific parameter instance.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict

from .operators import ComparisonOperator


class NodeVariant(str, Enum):
    """Closed set of expression node kinds."""

    PARAMETER = "parameter"
    FIELD_ACCESS = "field_access"
    COMPARISON = "comparison"
    LITERAL = "literal"
    AND = "and"
    OR = "or"
    NOT = "not"


class ExpressionNode(BaseModel):
    """Base class for all predicate expression nodes."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    variant: ClassVar[NodeVariant]


class Parameter(ExpressionNode):
    """Placeholder standing for the entity being tested."""

    variant: ClassVar[NodeVariant] = NodeVariant.PARAMETER

    name: str
    entity_type: type[Any]

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __str__(self) -> str:
        return self.name


class FieldAccess(ExpressionNode):
    """Read ``field_name`` off the value produced by ``target``."""

    variant: ClassVar[NodeVariant] = NodeVariant.FIELD_ACCESS

    target: PredicateExpression
    field_name: str

    @property
    def path(self) -> str:
        """Dotted path from the innermost target, e.g. ``address.city``."""
        if isinstance(self.target, FieldAccess):
            return f"{self.target.path}.{self.field_name}"
        return self.field_name

    @property
    def root(self) -> PredicateExpression:
        """Innermost non-field-access target of the chain."""
        node: PredicateExpression = self
        while isinstance(node, FieldAccess):
            node = node.target
        return node

    def __str__(self) -> str:
        return f"{self.target}.{self.field_name}"


class Comparison(ExpressionNode):
    variant: ClassVar[NodeVariant] = NodeVariant.COMPARISON

    left: PredicateExpression
    operator: ComparisonOperator
    right: PredicateExpression

    def __str__(self) -> str:
        return f"({self.left} {self.operator.symbol} {self.right})"


class Literal(ExpressionNode):
    """A constant. Safe to share between trees."""

    variant: ClassVar[NodeVariant] = NodeVariant.LITERAL

    value: Any

    def __str__(self) -> str:
        return repr(self.value)


class LogicalAnd(ExpressionNode):
    variant: ClassVar[NodeVariant] = NodeVariant.AND

    left: PredicateExpression
    right: PredicateExpression

    def __str__(self) -> str:
        return f"({self.left} AND {self.right})"


class LogicalOr(ExpressionNode):
    variant: ClassVar[NodeVariant] = NodeVariant.OR

    left: PredicateExpression
    right: PredicateExpression

    def __str__(self) -> str:
        return f"({self.left} OR {self.right})"


class LogicalNot(ExpressionNode):
    variant: ClassVar[NodeVariant] = NodeVariant.NOT

    operand: PredicateExpression

    def __str__(self) -> str:
        return f"(NOT {self.operand})"


PredicateExpression = Union[
    Parameter,
    FieldAccess,
    Comparison,
    Literal,
    LogicalAnd,
    LogicalOr,
    LogicalNot,
]

for _model in (FieldAccess, Comparison, LogicalAnd, LogicalOr, LogicalNot):
    _model.model_rebuild()


# -- structural inspection ---------------------------------------------------


def children(node: PredicateExpression) -> tuple[PredicateExpression, ...]:
    """Return the direct child nodes of *node*, left to right."""
    if isinstance(node, FieldAccess):
        return (node.target,)
    if isinstance(node, (Comparison, LogicalAnd, LogicalOr)):
        return (node.left, node.right)
    if isinstance(node, LogicalNot):
        return (node.operand,)
    return ()


def walk(node: PredicateExpression) -> Iterator[PredicateExpression]:
    """Iterate over *node* and all of its descendants in pre-order."""
    stack: list[PredicateExpression] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def chain_operands(node: LogicalAnd | LogicalOr) -> list[PredicateExpression]:
    """
    Return the operands of an AND (or OR) chain, left to right.

    Nested nodes of the same kind as *node* are flattened, so a left-deep
    ``((a AND b) AND c)`` yields ``[a, b, c]``.
    """
    kind = type(node)
    flat: list[PredicateExpression] = []
    pending: list[PredicateExpression] = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, kind):
            pending.append(current.right)
            pending.append(current.left)
        else:
            flat.append(current)
    return flat


def collect_parameters(node: PredicateExpression) -> list[Parameter]:
    """
    Return the distinct ``Parameter`` instances reachable from *node*.

    Distinctness is by identity; order is first-seen in pre-order.
    """
    seen: dict[int, Parameter] = {}
    for current in walk(node):
        if isinstance(current, Parameter) and id(current) not in seen:
            seen[id(current)] = current
    return list(seen.values())


def attribute(target: PredicateExpression, path: str) -> FieldAccess:
    """
    Build a ``FieldAccess`` chain for a dot-separated *path*.

    ``attribute(p, "address.city")`` is
    ``FieldAccess(FieldAccess(p, "address"), "city")``.
    """
    parts = path.split(".")
    if not all(parts):
        raise ValueError(f"Invalid field path: '{path}'")
    node = FieldAccess(target=target, field_name=parts[0])
    for part in parts[1:]:
        node = FieldAccess(target=node, field_name=part)
    return node


def compare(
    left: PredicateExpression,
    operator: ComparisonOperator | str,
    right: PredicateExpression | Any,
) -> Comparison:
    """Build a ``Comparison``; a non-node *right* is wrapped in a ``Literal``."""
    if not isinstance(right, ExpressionNode):
        right = Literal(value=right)
    return Comparison(
        left=left,
        operator=ComparisonOperator.parse(operator),
        right=right,
    )
