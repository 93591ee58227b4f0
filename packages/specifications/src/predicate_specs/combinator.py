"""
Combinator engine: logical composition of specifications.

Two specifications are each closed over their own ``Parameter``. Gluing
their expressions together as-is would produce a tree with two parameter
identities, which can neither be evaluated against one entity nor
translated by a query backend. The engine therefore allocates one fresh
parameter per composite and rebuilds both operand trees onto it.

Operand trees are never modified: the substitution pass is a structural
copy that only shares ``Literal`` nodes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import (
    EvaluatorMismatchError,
    InvariantViolationError,
    TypeMismatchError,
)
from .expressions import (
    Comparison,
    FieldAccess,
    Literal,
    LogicalAnd,
    LogicalNot,
    LogicalOr,
    Parameter,
    children,
    collect_parameters,
    walk,
)
from .operators import LogicalOperator

if TYPE_CHECKING:
    from .cache import CompositionCache
    from .expressions import PredicateExpression
    from .operators import ComparisonOperator
    from .specification import Specification

logger = logging.getLogger(__name__)


# -- invariant checks --------------------------------------------------------


def ensure_bound_to(
    expression: PredicateExpression,
    parameter: Parameter,
    *,
    context: str,
) -> None:
    """
    Check that *parameter* is the only parameter reachable from *expression*.

    Raises:
        TypeMismatchError: A foreign parameter declares another entity type.
        InvariantViolationError: A foreign parameter of the same type.
    """
    for found in collect_parameters(expression):
        if found is parameter:
            continue
        if found.entity_type is not parameter.entity_type:
            raise TypeMismatchError(parameter.entity_type, found.entity_type, context)
        raise InvariantViolationError(
            f"Expression references parameter '{found.name}' which is not "
            f"its bound parameter '{parameter.name}' ({context})"
        )


def resolve_entity_type(left: type[Any], right: type[Any]) -> type[Any]:
    """
    Return the entity type a composite of *left* and *right* is declared over.

    Identical types and subclass pairs are compatible; the more derived
    type wins. Anything else raises :class:`TypeMismatchError`.
    """
    if left is right:
        return left
    if issubclass(left, right):
        return left
    if issubclass(right, left):
        return right
    raise TypeMismatchError(left, right, "combining specifications")


# -- substitution ------------------------------------------------------------


def substitute(
    expression: PredicateExpression,
    source: Parameter,
    replacement: Parameter,
) -> PredicateExpression:
    """
    Return a structural copy of *expression* with *source* replaced.

    Every node except ``Literal`` is rebuilt, so the result shares no
    parameter or interior node with *expression*. The tree is rebuilt
    bottom-up from an explicit stack, so long AND / OR chains do not
    exhaust the interpreter's recursion limit.

    Raises:
        InvariantViolationError: If a parameter other than *source* is met.
    """
    rebuilt: dict[int, PredicateExpression] = {}
    stack: list[tuple[PredicateExpression, bool]] = [(expression, False)]
    while stack:
        node, expanded = stack.pop()
        if id(node) in rebuilt:
            continue
        kids = children(node)
        if kids and not expanded:
            stack.append((node, True))
            stack.extend((child, False) for child in kids)
            continue
        rebuilt[id(node)] = _rebuild(
            node, [rebuilt[id(child)] for child in kids], source, replacement
        )
    return rebuilt[id(expression)]


def _rebuild(
    node: PredicateExpression,
    kids: list[PredicateExpression],
    source: Parameter,
    replacement: Parameter,
) -> PredicateExpression:
    if isinstance(node, Parameter):
        if node is not source:
            raise InvariantViolationError(
                f"Unexpected parameter '{node.name}' while substituting "
                f"'{source.name}'"
            )
        return replacement
    if isinstance(node, Literal):
        return node
    if isinstance(node, FieldAccess):
        return FieldAccess(target=kids[0], field_name=node.field_name)
    if isinstance(node, Comparison):
        return Comparison(left=kids[0], operator=node.operator, right=kids[1])
    if isinstance(node, LogicalAnd):
        return LogicalAnd(left=kids[0], right=kids[1])
    if isinstance(node, LogicalOr):
        return LogicalOr(left=kids[0], right=kids[1])
    if isinstance(node, LogicalNot):
        return LogicalNot(operand=kids[0])
    raise InvariantViolationError(f"Unknown expression node: {type(node).__name__}")


def ensure_same_strategies(
    left: Specification[Any], right: Specification[Any]
) -> None:
    """
    Check that both operands evaluate their operators the same way.

    A composite is compiled by one evaluator, so an operator used by either
    expression must resolve to the same strategy class in both registries.

    Raises:
        EvaluatorMismatchError: If a used operator resolves differently.
    """
    if left.evaluator.registry is right.evaluator.registry:
        return
    used = _operators_in(left.expression) | _operators_in(right.expression)
    for operator in sorted(used, key=lambda op: op.value):
        left_strategy = type(left.evaluator.registry.get(operator))
        right_strategy = type(right.evaluator.registry.get(operator))
        if left_strategy is not right_strategy:
            raise EvaluatorMismatchError(
                operator.value, left_strategy.__name__, right_strategy.__name__
            )


def _operators_in(expression: PredicateExpression) -> set[ComparisonOperator]:
    return {
        node.operator for node in walk(expression) if isinstance(node, Comparison)
    }


# -- engine ------------------------------------------------------------------


class CombinatorEngine:
    """
    Builds AND / OR / NOT composites of specifications.

    An optional :class:`~predicate_specs.cache.CompositionCache` may be
    injected to memoize composites of the same operand instances.
    """

    def __init__(self, cache: CompositionCache | None = None) -> None:
        self._cache = cache

    @property
    def cache(self) -> CompositionCache | None:
        return self._cache

    def and_(self, left: Specification[Any], right: Specification[Any]) -> Specification[Any]:
        return self._compose(LogicalOperator.AND, left, right)

    def or_(self, left: Specification[Any], right: Specification[Any]) -> Specification[Any]:
        return self._compose(LogicalOperator.OR, left, right)

    def not_(self, operand: Specification[Any]) -> Specification[Any]:
        return self._compose(LogicalOperator.NOT, operand, None)

    # -- internals -----------------------------------------------------------

    def _compose(
        self,
        operator: LogicalOperator,
        left: Specification[Any],
        right: Specification[Any] | None,
    ) -> Specification[Any]:
        if self._cache is not None:
            cached = self._cache.get(operator, left, right)
            if cached is not None:
                return cached

        composite = self._build(operator, left, right)

        if self._cache is not None:
            self._cache.put(operator, left, right, composite)
        return composite

    def _build(
        self,
        operator: LogicalOperator,
        left: Specification[Any],
        right: Specification[Any] | None,
    ) -> Specification[Any]:
        from .specification import Specification

        entity_type = left.parameter.entity_type
        if right is not None:
            entity_type = resolve_entity_type(entity_type, right.parameter.entity_type)
            ensure_same_strategies(left, right)

        ensure_bound_to(left.expression, left.parameter, context="composing")
        parameter = Parameter(name=left.parameter.name, entity_type=entity_type)
        left_expr = substitute(left.expression, left.parameter, parameter)

        expression: PredicateExpression
        if operator is LogicalOperator.NOT:
            expression = LogicalNot(operand=left_expr)
            name = f"(NOT {left.name})"
        else:
            if right is None:
                raise InvariantViolationError(
                    f"'{operator.value}' composition requires a right operand"
                )
            ensure_bound_to(right.expression, right.parameter, context="composing")
            right_expr = substitute(right.expression, right.parameter, parameter)
            if operator is LogicalOperator.AND:
                expression = LogicalAnd(left=left_expr, right=right_expr)
                name = f"({left.name} AND {right.name})"
            else:
                expression = LogicalOr(left=left_expr, right=right_expr)
                name = f"({left.name} OR {right.name})"

        logger.debug("Composed %s over '%s'", name, entity_type.__name__)
        return Specification(name, expression, parameter, evaluator=left.evaluator)


_DEFAULT_ENGINE = CombinatorEngine()


def default_engine() -> CombinatorEngine:
    """Engine used when a specification is combined without ``engine=``."""
    return _DEFAULT_ENGINE
