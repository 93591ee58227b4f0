"""
In-memory evaluation of predicate expressions.

Provides the MemoryOperator strategy interface, the registry that maps
ComparisonOperator → strategy, and the ExpressionEvaluator that turns a
predicate expression into a plain Python callable.

New operators are added by subclassing MemoryOperator and
registering via ``register()``.
"""

from __future__ import annotations

import dataclasses
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .exceptions import EvaluationError, InvariantViolationError, OperatorNotFoundError
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
    children,
)

if TYPE_CHECKING:
    from .expressions import PredicateExpression
    from .operators import ComparisonOperator

logger = logging.getLogger(__name__)

CompiledPredicate = Callable[[Any], Any]


class MemoryOperator(ABC):
    """
    Strategy interface for in-memory operator evaluation.

    Each operator is an isolated class with a single ``evaluate`` method.
    """

    @property
    @abstractmethod
    def name(self) -> ComparisonOperator:
        """The operator this strategy handles."""
        ...

    @abstractmethod
    def evaluate(self, left: Any, right: Any) -> bool:
        """
        Evaluate the operator against concrete operand values.

        Args:
            left: Value produced by the comparison's left operand.
            right: Value produced by the comparison's right operand.

        Returns:
            True if the comparison holds.
        """
        ...


class MemoryOperatorRegistry:
    """
    Registry of MemoryOperator instances keyed by ComparisonOperator.

    Usage::

        registry = MemoryOperatorRegistry()
        registry.register(EqualOperator())

        result = registry.evaluate(ComparisonOperator.EQ, actual, expected)
    """

    def __init__(self) -> None:
        self._operators: dict[ComparisonOperator, MemoryOperator] = {}

    # -- registration --------------------------------------------------------

    def register(self, operator: MemoryOperator) -> None:
        """Register an operator strategy instance."""
        self._operators[operator.name] = operator

    def register_all(self, *operators: MemoryOperator) -> None:
        for op in operators:
            self.register(op)

    def unregister(self, name: ComparisonOperator) -> None:
        self._operators.pop(name, None)

    # -- look-up -------------------------------------------------------------

    def get(self, name: ComparisonOperator) -> MemoryOperator | None:
        """Return the registered operator or ``None``."""
        return self._operators.get(name)

    def require(self, name: ComparisonOperator) -> MemoryOperator:
        """
        Return the registered operator.

        Raises:
            OperatorNotFoundError: If the operator is not registered.
        """
        op = self.get(name)
        if op is None:
            raise OperatorNotFoundError(
                str(getattr(name, "value", name)),
                sorted(o.value for o in self._operators),
            )
        return op

    def has(self, name: ComparisonOperator) -> bool:
        return name in self._operators

    @property
    def supported_operators(self) -> set[ComparisonOperator]:
        return set(self._operators.keys())

    # -- evaluation shortcut -------------------------------------------------

    def evaluate(self, name: ComparisonOperator, left: Any, right: Any) -> bool:
        return self.require(name).evaluate(left, right)


# -- field reading -----------------------------------------------------------


def _available_fields(obj: Any) -> list[str]:
    if isinstance(obj, Mapping):
        return [str(k) for k in obj]
    model_fields = getattr(type(obj), "model_fields", None)
    if isinstance(model_fields, dict):
        return list(model_fields)
    if dataclasses.is_dataclass(obj):
        return [f.name for f in dataclasses.fields(obj)]
    return [name for name in dir(obj) if not name.startswith("_")]


def read_field(obj: Any, field_name: str) -> Any:
    """
    Read *field_name* off *obj*.

    Mappings are read by key, everything else by attribute. A ``None``
    owner yields ``None`` so optional relations can be compared safely.

    Raises:
        EvaluationError: If the field does not exist on *obj*.
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        try:
            return obj[field_name]
        except KeyError as exc:
            raise EvaluationError(
                field_name, type(obj).__name__, _available_fields(obj)
            ) from exc
    try:
        return getattr(obj, field_name)
    except AttributeError as exc:
        raise EvaluationError(
            field_name, type(obj).__name__, _available_fields(obj)
        ) from exc


# -- evaluator ---------------------------------------------------------------


class ExpressionEvaluator:
    """
    Compiles predicate expressions into callables.

    Compilation walks the tree once and produces nested closures; the
    resulting callable takes the entity and returns the expression's
    value. ``LogicalAnd`` / ``LogicalOr`` short-circuit left to right; a
    chain of them compiles to one flat operand list.

    A registry MAY be injected; otherwise the default operator set from
    :func:`~predicate_specs.operators_memory.build_default_registry` is used.
    """

    def __init__(self, registry: MemoryOperatorRegistry | None = None) -> None:
        if registry is None:
            from .operators_memory import build_default_registry

            registry = build_default_registry()
        self._registry = registry
        self._compilers: dict[
            NodeVariant,
            Callable[[Any, Parameter, list[CompiledPredicate]], CompiledPredicate],
        ] = {
            NodeVariant.PARAMETER: self._compile_parameter,
            NodeVariant.LITERAL: self._compile_literal,
            NodeVariant.FIELD_ACCESS: self._compile_field_access,
            NodeVariant.COMPARISON: self._compile_comparison,
            NodeVariant.AND: self._compile_and,
            NodeVariant.OR: self._compile_or,
            NodeVariant.NOT: self._compile_not,
        }

    @property
    def registry(self) -> MemoryOperatorRegistry:
        return self._registry

    def compile(
        self, expression: PredicateExpression, parameter: Parameter
    ) -> CompiledPredicate:
        """Compile *expression*, closed over *parameter*, into a callable."""
        compiled = self._compile(expression, parameter)
        logger.debug(
            "Compiled %s expression over parameter '%s'",
            expression.variant.value,
            parameter.name,
        )
        return compiled

    def evaluate(
        self,
        expression: PredicateExpression,
        parameter: Parameter,
        entity: Any,
    ) -> Any:
        """Evaluate *expression* against *entity* bound to *parameter*."""
        return self._compile(expression, parameter)(entity)

    # -- dispatch ------------------------------------------------------------

    def _compile(self, node: Any, parameter: Parameter) -> CompiledPredicate:
        # Post-order over an explicit stack; AND / OR chains compile to one
        # flat operand list, so evaluation depth does not grow with them.
        compiled: dict[int, CompiledPredicate] = {}
        stack: list[tuple[Any, bool]] = [(node, False)]
        while stack:
            current, expanded = stack.pop()
            if id(current) in compiled:
                continue
            operands = _operands(current)
            if operands and not expanded:
                stack.append((current, True))
                stack.extend((operand, False) for operand in operands)
                continue
            compiler = self._compilers.get(getattr(current, "variant", None))  # type: ignore[arg-type]
            if compiler is None:
                raise InvariantViolationError(
                    f"Unknown expression node: {type(current).__name__}"
                )
            compiled[id(current)] = compiler(
                current, parameter, [compiled[id(operand)] for operand in operands]
            )
        return compiled[id(node)]

    # -- variants ------------------------------------------------------------

    def _compile_parameter(
        self, node: Parameter, parameter: Parameter, _compiled: list[CompiledPredicate]
    ) -> CompiledPredicate:
        if node is not parameter:
            raise InvariantViolationError(
                f"Expression references parameter '{node.name}' "
                f"but is bound to parameter '{parameter.name}'"
            )
        return _identity

    def _compile_literal(
        self, node: Literal, parameter: Parameter, _compiled: list[CompiledPredicate]
    ) -> CompiledPredicate:
        value = node.value
        return lambda _entity: value

    def _compile_field_access(
        self, node: FieldAccess, parameter: Parameter, operands: list[CompiledPredicate]
    ) -> CompiledPredicate:
        (target,) = operands
        field_name = node.field_name
        return lambda entity: read_field(target(entity), field_name)

    def _compile_comparison(
        self, node: Comparison, parameter: Parameter, operands: list[CompiledPredicate]
    ) -> CompiledPredicate:
        left, right = operands
        operator = self._registry.require(node.operator)
        return lambda entity: operator.evaluate(left(entity), right(entity))

    def _compile_and(
        self, node: LogicalAnd, parameter: Parameter, operands: list[CompiledPredicate]
    ) -> CompiledPredicate:
        return lambda entity: all(operand(entity) for operand in operands)

    def _compile_or(
        self, node: LogicalOr, parameter: Parameter, operands: list[CompiledPredicate]
    ) -> CompiledPredicate:
        return lambda entity: any(operand(entity) for operand in operands)

    def _compile_not(
        self, node: LogicalNot, parameter: Parameter, operands: list[CompiledPredicate]
    ) -> CompiledPredicate:
        (operand,) = operands
        return lambda entity: not operand(entity)


def _operands(node: Any) -> list[Any]:
    if isinstance(node, (LogicalAnd, LogicalOr)):
        return chain_operands(node)
    return list(children(node))


def _identity(entity: Any) -> Any:
    return entity
