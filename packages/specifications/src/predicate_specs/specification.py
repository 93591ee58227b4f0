"""Specification pattern primitives."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from .combinator import CombinatorEngine, default_engine, ensure_bound_to
from .evaluator import ExpressionEvaluator
from .expressions import Parameter, PredicateExpression
from .translation import to_dict

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


@runtime_checkable
class ISpecification(Protocol[T_contra]):
    """
    Protocol for the Specification pattern.
    Used to encapsulate business rules for querying and filtering entities.
    """

    def is_satisfied_by(self, candidate: T_contra) -> bool:
        """Check the rule against a single in-memory candidate."""
        ...

    def to_dict(self) -> dict[str, Any]:
        """
        Return a dictionary representation of the specification.
        Useful for serializing criteria across process boundaries or to DB drivers.
        """
        ...


class Specification(Generic[T]):
    """
    A named business rule backed by a predicate expression.

    The expression must be closed over ``parameter`` alone; this is
    checked at construction and the expression is compiled once. After
    construction a specification never changes, so it can be shared and
    evaluated from several threads.

    Leaf specifications are usually written as subclasses::

        class PriceAbove(Specification[Product]):
            def __init__(self, minimum: Decimal) -> None:
                product = Parameter(name="product", entity_type=Product)
                super().__init__(
                    f"PriceAbove({minimum})",
                    compare(attribute(product, "price"), ">", minimum),
                    product,
                )

    Composites come from ``and_`` / ``or_`` / ``not_`` (or ``&``, ``|``, ``~``).
    """

    def __init__(
        self,
        name: str,
        expression: PredicateExpression,
        parameter: Parameter,
        *,
        evaluator: ExpressionEvaluator | None = None,
    ) -> None:
        ensure_bound_to(expression, parameter, context=f"building '{name}'")
        self._name = name
        self._expression = expression
        self._parameter = parameter
        self._evaluator = evaluator if evaluator is not None else ExpressionEvaluator()
        self._predicate = self._evaluator.compile(expression, parameter)

    # -- read-only state -----------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def expression(self) -> PredicateExpression:
        return self._expression

    @property
    def parameter(self) -> Parameter:
        return self._parameter

    @property
    def entity_type(self) -> type[Any]:
        return self._parameter.entity_type

    @property
    def evaluator(self) -> ExpressionEvaluator:
        return self._evaluator

    # -- evaluation ----------------------------------------------------------

    def is_satisfied_by(self, candidate: T) -> bool:
        """
        Evaluate the rule against *candidate*.

        Raises:
            EvaluationError: If a field read by the rule does not exist.
        """
        return bool(self._predicate(candidate))

    def filter(self, candidates: Iterable[T]) -> Iterator[T]:
        """Yield the candidates that satisfy the rule, in order."""
        for candidate in candidates:
            if self.is_satisfied_by(candidate):
                yield candidate

    # -- composition ---------------------------------------------------------

    def and_(
        self, other: Specification[T], *, engine: CombinatorEngine | None = None
    ) -> Specification[T]:
        return (engine or default_engine()).and_(self, other)

    def or_(
        self, other: Specification[T], *, engine: CombinatorEngine | None = None
    ) -> Specification[T]:
        return (engine or default_engine()).or_(self, other)

    def not_(self, *, engine: CombinatorEngine | None = None) -> Specification[T]:
        return (engine or default_engine()).not_(self)

    def merge(self, other: Specification[T]) -> Specification[T]:
        """Merge with another specification using logical AND."""
        return self.and_(other)

    def __and__(self, other: Specification[T]) -> Specification[T]:
        return self.and_(other)

    def __or__(self, other: Specification[T]) -> Specification[T]:
        return self.or_(other)

    def __invert__(self) -> Specification[T]:
        return self.not_()

    # -- serialisation -------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return to_dict(self._expression)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, expression={self._expression})"
