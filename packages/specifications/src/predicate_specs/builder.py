"""
Fluent builder for constructing specifications.

Example::

    spec = (
        SpecificationBuilder(Product)
        .where("category", "=", "Electronics")
        .where("price", ">", 100)
        .build()
    )
    # → (category = 'Electronics' AND price > 100)

    spec = (
        SpecificationBuilder(User)
        .or_group()
            .where("role", "=", "admin")
            .where("role", "=", "superuser")
        .end_group()
        .where("active", "=", True)
        .build()
    )
    # → ((role = 'admin' OR role = 'superuser') AND active = True)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .combinator import default_engine
from .exceptions import ValidationError
from .expressions import Parameter, attribute, compare
from .operators import ComparisonOperator, LogicalOperator
from .specification import Specification

if TYPE_CHECKING:
    from .combinator import CombinatorEngine
    from .evaluator import ExpressionEvaluator


class SpecificationBuilder:
    """
    Fluent builder for composing specification trees.

    Conditions added at the same level are combined with AND by default.
    Use ``or_group()`` / ``and_group()`` / ``not_group()`` for explicit
    grouping, and ``end_group()`` to close the current group. Every
    combination goes through the combinator engine, so the built
    specification is closed over a single parameter.
    """

    def __init__(
        self,
        entity_type: type[Any],
        *,
        evaluator: ExpressionEvaluator | None = None,
        engine: CombinatorEngine | None = None,
        parameter_name: str = "entity",
    ) -> None:
        self._entity_type = entity_type
        self._evaluator = evaluator
        self._engine = engine if engine is not None else default_engine()
        self._parameter_name = parameter_name
        self._specs: list[Specification[Any]] = []
        self._stack: list[tuple[LogicalOperator, list[Specification[Any]]]] = []

    # -- leaf conditions -----------------------------------------------------

    def where(
        self,
        attr: str,
        op: ComparisonOperator | str,
        val: Any = None,
        *,
        name: str | None = None,
    ) -> SpecificationBuilder:
        """Add a single attribute condition to the current group."""
        operator = ComparisonOperator.parse(op)
        parameter = Parameter(name=self._parameter_name, entity_type=self._entity_type)
        self._current_list().append(
            Specification(
                name or f"{attr} {operator.symbol} {val!r}",
                compare(attribute(parameter, attr), operator, val),
                parameter,
                evaluator=self._evaluator,
            )
        )
        return self

    def add(self, spec: Specification[Any]) -> SpecificationBuilder:
        """Add an already-constructed specification to the current group."""
        self._current_list().append(spec)
        return self

    # -- grouping ------------------------------------------------------------

    def and_group(self) -> SpecificationBuilder:
        """Open a new AND group.  Close with ``end_group()``."""
        self._stack.append((LogicalOperator.AND, []))
        return self

    def or_group(self) -> SpecificationBuilder:
        """Open a new OR group.  Close with ``end_group()``."""
        self._stack.append((LogicalOperator.OR, []))
        return self

    def not_group(self) -> SpecificationBuilder:
        """Open a new NOT group (single child).  Close with ``end_group()``."""
        self._stack.append((LogicalOperator.NOT, []))
        return self

    def end_group(self) -> SpecificationBuilder:
        """Close the current group and add it to the parent."""
        if not self._stack:
            raise ValidationError("No open group to close")
        group_op, specs = self._stack.pop()
        self._current_list().append(self._combine(group_op, specs))
        return self

    # -- build ---------------------------------------------------------------

    def build(self) -> Specification[Any]:
        """
        Finalise and return the composed specification.

        If there is a single condition, returns it directly.
        Multiple conditions at the top level are combined with AND.

        Raises:
            ValidationError: If groups are still open or no conditions were added.
        """
        if self._stack:
            raise ValidationError(
                f"{len(self._stack)} group(s) still open; "
                f"call end_group() before build()"
            )
        if not self._specs:
            raise ValidationError("No conditions added to builder")
        return self._combine(LogicalOperator.AND, self._specs)

    def reset(self) -> SpecificationBuilder:
        """Clear all conditions and return ``self`` for reuse."""
        self._specs.clear()
        self._stack.clear()
        return self

    # -- internals -----------------------------------------------------------

    def _current_list(self) -> list[Specification[Any]]:
        if self._stack:
            return self._stack[-1][1]
        return self._specs

    def _combine(
        self, op: LogicalOperator, specs: list[Specification[Any]]
    ) -> Specification[Any]:
        if not specs:
            raise ValidationError("Cannot create an empty group")
        if op is LogicalOperator.NOT:
            if len(specs) != 1:
                raise ValidationError("NOT group must contain exactly one condition")
            return self._engine.not_(specs[0])
        combined = specs[0]
        for spec in specs[1:]:
            combined = (
                self._engine.and_(combined, spec)
                if op is LogicalOperator.AND
                else self._engine.or_(combined, spec)
            )
        return combined
