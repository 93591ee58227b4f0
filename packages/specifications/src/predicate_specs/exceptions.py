"""
Specification exception hierarchy with fuzzy-match suggestions.

All exceptions inherit from ``SpecificationError`` and provide
``to_dict()`` for API-friendly error responses.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class SpecificationError(Exception):
    """Base exception for all specification errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class TypeMismatchError(SpecificationError):
    """Two parameters that must agree are declared over different entity types."""

    def __init__(self, expected: type[Any], actual: type[Any], context: str) -> None:
        self.expected = expected
        self.actual = actual
        self.context = context
        super().__init__(
            f"Entity type mismatch while {context}: "
            f"expected '{expected.__name__}', got '{actual.__name__}'"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "TYPE_MISMATCH",
            "expected": self.expected.__name__,
            "actual": self.actual.__name__,
            "context": self.context,
        }


class EvaluationError(SpecificationError):
    """
    A field access named an attribute the candidate does not have.

    Uses fuzzy matching to suggest similar attribute names.

    Example error message::

        Cannot read field 'prise' on 'Product'.
        Did you mean one of these?
          • price

        Available fields: category, in_stock, price
    """

    def __init__(
        self,
        field_name: str,
        owner_name: str,
        available_fields: list[str],
        cutoff: float = 0.6,
    ) -> None:
        self.field_name = field_name
        self.owner_name = owner_name
        self.available_fields = available_fields
        self.suggestions = get_close_matches(
            field_name, available_fields, n=5, cutoff=cutoff
        )
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        lines = [f"Cannot read field '{self.field_name}' on '{self.owner_name}'."]
        if self.suggestions:
            lines.append("Did you mean one of these?")
            for s in self.suggestions:
                lines.append(f"  • {s}")

        sorted_fields = sorted(self.available_fields)
        if sorted_fields:
            preview = ", ".join(sorted_fields[:15])
            if len(sorted_fields) > 15:
                preview += ", ..."
            lines.append(f"Available fields: {preview}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "EVALUATION_ERROR",
            "field": self.field_name,
            "owner": self.owner_name,
            "suggestions": self.suggestions,
            "available_fields": sorted(self.available_fields),
        }


class InvariantViolationError(SpecificationError):
    """
    An expression references more than one parameter, or a foreign one.

    Reaching this from the public API indicates a bug in the library
    rather than bad caller input.
    """


class EvaluatorMismatchError(SpecificationError):
    """
    Two specifications resolve the same operator to different strategies.

    A composite is compiled by a single evaluator, so its operands must
    agree on every operator their expressions use.
    """

    def __init__(self, operator: str, left: str, right: str) -> None:
        self.operator = operator
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot combine specifications: operator '{operator}' is "
            f"evaluated by '{left}' on the left and by '{right}' on the right"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "EVALUATOR_MISMATCH",
            "operator": self.operator,
            "left": self.left,
            "right": self.right,
        }


class ValidationError(SpecificationError):
    """Specification structure validation failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "message": self.message,
            "path": self.path,
        }


class OperatorNotFoundError(SpecificationError):
    """
    Unknown operator specified.

    Provides fuzzy-matched suggestions for likely intended operators.
    """

    def __init__(self, operator: str, valid_operators: list[str]) -> None:
        self.operator = operator
        self.valid_operators = valid_operators
        self.suggestions = get_close_matches(operator, valid_operators, n=3, cutoff=0.6)

        message = f"Unknown operator: '{operator}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Valid operators: {', '.join(sorted(valid_operators))}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "OPERATOR_NOT_FOUND",
            "operator": self.operator,
            "suggestions": self.suggestions,
            "valid_operators": sorted(self.valid_operators),
        }
