from enum import Enum


class ComparisonOperator(str, Enum):
    """Operators a :class:`~predicate_specs.expressions.Comparison` may apply."""

    EQ = "eq"
    NEQ = "neq"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"

    # Membership
    IN = "in"
    CONTAINS = "contains"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def mirrored(self) -> "ComparisonOperator | None":
        """Operator equivalent to this one with operands swapped, if any."""
        return _MIRRORED.get(self)

    @classmethod
    def parse(cls, value: "ComparisonOperator | str") -> "ComparisonOperator":
        """Accept an enum member, its value (``"gte"``) or its symbol (``">="``)."""
        if isinstance(value, ComparisonOperator):
            return value
        lowered = value.lower()
        for member in cls:
            if lowered in (member.value, _SYMBOLS[member]):
                return member
        from .exceptions import OperatorNotFoundError

        raise OperatorNotFoundError(value, valid_operator_names())


class LogicalOperator(str, Enum):
    """Logical connectives used by the combinator engine and serializers."""

    AND = "and"
    OR = "or"
    NOT = "not"


_SYMBOLS: dict[ComparisonOperator, str] = {
    ComparisonOperator.EQ: "=",
    ComparisonOperator.NEQ: "!=",
    ComparisonOperator.LT: "<",
    ComparisonOperator.LTE: "<=",
    ComparisonOperator.GT: ">",
    ComparisonOperator.GTE: ">=",
    ComparisonOperator.IN: "in",
    ComparisonOperator.CONTAINS: "contains",
}

_MIRRORED: dict[ComparisonOperator, ComparisonOperator] = {
    ComparisonOperator.EQ: ComparisonOperator.EQ,
    ComparisonOperator.NEQ: ComparisonOperator.NEQ,
    ComparisonOperator.LT: ComparisonOperator.GT,
    ComparisonOperator.LTE: ComparisonOperator.GTE,
    ComparisonOperator.GT: ComparisonOperator.LT,
    ComparisonOperator.GTE: ComparisonOperator.LTE,
    ComparisonOperator.IN: ComparisonOperator.CONTAINS,
    ComparisonOperator.CONTAINS: ComparisonOperator.IN,
}


def valid_operator_names() -> list[str]:
    """Every spelling :meth:`ComparisonOperator.parse` accepts."""
    names = {m.value for m in ComparisonOperator} | set(_SYMBOLS.values())
    return sorted(names)
