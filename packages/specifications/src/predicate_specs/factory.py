from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from .exceptions import OperatorNotFoundError, ValidationError
from .expressions import (
    FieldAccess,
    Literal,
    LogicalAnd,
    LogicalNot,
    LogicalOr,
    Parameter,
    attribute,
    compare,
)
from .operators import ComparisonOperator, LogicalOperator, valid_operator_names
from .specification import Specification
from .utils import SUPPORTED_VALUE_TYPES, cast_value

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .evaluator import ExpressionEvaluator
    from .expressions import PredicateExpression

_VALID_OPERATORS: frozenset[str] = frozenset(valid_operator_names())
_LOGICAL_OPERATORS: frozenset[str] = frozenset(m.value for m in LogicalOperator)


class SpecificationFactory:
    """
    Factory for creating specifications from dictionary / JSON representations.

    Accepts the shape produced by :func:`~predicate_specs.translation.to_dict`:

    - ``from_dict(data, entity_type=...)``: parse a nested dict tree
    - ``from_json(text, entity_type=...)``: parse a JSON string
    - ``validate(data)``: collect validation errors without constructing
    - ``value_type`` hints on leaves are applied via :func:`cast_value`

    Every node of the resulting expression is bound to one fresh
    ``Parameter`` over *entity_type*.
    """

    # ------------------------------------------------------------------ #
    # Public API                                                          #
    # ------------------------------------------------------------------ #

    @staticmethod
    def from_dict(
        data: dict[str, Any],
        *,
        entity_type: type[Any],
        name: str | None = None,
        parameter_name: str = "entity",
        allowed_fields: Sequence[str] | None = None,
        evaluator: ExpressionEvaluator | None = None,
    ) -> Specification[Any]:
        """
        Create a specification from a dictionary.

        Parameters
        ----------
        data:
            The specification dictionary (potentially nested).
        entity_type:
            Type of the entities the specification will test.
        name:
            Diagnostic name; defaults to the rendered expression.
        allowed_fields:
            Optional whitelist of field paths. Any other ``attr`` raises
            :class:`ValidationError`.
        evaluator:
            Optional evaluator injected into the resulting specification.
        """
        SpecificationFactory._validate_node(
            data, path="<root>", allowed_fields=allowed_fields
        )
        parameter = Parameter(name=parameter_name, entity_type=entity_type)
        expression = SpecificationFactory._build(data, parameter)
        return Specification(
            name if name is not None else str(expression),
            expression,
            parameter,
            evaluator=evaluator,
        )

    @staticmethod
    def from_json(
        text: str,
        *,
        entity_type: type[Any],
        name: str | None = None,
        allowed_fields: Sequence[str] | None = None,
        evaluator: ExpressionEvaluator | None = None,
    ) -> Specification[Any]:
        """Parse a JSON string and build a specification."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid JSON: {exc}", path="<root>") from exc

        if not isinstance(data, dict):
            raise ValidationError(
                "Top-level JSON value must be an object", path="<root>"
            )

        return SpecificationFactory.from_dict(
            data,
            entity_type=entity_type,
            name=name,
            allowed_fields=allowed_fields,
            evaluator=evaluator,
        )

    @staticmethod
    def validate(
        data: Any,
        *,
        allowed_fields: Sequence[str] | None = None,
    ) -> list[str]:
        """
        Validate a specification dict and return a list of error messages.

        Returns an empty list when the structure is valid.
        """
        errors: list[str] = []
        SpecificationFactory._collect_errors(
            data, errors, path="<root>", allowed_fields=allowed_fields
        )
        return errors

    # ------------------------------------------------------------------ #
    # Internal: recursive build                                          #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build(data: dict[str, Any], parameter: Parameter) -> PredicateExpression:
        op_str = data["op"].lower()

        if op_str in (LogicalOperator.AND, LogicalOperator.OR):
            children = [
                SpecificationFactory._build(c, parameter)
                for c in _conditions(data)
            ]
            node_type = LogicalAnd if op_str == LogicalOperator.AND else LogicalOr
            expression = children[0]
            for child in children[1:]:
                expression = node_type(left=expression, right=child)
            return expression
        if op_str == LogicalOperator.NOT:
            return LogicalNot(
                operand=SpecificationFactory._build(_conditions(data)[0], parameter)
            )

        operator = ComparisonOperator.parse(op_str)
        if "attr" in data:
            val = cast_value(data.get("val"), data.get("value_type"))
            return compare(attribute(parameter, data["attr"]), operator, val)
        return compare(
            SpecificationFactory._build_operand(data["left"], parameter),
            operator,
            SpecificationFactory._build_operand(data["right"], parameter),
        )

    @staticmethod
    def _build_operand(data: dict[str, Any], parameter: Parameter) -> PredicateExpression:
        if "literal" in data:
            return Literal(value=data["literal"])
        if "param" in data:
            return parameter
        if "field" in data:
            if "of" in data:
                target = SpecificationFactory._build_operand(data["of"], parameter)
                return FieldAccess(target=target, field_name=data["field"])
            return attribute(parameter, data["field"])
        return SpecificationFactory._build(data, parameter)

    # ------------------------------------------------------------------ #
    # Internal: validation                                               #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_node(
        data: Any,
        *,
        path: str,
        allowed_fields: Sequence[str] | None,
    ) -> None:
        """Raise on first validation error (fail-fast)."""
        if not isinstance(data, dict):
            raise ValidationError(
                f"Expected a dict, got {type(data).__name__}", path=path
            )

        op_str = data.get("op")
        if not op_str or not isinstance(op_str, str):
            raise ValidationError("Missing or empty 'op' key", path=path)

        op_lower = op_str.lower()
        if op_lower in _LOGICAL_OPERATORS:
            SpecificationFactory._validate_logical_node(
                data, op_lower, path, allowed_fields
            )
            return

        if op_lower not in _VALID_OPERATORS:
            raise OperatorNotFoundError(op_str, sorted(_VALID_OPERATORS))

        if "attr" in data:
            SpecificationFactory._validate_leaf_node(data, path, allowed_fields)
        elif "left" in data and "right" in data:
            for side in ("left", "right"):
                SpecificationFactory._validate_operand(
                    data[side], path=f"{path}.{side}", allowed_fields=allowed_fields
                )
        else:
            raise ValidationError(
                f"Comparison requires 'attr' or 'left'/'right': {data}", path=path
            )

    @staticmethod
    def _validate_logical_node(
        data: dict[str, Any],
        op_lower: str,
        path: str,
        allowed_fields: Sequence[str] | None,
    ) -> None:
        conditions = data.get("conditions")
        if conditions is None and "condition" in data:
            SpecificationFactory._validate_node(
                data["condition"], path=f"{path}.condition", allowed_fields=allowed_fields
            )
            return
        if not isinstance(conditions, list) or not conditions:
            raise ValidationError(
                f"Logical operator '{op_lower}' requires a non-empty 'conditions' list",
                path=path,
            )
        if op_lower == LogicalOperator.NOT and len(conditions) != 1:
            raise ValidationError(
                "Logical operator 'not' takes exactly one condition", path=path
            )
        for idx, child in enumerate(conditions):
            SpecificationFactory._validate_node(
                child,
                path=f"{path}.conditions[{idx}]",
                allowed_fields=allowed_fields,
            )

    @staticmethod
    def _validate_leaf_node(
        data: dict[str, Any],
        path: str,
        allowed_fields: Sequence[str] | None,
    ) -> None:
        attr = data.get("attr")
        if not attr or not isinstance(attr, str) or not all(attr.split(".")):
            raise ValidationError(
                f"Leaf specification has an invalid 'attr': {data}", path=path
            )
        if allowed_fields is not None and attr not in allowed_fields:
            raise ValidationError(
                f"Field '{attr}' is not in the allowed fields list", path=path
            )
        value_type = data.get("value_type")
        if value_type is not None:
            if not isinstance(value_type, str) or value_type.lower() not in SUPPORTED_VALUE_TYPES:
                raise ValidationError(
                    f"Unsupported value_type: {value_type!r}", path=path
                )
            try:
                cast_value(data.get("val"), value_type)
            except ValueError as exc:
                raise ValidationError(str(exc), path=path) from exc

    @staticmethod
    def _validate_operand(
        data: Any,
        *,
        path: str,
        allowed_fields: Sequence[str] | None,
        in_chain: bool = False,
    ) -> None:
        if not isinstance(data, dict):
            raise ValidationError(
                f"Expected a dict, got {type(data).__name__}", path=path
            )
        if "literal" in data or "param" in data:
            return
        if "field" in data:
            field = data["field"]
            if not field or not isinstance(field, str):
                raise ValidationError("Operand has an invalid 'field'", path=path)
            if "of" in data:
                SpecificationFactory._validate_operand(
                    data["of"],
                    path=f"{path}.of",
                    allowed_fields=allowed_fields,
                    in_chain=True,
                )
            # Only the outermost link of a chain names a complete field path.
            if in_chain or allowed_fields is None:
                return
            dotted = _field_chain_path(data)
            if dotted is not None and dotted not in allowed_fields:
                raise ValidationError(
                    f"Field '{dotted}' is not in the allowed fields list", path=path
                )
            return
        SpecificationFactory._validate_node(
            data, path=path, allowed_fields=allowed_fields
        )

    @staticmethod
    def _collect_errors(
        data: Any,
        errors: list[str],
        *,
        path: str,
        allowed_fields: Sequence[str] | None,
    ) -> None:
        """Recursive error collection (non-throwing)."""
        if not isinstance(data, dict):
            errors.append(f"{path}: expected dict, got {type(data).__name__}")
            return

        op_str = data.get("op")
        if not op_str or not isinstance(op_str, str):
            errors.append(f"{path}: missing or empty 'op' key")
            return

        op_lower = op_str.lower()
        if op_lower in _LOGICAL_OPERATORS:
            conditions = data.get("conditions")
            if conditions is None and "condition" in data:
                conditions = [data["condition"]]
            if not isinstance(conditions, list) or not conditions:
                errors.append(f"{path}: logical '{op_lower}' requires 'conditions'")
                return
            for idx, child in enumerate(conditions):
                SpecificationFactory._collect_errors(
                    child,
                    errors,
                    path=f"{path}.conditions[{idx}]",
                    allowed_fields=allowed_fields,
                )
            return

        if op_lower not in _VALID_OPERATORS:
            errors.append(f"{path}: unknown operator '{op_str}'")

        try:
            if "attr" in data:
                SpecificationFactory._validate_leaf_node(data, path, allowed_fields)
            elif "left" in data and "right" in data:
                for side in ("left", "right"):
                    SpecificationFactory._validate_operand(
                        data[side], path=f"{path}.{side}", allowed_fields=allowed_fields
                    )
            else:
                errors.append(f"{path}: missing 'attr'")
        except ValidationError as exc:
            errors.append(f"{exc.path}: {exc.message}")
        except OperatorNotFoundError as exc:
            errors.append(f"{path}: unknown operator '{exc.operator}'")


def _conditions(data: dict[str, Any]) -> list[dict[str, Any]]:
    conditions = data.get("conditions")
    if conditions is None:
        return [data["condition"]]
    return list(conditions)


def _field_chain_path(data: dict[str, Any]) -> str | None:
    """
    Dotted path of a ``field`` / ``of`` operand chain rooted at the parameter.

    ``{"field": "city", "of": {"field": "address"}}`` is ``address.city``.
    Returns ``None`` when the chain reads off anything but the parameter.
    """
    parts = [str(data["field"])]
    node: Any = data
    while "of" in node:
        node = node["of"]
        if not isinstance(node, dict) or "literal" in node:
            return None
        if "param" in node:
            break
        if "field" not in node:
            return None
        parts.append(str(node["field"]))
    return ".".join(reversed(parts))
