"""
Value casting for serialised specifications.

JSON has no dates, decimals or UUIDs, so leaf conditions may carry a
``value_type`` hint telling the factory how to restore the literal.
"""

from __future__ import annotations

import datetime
import uuid as uuid_module
from decimal import Decimal, InvalidOperation
from typing import Any

_STRING_TYPES = frozenset({"string", "text", "str"})
_INT_TYPES = frozenset({"integer", "int"})
_FLOAT_TYPES = frozenset({"float", "double"})
_DECIMAL_TYPES = frozenset({"decimal", "numeric"})
_BOOL_TYPES = frozenset({"boolean", "bool"})

SUPPORTED_VALUE_TYPES: frozenset[str] = (
    _STRING_TYPES
    | _INT_TYPES
    | _FLOAT_TYPES
    | _DECIMAL_TYPES
    | _BOOL_TYPES
    | {"date", "datetime", "uuid", "list"}
)


def parse_list_value(value: Any) -> list[Any]:
    """
    Parse a value into a list.

    Supports:
    - Python collections (list, tuple, set)
    - Comma-separated strings: ``"val1, val2"``
    - Bracketed strings: ``"[val1, val2]"`` or ``"['val1', 'val2']"``
    """
    if isinstance(value, list | tuple | set):
        return list(value)
    if isinstance(value, str):
        content = value.strip()
        if content.startswith("[") and content.endswith("]"):
            content = content[1:-1].strip()
        if not content:
            return []
        return [v.strip().strip("'").strip('"') for v in content.split(",")]
    return [value]


def _cast_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    return bool(value)


def _cast_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    result = datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if result.tzinfo is not None:
        result = result.astimezone(datetime.timezone.utc)
    return result


def _cast_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def _cast_explicit(value: Any, vt: str) -> Any:
    if vt in _STRING_TYPES:
        return str(value)
    if vt in _INT_TYPES:
        return int(value)
    if vt in _FLOAT_TYPES:
        return float(value)
    if vt in _DECIMAL_TYPES:
        return Decimal(str(value))
    if vt in _BOOL_TYPES:
        return _cast_boolean(value)
    if vt == "date":
        return _cast_date(value)
    if vt == "datetime":
        return _cast_datetime(value)
    if vt == "uuid":
        return value if isinstance(value, uuid_module.UUID) else uuid_module.UUID(str(value))
    if vt == "list":
        return parse_list_value(value)
    raise ValueError(f"Unsupported value_type: '{vt}'")


def cast_value(value: Any, value_type: str | None = None) -> Any:
    """
    Cast *value* according to *value_type*.

    Without a *value_type* the value passes through unchanged. A list is
    cast item by item (except for ``value_type="list"``).

    Raises:
        ValueError: If the type is unsupported or the value cannot be cast.
    """
    if value_type is None or value is None:
        return value
    vt = value_type.lower()
    if isinstance(value, list) and vt != "list":
        return [cast_value(item, vt) for item in value]
    try:
        return _cast_explicit(value, vt)
    except (TypeError, InvalidOperation) as exc:
        raise ValueError(f"Cannot cast {value!r} to '{vt}'") from exc
