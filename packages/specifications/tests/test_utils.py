"""Tests for utility functions."""

from __future__ import annotations

import datetime as dt
import uuid as uuid_module
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from predicate_specs.utils import SUPPORTED_VALUE_TYPES, cast_value, parse_list_value

# -- cast_value ---------------------------------------------------------------


class TestCastValue:
    def test_no_value_type_passthrough(self):
        assert cast_value("42") == "42"

    def test_none_value_passthrough(self):
        assert cast_value(None, "int") is None

    def test_int(self):
        assert cast_value("42", "int") == 42
        assert cast_value("42", "integer") == 42

    def test_float(self):
        assert cast_value("3.14", "float") == pytest.approx(3.14)
        assert cast_value("3.14", "double") == pytest.approx(3.14)

    def test_decimal(self):
        assert cast_value("1500.00", "decimal") == Decimal("1500.00")
        assert isinstance(cast_value(2.5, "numeric"), Decimal)

    def test_bool_true(self):
        assert cast_value("true", "bool") is True
        assert cast_value("1", "boolean") is True
        assert cast_value("yes", "bool") is True

    def test_bool_false(self):
        assert cast_value("false", "bool") is False
        assert cast_value("0", "bool") is False

    def test_bool_from_actual_bool(self):
        assert cast_value(False, "bool") is False

    def test_str(self):
        assert cast_value(123, "str") == "123"
        assert cast_value(123, "string") == "123"

    def test_case_insensitive_type(self):
        assert cast_value("7", "INT") == 7

    def test_date(self):
        assert cast_value("2024-01-15", "date") == dt.date(2024, 1, 15)

    def test_date_from_date_object(self):
        d = dt.date(2024, 1, 15)
        assert cast_value(d, "date") is d

    def test_datetime(self):
        result = cast_value("2024-01-15T10:30:00", "datetime")
        assert result == datetime(2024, 1, 15, 10, 30)

    def test_datetime_with_timezone_z(self):
        result = cast_value("2024-01-15T10:30:00Z", "datetime")
        assert result == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_datetime_normalised_to_utc(self):
        result = cast_value("2024-01-15T12:30:00+02:00", "datetime")
        assert result.tzinfo == timezone.utc
        assert result.hour == 10

    def test_uuid(self):
        raw = "12345678-1234-5678-1234-567812345678"
        assert cast_value(raw, "uuid") == uuid_module.UUID(raw)

    def test_uuid_from_uuid_object(self):
        u = uuid_module.uuid4()
        assert cast_value(u, "uuid") is u

    def test_list(self):
        assert cast_value("a, b, c", "list") == ["a", "b", "c"]

    def test_list_items_cast_individually(self):
        assert cast_value(["1", "2", "3"], "int") == [1, 2, 3]

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError, match="Unsupported value_type"):
            cast_value("x", "geometry")

    def test_failed_cast_raises(self):
        with pytest.raises(ValueError):
            cast_value("abc", "int")

    def test_failed_decimal_cast_is_wrapped(self):
        with pytest.raises(ValueError, match="Cannot cast 'abc' to 'decimal'"):
            cast_value("abc", "decimal")

    @pytest.mark.parametrize("vt", sorted(SUPPORTED_VALUE_TYPES))
    def test_every_supported_type_is_dispatched(self, vt):
        samples = {
            "date": "2024-01-01",
            "datetime": "2024-01-01T00:00:00",
            "uuid": "12345678-1234-5678-1234-567812345678",
        }
        assert cast_value(samples.get(vt, "1"), vt) is not None


# -- parse_list_value --------------------------------------------------------


class TestParseListValue:
    def test_list_passthrough(self):
        assert parse_list_value([1, 2]) == [1, 2]

    def test_tuple_conversion(self):
        assert parse_list_value((1, 2)) == [1, 2]

    def test_set_conversion(self):
        assert sorted(parse_list_value({1, 2})) == [1, 2]

    def test_comma_separated_string(self):
        assert parse_list_value("a,b,c") == ["a", "b", "c"]

    def test_bracketed_string_with_quotes(self):
        assert parse_list_value("['a', \"b\"]") == ["a", "b"]

    def test_empty_bracketed_string(self):
        assert parse_list_value("[]") == []

    def test_empty_string(self):
        assert parse_list_value("") == []

    def test_scalar(self):
        assert parse_list_value(5) == [5]
