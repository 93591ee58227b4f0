"""Tests for the predicate expression tree."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError as PydanticValidationError

from predicate_specs import (
    Comparison,
    ComparisonOperator,
    FieldAccess,
    Literal,
    LogicalAnd,
    LogicalNot,
    LogicalOr,
    NodeVariant,
    Parameter,
    attribute,
    children,
    collect_parameters,
    compare,
    walk,
)


class Address(BaseModel):
    city: str


class Customer(BaseModel):
    name: str
    address: Address


@pytest.fixture
def customer_param() -> Parameter:
    return Parameter(name="customer", entity_type=Customer)


# -- Parameter identity ------------------------------------------------------


def test_parameters_compare_by_identity():
    a = Parameter(name="c", entity_type=Customer)
    b = Parameter(name="c", entity_type=Customer)
    assert a == a
    assert a != b
    assert len({a, b}) == 2


def test_nodes_are_frozen(customer_param: Parameter):
    node = Literal(value=1)
    with pytest.raises(PydanticValidationError):
        node.value = 2  # type: ignore[misc]
    with pytest.raises(PydanticValidationError):
        customer_param.name = "other"  # type: ignore[misc]


def test_nodes_keep_child_identity(customer_param: Parameter):
    access = FieldAccess(target=customer_param, field_name="name")
    assert access.target is customer_param

    cmp = Comparison(left=access, operator=ComparisonOperator.EQ, right=Literal(value="x"))
    assert cmp.left is access


def test_variant_tags():
    p = Parameter(name="c", entity_type=Customer)
    lit = Literal(value=True)
    assert p.variant is NodeVariant.PARAMETER
    assert lit.variant is NodeVariant.LITERAL
    assert FieldAccess(target=p, field_name="x").variant is NodeVariant.FIELD_ACCESS
    assert LogicalAnd(left=lit, right=lit).variant is NodeVariant.AND
    assert LogicalOr(left=lit, right=lit).variant is NodeVariant.OR
    assert LogicalNot(operand=lit).variant is NodeVariant.NOT


# -- helpers -----------------------------------------------------------------


def test_attribute_builds_nested_chain(customer_param: Parameter):
    node = attribute(customer_param, "address.city")
    assert node.field_name == "city"
    assert isinstance(node.target, FieldAccess)
    assert node.target.field_name == "address"
    assert node.target.target is customer_param
    assert node.path == "address.city"
    assert node.root is customer_param


@pytest.mark.parametrize("path", ["", "address.", ".city", "a..b"])
def test_attribute_rejects_empty_segments(customer_param: Parameter, path: str):
    with pytest.raises(ValueError, match="Invalid field path"):
        attribute(customer_param, path)


def test_compare_wraps_plain_values(customer_param: Parameter):
    node = compare(attribute(customer_param, "name"), ">=", "M")
    assert node.operator is ComparisonOperator.GTE
    assert isinstance(node.right, Literal)
    assert node.right.value == "M"


def test_compare_keeps_nodes(customer_param: Parameter):
    right = attribute(customer_param, "address.city")
    node = compare(attribute(customer_param, "name"), "eq", right)
    assert node.right is right


# -- structural scans ----------------------------------------------------------


def test_children_and_walk_order(customer_param: Parameter):
    name_eq = compare(attribute(customer_param, "name"), "=", "Ann")
    city_eq = compare(attribute(customer_param, "address.city"), "=", "Oslo")
    tree = LogicalOr(left=name_eq, right=LogicalNot(operand=city_eq))

    assert children(tree) == (name_eq, tree.right)
    assert children(customer_param) == ()

    variants = [node.variant for node in walk(tree)]
    assert variants[:4] == [
        NodeVariant.OR,
        NodeVariant.COMPARISON,
        NodeVariant.FIELD_ACCESS,
        NodeVariant.PARAMETER,
    ]
    assert variants.count(NodeVariant.PARAMETER) == 2


def test_collect_parameters_dedupes_by_identity(customer_param: Parameter):
    tree = LogicalAnd(
        left=compare(attribute(customer_param, "name"), "=", "Ann"),
        right=compare(attribute(customer_param, "address.city"), "=", "Oslo"),
    )
    assert collect_parameters(tree) == [customer_param]


def test_collect_parameters_finds_foreign_parameters(customer_param: Parameter):
    other = Parameter(name="customer", entity_type=Customer)
    tree = LogicalAnd(
        left=compare(attribute(customer_param, "name"), "=", "Ann"),
        right=compare(attribute(other, "name"), "=", "Bob"),
    )
    found = collect_parameters(tree)
    assert len(found) == 2
    assert found[0] is customer_param
    assert found[1] is other


def test_collect_parameters_literal_only():
    assert collect_parameters(Literal(value=True)) == []


def test_str_rendering(customer_param: Parameter):
    tree = LogicalAnd(
        left=compare(attribute(customer_param, "name"), "=", "Ann"),
        right=LogicalNot(operand=compare(attribute(customer_param, "address.city"), "!=", "Oslo")),
    )
    assert str(tree) == (
        "((customer.name = 'Ann') AND (NOT (customer.address.city != 'Oslo')))"
    )
