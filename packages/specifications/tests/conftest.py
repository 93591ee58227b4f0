"""Shared fixtures for specifications tests."""

from __future__ import annotations

import pytest

from predicate_specs import ExpressionEvaluator
from predicate_specs.operators_memory import build_default_registry


@pytest.fixture
def registry():
    """Default in-memory operator registry."""
    return build_default_registry()


@pytest.fixture
def evaluator(registry) -> ExpressionEvaluator:
    return ExpressionEvaluator(registry=registry)
