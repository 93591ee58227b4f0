"""Tests for CompositionCache injected into the combinator engine."""

from __future__ import annotations

import pytest

from predicate_specs import (
    CombinatorEngine,
    CompositionCache,
    LogicalOperator,
    SpecificationBuilder,
)


@pytest.fixture
def cache() -> CompositionCache:
    return CompositionCache()


@pytest.fixture
def engine(cache: CompositionCache) -> CombinatorEngine:
    return CombinatorEngine(cache=cache)


@pytest.fixture
def specs():
    active = SpecificationBuilder(dict).where("status", "=", "active").build()
    adult = SpecificationBuilder(dict).where("age", ">=", 18).build()
    return active, adult


def test_repeated_composition_hits_cache(engine, cache, specs):
    active, adult = specs
    first = active.and_(adult, engine=engine)
    second = active.and_(adult, engine=engine)

    assert first is second
    assert cache.hits == 1
    assert cache.misses == 1
    assert len(cache) == 1


def test_keys_distinguish_operator_and_order(engine, cache, specs):
    active, adult = specs
    both = active.and_(adult, engine=engine)
    either = active.or_(adult, engine=engine)
    swapped = adult.and_(active, engine=engine)
    negated = active.not_(engine=engine)

    assert len({id(both), id(either), id(swapped), id(negated)}) == 4
    assert len(cache) == 4
    assert cache.get(LogicalOperator.NOT, active) is negated


def test_default_engine_does_not_cache(specs):
    active, adult = specs
    assert active.and_(adult) is not active.and_(adult)


def test_max_size_evicts_least_recently_used(specs):
    active, adult = specs
    cache = CompositionCache(max_size=2)
    engine = CombinatorEngine(cache=cache)

    both = active.and_(adult, engine=engine)
    either = active.or_(adult, engine=engine)
    assert active.and_(adult, engine=engine) is both  # refresh
    active.not_(engine=engine)

    assert len(cache) == 2
    assert cache.get(LogicalOperator.OR, active, adult) is None
    assert cache.get(LogicalOperator.AND, active, adult) is both
    assert either is not None


def test_clear(engine, cache, specs):
    active, adult = specs
    active.and_(adult, engine=engine)
    cache.clear()
    assert len(cache) == 0
    assert cache.hits == 0
    assert cache.misses == 0


def test_invalid_max_size():
    with pytest.raises(ValueError, match="max_size"):
        CompositionCache(max_size=0)


def test_builder_uses_injected_engine(engine, cache):
    build = (
        SpecificationBuilder(dict, engine=engine)
        .where("status", "=", "active")
        .where("age", ">=", 18)
    )
    spec = build.build()
    assert spec.is_satisfied_by({"status": "active", "age": 30}) is True
    assert len(cache) == 1


def test_default_cache_is_bounded():
    assert CompositionCache().max_size == 1024
    assert CompositionCache(max_size=None).max_size is None
