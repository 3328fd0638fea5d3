from dataclasses import replace

import pytest

from breaker_sizing.cache import CachedEngine
from breaker_sizing.errors import ValidationFailed
from breaker_sizing.models import BaseDesign


def test_repeat_calculation_is_a_hit(engine, scenario1_params):
    cached = CachedEngine(engine)
    first = cached.calculate(scenario1_params)
    second = cached.calculate(BaseDesign(scenario1_params))
    assert first is second
    info = cached.cache_info()
    assert (info.hits, info.misses, info.currsize) == (1, 1, 1)


def test_lru_eviction(engine, scenario1_params):
    cached = CachedEngine(engine, maxsize=2)
    a = replace(scenario1_params, load_value=1.0)
    b = replace(scenario1_params, load_value=2.0)
    c = replace(scenario1_params, load_value=3.0)
    cached.calculate(a)
    cached.calculate(b)
    cached.calculate(a)  # a becomes most recent
    cached.calculate(c)  # evicts b
    assert cached.cache_info().currsize == 2
    cached.calculate(a)
    assert cached.cache_info().hits == 2
    cached.calculate(b)
    assert cached.cache_info().misses == 4


def test_invalid_input_is_not_cached(engine, scenario1_params):
    cached = CachedEngine(engine)
    with pytest.raises(ValidationFailed):
        cached.calculate(replace(scenario1_params, voltage_v=-10))
    assert cached.cache_info().currsize == 0


def test_cache_clear(engine, scenario1_params):
    cached = CachedEngine(engine)
    cached.calculate(scenario1_params)
    cached.cache_clear()
    assert cached.cache_info() == (0, 0, 128, 0)


def test_maxsize_must_be_positive(engine):
    with pytest.raises(ValueError):
        CachedEngine(engine, maxsize=0)
