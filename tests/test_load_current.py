import math

import pytest

from breaker_sizing.models import Duty, Phase, Standard
from breaker_sizing.load_current import calc_apparent_power_kva, calc_current_from_power
from breaker_sizing.safety_factors import apply_safety_factor


def test_single_phase_current():
    assert calc_current_from_power(7.2, 240, Phase.SINGLE, 1.0) == pytest.approx(30.0)
    assert calc_current_from_power(2.3, 230, Phase.SINGLE, 0.5) == pytest.approx(20.0)


def test_three_phase_current_divides_by_root_three():
    single = calc_current_from_power(10, 400, Phase.SINGLE, 0.9)
    three = calc_current_from_power(10, 400, Phase.THREE, 0.9)
    assert three == pytest.approx(single / math.sqrt(3))


def test_apparent_power():
    assert calc_apparent_power_kva(30, 240, Phase.SINGLE) == pytest.approx(7.2)
    assert calc_apparent_power_kva(10, 400, Phase.THREE) == pytest.approx(6.928, abs=1e-3)


@pytest.mark.parametrize("standard,duty,factor", [
    (Standard.NEC, Duty.CONTINUOUS, 1.25),
    (Standard.NEC, Duty.NONCONTINUOUS, 1.0),
    (Standard.IEC, Duty.CONTINUOUS, 1.0),
    (Standard.IEC, Duty.NONCONTINUOUS, 1.0),
])
def test_safety_factor_from_table(table, standard, duty, factor):
    result = apply_safety_factor(table, 30, standard, duty)
    assert result.factor == factor
    assert result.minimum_rating_a == pytest.approx(30 * factor)
    assert result.formula.stage == "safety_factor"
