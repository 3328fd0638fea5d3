import math

import pytest

from breaker_sizing.models import CableRun, ConductorMaterial, InstallationMethod, Phase, Severity
from breaker_sizing.voltage_drop import (
    calc_voltage_drop,
    check_voltage_drop,
    conductor_resistance,
    size_conductor_for_voltage_drop,
)


def test_single_phase_drop(table):
    result = calc_voltage_drop(table, 30, CableRun(80, 10), 240, Phase.SINGLE, 0.8)
    # 2 × 30 × 80 × (0.00221 × 0.8 + 0.00008 × 0.6)
    assert result.voltage_drop_v == pytest.approx(8.7168)
    assert result.voltage_drop_pct == pytest.approx(3.632)
    assert result.voltage_at_load_v == pytest.approx(240 - 8.7168)
    assert result.status == "HIGH"
    assert result.recommended_size_mm2 == 16


def test_three_phase_uses_root_three(table):
    single = calc_voltage_drop(table, 50, CableRun(100, 25), 400, Phase.SINGLE, 1.0)
    three = calc_voltage_drop(table, 50, CableRun(100, 25), 400, Phase.THREE, 1.0)
    assert three.voltage_drop_v == pytest.approx(single.voltage_drop_v * math.sqrt(3) / 2)


def test_unity_power_factor_ignores_reactance(table):
    result = calc_voltage_drop(table, 10, CableRun(50, 4), 230, Phase.SINGLE, 1.0)
    assert result.voltage_drop_v == pytest.approx(2 * 10 * 50 * 0.0221 / 4)


def test_power_loss(table):
    result = calc_voltage_drop(table, 20, CableRun(100, 10), 400, Phase.THREE, 0.9)
    assert result.power_loss_w == pytest.approx(3 * 20 ** 2 * 0.00221 * 100)


def test_aluminium_and_temperature_change_resistance(table):
    copper = conductor_resistance(table, ConductorMaterial.COPPER, 10, 75)
    aluminium = conductor_resistance(table, ConductorMaterial.ALUMINUM, 10, 75)
    hot = conductor_resistance(table, ConductorMaterial.COPPER, 10, 90)
    assert aluminium > copper
    assert hot > copper


def test_status_bands(table):
    ok = calc_voltage_drop(table, 30, CableRun(20, 10), 240, Phase.SINGLE, 0.8)
    exceeded = calc_voltage_drop(table, 30, CableRun(150, 10), 240, Phase.SINGLE, 0.8)
    impossible = calc_voltage_drop(table, 30, CableRun(5000, 1.5), 240, Phase.SINGLE, 0.8)
    assert ok.status == "OK"
    assert ok.recommended_size_mm2 is None
    assert exceeded.status == "EXCEEDED"
    assert impossible.status == "IMPOSSIBLE"


def test_size_for_voltage_drop(table):
    size, pct = size_conductor_for_voltage_drop(table, 30, CableRun(80, 10), 240, Phase.SINGLE, 0.8)
    assert size == 16
    assert pct <= 3.0
    assert size_conductor_for_voltage_drop(table, 30, CableRun(5000, 1.5), 240, Phase.SINGLE, 0.8) is None


def test_check_voltage_drop_warnings(table):
    analysis, warnings, formula = check_voltage_drop(table, 30, CableRun(150, 10), 240, Phase.SINGLE, 0.8)
    assert [w.code for w in warnings] == ["VOLTAGE_DROP_EXCEEDED"]
    assert warnings[0].severity is Severity.ERROR
    assert warnings[0].citation == "NEC 210.19(A) Informational Note No. 4"
    assert "mm²" in warnings[0].message
    assert formula.value == analysis.voltage_drop_v


def test_installation_method_selects_reactance(table):
    buried, _, _ = check_voltage_drop(
        table, 30, CableRun(50, 10), 400, Phase.THREE, 0.8, method=InstallationMethod.D
    )
    conduit, _, _ = check_voltage_drop(table, 30, CableRun(50, 10), 400, Phase.THREE, 0.8)
    assert buried.reactance_ohm_per_m == 0.00007
    assert conduit.reactance_ohm_per_m == 0.00008
