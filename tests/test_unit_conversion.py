import pytest

from breaker_sizing.errors import InvalidUnit
from breaker_sizing.unit_conversion import (
    UNITS,
    UnitConverter,
    awg_to_mm2,
    conductor_size_to_mm2,
    kind_of,
    mm2_to_awg,
)

converter = UnitConverter()


def test_feet_round_trip():
    metres = converter.to_canonical(100, "ft")
    assert metres == pytest.approx(30.48)
    assert converter.from_canonical(metres, "ft") == pytest.approx(100, rel=1e-9)


@pytest.mark.parametrize("unit", sorted(UNITS))
@pytest.mark.parametrize("value", [1.0, 123.456, 9999.5])
def test_round_trip_every_unit(unit, value):
    back = converter.from_canonical(converter.to_canonical(value, unit), unit)
    assert back == pytest.approx(value, rel=1e-9)


def test_temperature_conversions():
    assert converter.to_canonical(212, "F") == pytest.approx(100)
    assert converter.to_canonical(-40, "F") == pytest.approx(-40)
    assert converter.to_canonical(273.15, "K") == pytest.approx(0)
    assert converter.from_canonical(40, "F") == pytest.approx(104)


def test_aliases_are_case_insensitive():
    assert converter.to_canonical(1, "Feet") == pytest.approx(0.3048)
    assert converter.to_canonical(1, "mm²") == 1
    assert converter.to_canonical(50, "°C") == 50
    assert converter.to_canonical(1, "KW") == 1000
    assert converter.to_canonical(1, "MCM") == pytest.approx(0.5067, rel=1e-4)


def test_unsupported_unit_raises():
    with pytest.raises(InvalidUnit):
        converter.to_canonical(1, "furlong")
    with pytest.raises(ValueError):
        converter.from_canonical(1, "")


def test_cross_kind_conversion_rejected():
    assert converter.convert(1, "mi", "ft") == pytest.approx(5280)
    with pytest.raises(InvalidUnit):
        converter.convert(1, "ft", "mm2")
    with pytest.raises(InvalidUnit):
        converter.to_canonical_as(1, "kW", "length")


def test_kind_of():
    assert kind_of("ft") == "length"
    assert kind_of("kcmil") == "area"
    assert kind_of("K") == "temperature"
    assert kind_of("hp") == "power"


def test_awg_formula():
    assert awg_to_mm2("4/0") == pytest.approx(107.2, rel=1e-3)
    assert awg_to_mm2("10") == pytest.approx(5.26, rel=1e-2)
    assert awg_to_mm2("12 AWG") == pytest.approx(3.31, rel=1e-2)


def test_awg_invalid():
    with pytest.raises(InvalidUnit):
        awg_to_mm2("5/0")
    with pytest.raises(InvalidUnit):
        awg_to_mm2("big")


def test_mm2_to_awg_nearest():
    assert mm2_to_awg(107.2) == "4/0"
    assert mm2_to_awg(5.3) == "10"


def test_conductor_size_units():
    assert conductor_size_to_mm2("4/0", "AWG") == pytest.approx(107.2, rel=1e-3)
    assert conductor_size_to_mm2(250, "kcmil") == pytest.approx(126.68, rel=1e-3)
    assert conductor_size_to_mm2(16, "mm2") == 16
    with pytest.raises(InvalidUnit):
        conductor_size_to_mm2(10, "ft")
