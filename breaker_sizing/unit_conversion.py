"""
Unit Conversion Module
Boundary conversion between supplied units and the canonical SI set.

Canonical units:
- length:      m
- area:        mm²
- temperature: °C
- power:       W

Conversions are exact linear maps with no rounding, so a value converted to
canonical and back returns within floating point tolerance.

Standards: NEC Chapter 9 Table 8 (AWG/kcmil), IEC 60228
"""

import math
from typing import Dict, Tuple, Union

from .errors import InvalidUnit

# unit -> (kind, scale, offset); canonical = value * scale + offset
UNITS: Dict[str, Tuple[str, float, float]] = {
    "m": ("length", 1.0, 0.0),
    "mm": ("length", 0.001, 0.0),
    "km": ("length", 1000.0, 0.0),
    "ft": ("length", 0.3048, 0.0),
    "in": ("length", 0.0254, 0.0),
    "mi": ("length", 1609.344, 0.0),
    "mm2": ("area", 1.0, 0.0),
    "m2": ("area", 1.0e6, 0.0),
    "kcmil": ("area", 0.5067074790975, 0.0),
    "cmil": ("area", 0.0005067074790975, 0.0),
    "in2": ("area", 645.16, 0.0),
    "C": ("temperature", 1.0, 0.0),
    "F": ("temperature", 5.0 / 9.0, -32.0 * 5.0 / 9.0),
    "K": ("temperature", 1.0, -273.15),
    "W": ("power", 1.0, 0.0),
    "kW": ("power", 1000.0, 0.0),
    "hp": ("power", 745.69987158227022, 0.0),
}

ALIASES = {
    "meter": "m", "meters": "m", "metre": "m", "metres": "m",
    "millimeter": "mm", "millimeters": "mm",
    "kilometer": "km", "kilometers": "km",
    "foot": "ft", "feet": "ft", "'": "ft",
    "inch": "in", "inches": "in", '"': "in",
    "mile": "mi", "miles": "mi",
    "mm²": "mm2", "sqmm": "mm2", "mm^2": "mm2",
    "m²": "m2", "m^2": "m2",
    "mcm": "kcmil",
    "in²": "in2", "sqin": "in2", "in^2": "in2",
    "°c": "C", "celsius": "C", "degc": "C",
    "°f": "F", "fahrenheit": "F", "degf": "F",
    "kelvin": "K",
    "watt": "W", "watts": "W",
    "kilowatt": "kW", "kilowatts": "kW",
    "horsepower": "hp",
}

_LOOKUP = {name.lower(): name for name in UNITS}
_LOOKUP.update({alias.lower(): name for alias, name in ALIASES.items()})

CANONICAL = {"length": "m", "area": "mm2", "temperature": "C", "power": "W"}

# AWG sizes from smallest to largest; "4/0" is gauge -3
AWG_SIZES = (
    "18", "16", "14", "12", "10", "8", "6", "4", "3", "2", "1",
    "1/0", "2/0", "3/0", "4/0",
)


def normalize_unit(unit: str) -> str:
    """Return the canonical spelling of a unit name or alias."""
    key = str(unit).strip().lower()
    if key not in _LOOKUP:
        raise InvalidUnit(f"Unsupported unit: {unit!r}")
    return _LOOKUP[key]


def kind_of(unit: str) -> str:
    return UNITS[normalize_unit(unit)][0]


class UnitConverter:
    """Stateless converter between supplied units and canonical SI."""

    def to_canonical(self, value: float, from_unit: str) -> float:
        _, scale, offset = UNITS[normalize_unit(from_unit)]
        return value * scale + offset

    def from_canonical(self, value: float, to_unit: str) -> float:
        _, scale, offset = UNITS[normalize_unit(to_unit)]
        return (value - offset) / scale

    def convert(self, value: float, from_unit: str, to_unit: str) -> float:
        """Convert between two units of the same kind."""
        if kind_of(from_unit) != kind_of(to_unit):
            raise InvalidUnit(
                f"Cannot convert {kind_of(from_unit)} ({from_unit}) to {kind_of(to_unit)} ({to_unit})"
            )
        return self.from_canonical(self.to_canonical(value, from_unit), to_unit)

    def to_canonical_as(self, value: float, from_unit: str, kind: str) -> float:
        """to_canonical, rejecting a unit of the wrong quantity kind."""
        actual = kind_of(from_unit)
        if actual != kind:
            raise InvalidUnit(f"{from_unit!r} is a {actual} unit, expected {kind}")
        return self.to_canonical(value, from_unit)


# =============================================================================
# CONDUCTOR SIZES
# =============================================================================

def awg_gauge_number(gauge: str) -> int:
    """Numeric gauge: "10" -> 10, "1/0" -> 0, "4/0" -> -3."""
    text = str(gauge).strip().upper().replace("AWG", "").strip()
    try:
        if text.endswith("/0"):
            zeros = int(text[:-2])
            if not 1 <= zeros <= 4:
                raise InvalidUnit(f"Unsupported AWG size: {gauge!r}")
            return 1 - zeros
        return int(text)
    except ValueError:
        raise InvalidUnit(f"Unsupported AWG size: {gauge!r}") from None


def awg_to_mm2(gauge: Union[str, int]) -> float:
    """
    Cross-section of a solid AWG conductor.

    d = 0.127 mm × 92^((36 - n) / 39), area = π/4 × d²

    Args:
        gauge: Gauge label such as "12", "4/0" or "4/0 AWG"

    Returns:
        Area in mm²
    """
    n = awg_gauge_number(str(gauge))
    if n > 40:
        raise InvalidUnit(f"Unsupported AWG size: {gauge!r}")
    diameter_mm = 0.127 * 92 ** ((36 - n) / 39)
    return math.pi / 4 * diameter_mm ** 2


def mm2_to_awg(area_mm2: float) -> str:
    """Nearest standard AWG label for a cross-section."""
    return min(AWG_SIZES, key=lambda g: abs(awg_to_mm2(g) - area_mm2))


def conductor_size_to_mm2(value: Union[str, float], unit: str) -> float:
    """
    Conductor size in mm² from an AWG, kcmil or metric designation.

    Args:
        value: Gauge label for AWG, number otherwise
        unit: "AWG", "kcmil" (or "MCM") or "mm2"
    """
    key = str(unit).strip().lower()
    if key == "awg":
        return awg_to_mm2(value)
    if kind_of(unit) != "area":
        raise InvalidUnit(f"{unit!r} is not a conductor size unit")
    return UnitConverter().to_canonical(float(value), unit)
