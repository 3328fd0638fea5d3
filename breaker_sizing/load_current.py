"""
Load Current Module
Base quantity for breaker sizing: the circuit's full-load current.

Single-phase:  I = P / (V × PF)
Three-phase:   I = P / (√3 × V × PF)

P is real power in watts and V the line-to-line voltage for three-phase.
"""

import math
from typing import Tuple

from .errors import unhandled
from .models import Formula, InputParameters, LoadMode, Phase


def calc_current_from_power(power_kw: float, voltage: float, phase: Phase, power_factor: float) -> float:
    """
    Current drawn by a load of known real power.

    Args:
        power_kw: Real power (kW)
        voltage: System voltage (line-to-line for three-phase)
        phase: Phase.SINGLE or Phase.THREE
        power_factor: Load power factor

    Returns:
        Current in Amps
    """
    watts = power_kw * 1000
    if phase is Phase.SINGLE:
        return watts / (voltage * power_factor)
    elif phase is Phase.THREE:
        return watts / (math.sqrt(3) * voltage * power_factor)
    unhandled(phase)


def calc_apparent_power_kva(current_a: float, voltage: float, phase: Phase) -> float:
    if phase is Phase.SINGLE:
        return voltage * current_a / 1000
    elif phase is Phase.THREE:
        return math.sqrt(3) * voltage * current_a / 1000
    unhandled(phase)


def calc_load_current(params: InputParameters) -> Tuple[float, Formula]:
    """Load current and its formula annotation for the selected load mode."""
    if params.load_mode is LoadMode.CURRENT:
        current = params.load_value
        formula = Formula(
            stage="load_current",
            expression="I = I_load",
            substituted=f"I = {current:g}",
            value=current,
            unit="A",
        )
        return current, formula

    elif params.load_mode is LoadMode.POWER:
        current = calc_current_from_power(
            params.load_value, params.voltage_v, params.phase, params.power_factor
        )
        watts = params.load_value * 1000
        if params.phase is Phase.THREE:
            expression = "I = P / (√3 × V × PF)"
            substituted = f"I = {watts:g} / (√3 × {params.voltage_v:g} × {params.power_factor:g})"
        else:
            expression = "I = P / (V × PF)"
            substituted = f"I = {watts:g} / ({params.voltage_v:g} × {params.power_factor:g})"
        return current, Formula("load_current", expression, substituted, current, "A")

    unhandled(params.load_mode)
