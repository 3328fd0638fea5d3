"""
Safety Factor Module
Continuous-load multiplier applied to the load current.

NEC 210.20(A): overcurrent devices on continuous loads are rated at not less
than 125 % of the continuous load. IEC 60364-5-52 applies no separate
multiplier; margin comes from the correction factors instead.
"""

from dataclasses import dataclass

from .models import Duty, Formula, Standard
from .standards_tables import StandardsTable


@dataclass(frozen=True)
class SafetyFactorResult:
    factor: float
    minimum_rating_a: float
    citation: str
    formula: Formula


def apply_safety_factor(
    table: StandardsTable,
    current_a: float,
    standard: Standard,
    duty: Duty
) -> SafetyFactorResult:
    """
    Minimum breaker rating = load current × safety factor.

    Args:
        table: Standards table holding safety_factor/<STD>.<duty>
        current_a: Load current (A)
        standard: NEC or IEC
        duty: Continuous or non-continuous

    Returns:
        SafetyFactorResult
    """
    entry = table.entry("safety_factor", f"{standard.value}.{duty.value}")
    minimum = current_a * entry.value
    formula = Formula(
        stage="safety_factor",
        expression="I_min = I × k_safety",
        substituted=f"I_min = {current_a:.2f} × {entry.value:g}",
        value=minimum,
        unit="A",
    )
    return SafetyFactorResult(entry.value, minimum, entry.citation, formula)
