"""
Short Circuit Capacity Module
Breaker interrupting rating against the prospective fault current.

The breaker must interrupt the available fault current at its line
terminals. Selection takes the smallest standard interrupting rating that
is at least the fault current.

Standards: NEC 110.9, UL 489, IEC 60898-1 (Icn), IEC 60947-2 (Icu)
"""

from typing import List, Tuple

from .models import CalculationWarning, Formula, Severity, ShortCircuitAnalysis, Standard
from .standards_tables import StandardsTable


def select_interrupting_rating(
    table: StandardsTable,
    fault_current_ka: float,
    standard: Standard
) -> ShortCircuitAnalysis:
    """
    Select the breaker interrupting rating for a fault level.

    Args:
        table: Standards table with interrupting_rating/<STD>
        fault_current_ka: Prospective fault current at the breaker (kA)
        standard: NEC or IEC

    Returns:
        ShortCircuitAnalysis; adequate is False when no rating suffices
    """
    ladder = table.ladder("interrupting_rating", standard.value)
    rating = ladder.select(fault_current_ka)
    if rating is None:
        return ShortCircuitAnalysis(
            fault_current_ka=fault_current_ka,
            interrupting_rating_ka=None,
            margin_pct=None,
            adequate=False,
            citation=ladder.citation,
        )

    margin_pct = (rating - fault_current_ka) / fault_current_ka * 100
    return ShortCircuitAnalysis(
        fault_current_ka=fault_current_ka,
        interrupting_rating_ka=rating,
        margin_pct=margin_pct,
        adequate=True,
        citation=ladder.citation,
    )


def check_short_circuit(
    table: StandardsTable,
    fault_current_ka: float,
    standard: Standard
) -> Tuple[ShortCircuitAnalysis, List[CalculationWarning], Formula]:
    """Short circuit analysis with its warnings and formula annotation."""
    analysis = select_interrupting_rating(table, fault_current_ka, standard)
    warnings: List[CalculationWarning] = []

    if not analysis.adequate:
        maximum = table.ladder("interrupting_rating", standard.value).maximum
        warnings.append(CalculationWarning(
            Severity.ERROR, "INTERRUPTING_RATING_EXCEEDED",
            f"Fault current {fault_current_ka:g} kA exceeds the largest standard interrupting "
            f"rating ({maximum:g} kA). Options: (1) Add current-limiting protection, "
            "(2) Reduce fault level with impedance, (3) Verify actual fault current with study",
            analysis.citation
        ))
        formula = Formula(
            stage="short_circuit",
            expression="Icu ≥ Isc",
            substituted=f"{maximum:g} kA < {fault_current_ka:g} kA",
            value=maximum,
            unit="kA",
        )
    else:
        formula = Formula(
            stage="short_circuit",
            expression="Icu ≥ Isc",
            substituted=f"{analysis.interrupting_rating_ka:g} kA ≥ {fault_current_ka:g} kA",
            value=analysis.interrupting_rating_ka,
            unit="kA",
        )
    return analysis, warnings, formula
