"""
Voltage Drop Calculation Module
Voltage drop for the protected circuit's cable run.

Vd = k × I × L × (R × cos(φ) + X × sin(φ))
Vd% = (Vd / V) × 100

k = 2 for single-phase (out and return), √3 for balanced three-phase.
R is the conductor resistance per metre at its operating temperature and X
the reactance per metre for the installation.

Targets:
- Branch circuit ≤3%
- Combined feeder + branch ≤5%

Standards: NEC 210.19(A) Informational Note No. 4, IEC 60364-5-52 Annex G
"""

import math
from typing import List, Optional, Tuple

from .errors import unhandled
from .models import (
    CableRun,
    CalculationWarning,
    ConductorMaterial,
    Formula,
    InstallationMethod,
    Phase,
    Severity,
    VoltageDropAnalysis,
)
from .standards_tables import StandardsTable

STATUS_OK = "OK"
STATUS_HIGH = "HIGH"
STATUS_EXCEEDED = "EXCEEDED"
STATUS_IMPOSSIBLE = "IMPOSSIBLE"

REACTANCE_BY_METHOD = {
    InstallationMethod.D: "direct_buried",
    InstallationMethod.E: "tray",
    InstallationMethod.F: "free_air",
    InstallationMethod.G: "free_air",
}
DEFAULT_REACTANCE = "conduit"


def phase_multiplier(phase: Phase) -> float:
    if phase is Phase.SINGLE:
        return 2.0
    elif phase is Phase.THREE:
        return math.sqrt(3)
    unhandled(phase)


def conductor_resistance(
    table: StandardsTable,
    material: ConductorMaterial,
    size_mm2: float,
    temperature_c: int = 75
) -> float:
    """Resistance of one conductor in Ω/m at the given operating temperature."""
    resistivity = table.entry("resistivity", f"{material.value}.{temperature_c}")
    return resistivity.value / size_mm2


def calc_voltage_drop(
    table: StandardsTable,
    current_a: float,
    cable_run: CableRun,
    voltage: float,
    phase: Phase,
    power_factor: float,
    temperature_c: int = 75,
    installation: str = DEFAULT_REACTANCE
) -> VoltageDropAnalysis:
    """
    Calculate voltage drop for a cable run.

    Args:
        table: Standards table with resistivity, reactance and limits
        current_a: Load current in Amps
        cable_run: One-way run length, conductor size and material
        voltage: System voltage (line-to-line for three-phase)
        phase: Phase.SINGLE or Phase.THREE
        power_factor: Load power factor
        temperature_c: Conductor operating temperature (°C)
        installation: Reactance key (conduit, tray, direct_buried, free_air)

    Returns:
        VoltageDropAnalysis with status OK, HIGH, EXCEEDED or IMPOSSIBLE
    """
    branch_limit = table.entry("voltage_drop_limit", "branch").value
    combined_limit = table.entry("voltage_drop_limit", "combined").value

    r_per_m = conductor_resistance(table, cable_run.material, cable_run.conductor_size_mm2, temperature_c)
    x_per_m = table.entry("reactance", installation).value

    vd_volts = _drop_volts(current_a, cable_run.length_m, r_per_m, x_per_m, phase, power_factor)
    vd_pct = vd_volts / voltage * 100

    # I²R loss in every current-carrying conductor
    conductors = 3 if phase is Phase.THREE else 2
    power_loss = conductors * current_a ** 2 * r_per_m * cable_run.length_m

    if vd_pct >= 100:
        status = STATUS_IMPOSSIBLE
    elif vd_pct > combined_limit:
        status = STATUS_EXCEEDED
    elif vd_pct > branch_limit:
        status = STATUS_HIGH
    else:
        status = STATUS_OK

    recommended = None
    if status != STATUS_OK:
        recommended = size_conductor_for_voltage_drop(
            table, current_a, cable_run, voltage, phase, power_factor,
            branch_limit, temperature_c, installation
        )

    return VoltageDropAnalysis(
        current_a=current_a,
        length_m=cable_run.length_m,
        conductor_size_mm2=cable_run.conductor_size_mm2,
        material=cable_run.material,
        resistance_ohm_per_m=r_per_m,
        reactance_ohm_per_m=x_per_m,
        voltage_drop_v=vd_volts,
        voltage_drop_pct=vd_pct,
        voltage_at_load_v=voltage - vd_volts,
        power_loss_w=power_loss,
        limit_branch_pct=branch_limit,
        limit_combined_pct=combined_limit,
        status=status,
        recommended_size_mm2=recommended[0] if recommended else None,
        recommended_vd_pct=recommended[1] if recommended else None,
    )


def size_conductor_for_voltage_drop(
    table: StandardsTable,
    current_a: float,
    cable_run: CableRun,
    voltage: float,
    phase: Phase,
    power_factor: float,
    target_vd_pct: float = 3.0,
    temperature_c: int = 75,
    installation: str = DEFAULT_REACTANCE
) -> Optional[Tuple[float, float]]:
    """
    Smallest metric conductor meeting the voltage drop target.

    Returns:
        (size_mm2, voltage_drop_pct), or None if no ladder size is enough
    """
    sizes = table.ladder("conductor_size", "metric")
    x_per_m = table.entry("reactance", installation).value
    for size_mm2 in sizes.values:
        r_per_m = conductor_resistance(table, cable_run.material, size_mm2, temperature_c)
        vd_pct = _drop_volts(current_a, cable_run.length_m, r_per_m, x_per_m, phase, power_factor) / voltage * 100
        if vd_pct <= target_vd_pct:
            return size_mm2, vd_pct
    return None


def check_voltage_drop(
    table: StandardsTable,
    current_a: float,
    cable_run: CableRun,
    voltage: float,
    phase: Phase,
    power_factor: float,
    insulation_rating_c: int = 75,
    method: Optional[InstallationMethod] = None
) -> Tuple[VoltageDropAnalysis, List[CalculationWarning], Formula]:
    """Voltage drop analysis with its warnings and formula annotation."""
    installation = REACTANCE_BY_METHOD.get(method, DEFAULT_REACTANCE)
    analysis = calc_voltage_drop(
        table, current_a, cable_run, voltage, phase, power_factor,
        insulation_rating_c, installation
    )
    citation = table.entry("voltage_drop_limit", "branch").citation

    k = "√3" if phase is Phase.THREE else "2"
    sin_phi = math.sqrt(max(0.0, 1 - power_factor ** 2))
    formula = Formula(
        stage="voltage_drop",
        expression="Vd = k × I × L × (R × cos(φ) + X × sin(φ))",
        substituted=(
            f"Vd = {k} × {current_a:.2f} × {analysis.length_m:g} × "
            f"({analysis.resistance_ohm_per_m:.6f} × {power_factor:g} + "
            f"{analysis.reactance_ohm_per_m:.6f} × {sin_phi:.3f})"
        ),
        value=analysis.voltage_drop_v,
        unit="V",
    )

    warnings: List[CalculationWarning] = []
    pct = analysis.voltage_drop_pct
    fix = _recommendation_text(analysis)
    if analysis.status == STATUS_IMPOSSIBLE:
        warnings.append(CalculationWarning(
            Severity.ERROR, "VOLTAGE_DROP_IMPOSSIBLE",
            f"Calculated voltage drop {pct:.1f}% is not physically achievable for this run; "
            f"the cable cannot deliver the load. {fix}",
            citation
        ))
    elif analysis.status == STATUS_EXCEEDED:
        warnings.append(CalculationWarning(
            Severity.ERROR, "VOLTAGE_DROP_EXCEEDED",
            f"Voltage drop {pct:.2f}% exceeds the {analysis.limit_combined_pct:g}% combined limit. {fix}",
            citation
        ))
    elif analysis.status == STATUS_HIGH:
        warnings.append(CalculationWarning(
            Severity.WARNING, "VOLTAGE_DROP_HIGH",
            f"Voltage drop {pct:.2f}% exceeds the {analysis.limit_branch_pct:g}% branch recommendation. {fix}",
            citation
        ))
    return analysis, warnings, formula


def _drop_volts(
    current_a: float,
    length_m: float,
    r_per_m: float,
    x_per_m: float,
    phase: Phase,
    power_factor: float
) -> float:
    cos_phi = power_factor
    sin_phi = math.sqrt(max(0.0, 1 - cos_phi ** 2))
    z_per_m = r_per_m * cos_phi + x_per_m * sin_phi
    return phase_multiplier(phase) * current_a * length_m * z_per_m


def _recommendation_text(analysis: VoltageDropAnalysis) -> str:
    if analysis.recommended_size_mm2 is None:
        return "No standard conductor size meets the limit; consider parallel conductors or a shorter run."
    return (
        f"Use at least {analysis.recommended_size_mm2:g} mm² "
        f"({analysis.recommended_vd_pct:.2f}% drop)."
    )
