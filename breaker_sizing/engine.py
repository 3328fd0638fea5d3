"""
Breaker Sizing Engine
Orchestrates the sizing stages for one circuit.

Stage order (fixed):
1. Load current from power or as given
2. Safety factor (continuous duty)
3. Derating, only for designs carrying environmental conditions
4. Round up to the standard breaker rating ladder
5. Secondary analyses: trip curve, voltage drop, short circuit

Engineering problems found along the way (oversized requirement, excessive
voltage drop, fault level above every interrupting rating) are reported as
warnings in the result; only invalid input raises.

Standards: NEC 210.20(A), NEC 240.6(A), NEC 310.15, IEC 60364-5-52,
IEC 60898-1, IEC 60947-2
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Union

from .config import EngineSettings
from .derating import DeratingComposer
from .errors import ContractViolation, ValidationFailed
from .load_current import calc_load_current
from .models import (
    BaseDesign,
    BreakerSpecification,
    CalculationResult,
    CalculationWarning,
    DeratingSet,
    DesignInput,
    Duty,
    EnvironmentalDesign,
    Formula,
    InputParameters,
    Severity,
    Standard,
)
from .safety_factors import apply_safety_factor
from .short_circuit import check_short_circuit
from .standards_tables import StandardsTable
from .trip_curves import recommend_trip_curve
from .validation import Validator
from .voltage_drop import check_voltage_drop

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CalculationEngine:
    """
    Sizes a breaker for one validated circuit.

    The engine holds no per-call state; one instance may serve any number
    of concurrent calculations.
    """

    def __init__(
        self,
        table: StandardsTable,
        settings: Optional[EngineSettings] = None,
        clock: Callable[[], str] = utc_now
    ):
        self.table = table
        self.settings = settings or EngineSettings()
        self.clock = clock
        self.validator = Validator(table, self.settings)
        self.composer = DeratingComposer(table, self.settings)

    def calculate(self, design: Union[DesignInput, InputParameters]) -> CalculationResult:
        """
        Run all sizing stages.

        Args:
            design: BaseDesign, EnvironmentalDesign, or bare InputParameters

        Returns:
            CalculationResult

        Raises:
            ValidationFailed: The input has field errors; no stage runs
        """
        if isinstance(design, InputParameters):
            design = BaseDesign(design)
        elif not isinstance(design, (BaseDesign, EnvironmentalDesign)):
            raise ContractViolation(f"Expected a design input, got {type(design).__name__}")

        report = self.validator.validate(design)
        if report.errors:
            raise ValidationFailed(report.errors)

        params = design.params
        standard = params.standard
        logger.info(
            "Sizing %s breaker: %s-phase %g V, %s %g",
            standard.value, params.phase.value, params.voltage_v,
            params.load_mode.value, params.load_value
        )

        warnings: List[CalculationWarning] = list(report.warnings)
        formulas: List[Formula] = []
        notes: List[str] = []

        # Stage 1: load current
        current, formula = calc_load_current(params)
        formulas.append(formula)
        logger.debug("Load current: %.3f A", current)

        # Stage 2: safety factor
        safety = apply_safety_factor(self.table, current, standard, params.duty)
        formulas.append(safety.formula)
        logger.debug("Safety factor %.2f (%s): %.3f A", safety.factor, safety.citation, safety.minimum_rating_a)

        # Stage 3: derating
        derating: Optional[DeratingSet] = None
        requirement = safety.minimum_rating_a
        if isinstance(design, EnvironmentalDesign):
            composition = self.composer.compose(design.environment, standard)
            derating = composition.derating_set
            warnings.extend(composition.warnings)
            combined = derating.combined_factor
            requirement = safety.minimum_rating_a / combined
            formulas.append(Formula(
                stage="derating",
                expression="I_adj = I_min / k_combined",
                substituted=f"I_adj = {safety.minimum_rating_a:.2f} / {combined:.4f}",
                value=requirement,
                unit="A",
            ))
            logger.debug("Derating %.4f: adjusted requirement %.3f A", combined, requirement)

        # Stage 4: standard size
        ladder = self.table.ladder("breaker_rating", standard.value)
        rating = ladder.select(requirement)
        if rating is None:
            rating = ladder.maximum
            warnings.append(CalculationWarning(
                Severity.ERROR, "BREAKER_SIZE_EXCEEDED",
                f"Required rating {requirement:.1f} A exceeds largest standard size "
                f"({ladder.maximum:g} A); split the load or use a bus duct/switchboard design",
                ladder.citation
            ))
            formulas.append(Formula(
                stage="rounding",
                expression="I_n = max(ladder)",
                substituted=f"I_n = {rating:g} < {requirement:.2f}",
                value=rating,
                unit="A",
            ))
        else:
            formulas.append(Formula(
                stage="rounding",
                expression="I_n = min{ladder ≥ I_adj}",
                substituted=f"I_n = {rating:g} ≥ {requirement:.2f}",
                value=rating,
                unit="A",
            ))
        logger.debug("Standard rating %g A from %s", rating, ladder.citation)

        # Stage 5: secondary analyses
        trip_curve = recommend_trip_curve(self.table, standard, params.load_type)

        voltage_drop = None
        if params.cable_run is not None:
            environment = design.environment if isinstance(design, EnvironmentalDesign) else None
            voltage_drop, vd_warnings, formula = check_voltage_drop(
                self.table, current, params.cable_run, params.voltage_v, params.phase,
                params.power_factor,
                insulation_rating_c=environment.insulation_rating_c if environment else 75,
                method=environment.installation_method if environment else None,
            )
            warnings.extend(vd_warnings)
            formulas.append(formula)
            logger.debug("Voltage drop %.3f%% (%s)", voltage_drop.voltage_drop_pct, voltage_drop.status)

        short_circuit = None
        interrupting_ka = self.settings.default_interrupting_rating_ka
        if params.short_circuit_ka is not None:
            short_circuit, sc_warnings, formula = check_short_circuit(
                self.table, params.short_circuit_ka, standard
            )
            warnings.extend(sc_warnings)
            formulas.append(formula)
            interrupting_ka = formula.value
            logger.debug("Interrupting rating %g kA for %g kA fault", interrupting_ka, params.short_circuit_ka)
        else:
            notes.append(
                "Breaking capacity not verified: no prospective fault current supplied; "
                f"{interrupting_ka:g} kA interrupting rating assumed"
            )

        if standard is Standard.NEC and params.duty is Duty.CONTINUOUS:
            notes.append("Continuous load: breaker rated at 125% of load current per NEC 210.20(A)")

        is_safe = not any(w.severity is Severity.ERROR for w in warnings)
        breaker = BreakerSpecification(
            rating_a=rating,
            interrupting_rating_ka=interrupting_ka,
            trip_characteristic=trip_curve.recommendation,
            standard=standard,
            code_section=ladder.citation,
            is_safe=is_safe,
        )

        result = CalculationResult(
            design=design,
            load_current_a=current,
            safety_factor=safety.factor,
            minimum_rating_a=safety.minimum_rating_a,
            adjusted_requirement_a=requirement,
            recommended_rating_a=rating,
            ladder_citation=ladder.citation,
            breaker=breaker,
            trip_curve=trip_curve,
            derating=derating,
            voltage_drop=voltage_drop,
            short_circuit=short_circuit,
            warnings=tuple(warnings),
            formulas=tuple(formulas),
            notes=tuple(notes),
            calculation_version=self.settings.calculation_version,
            calculated_at=self.clock(),
        )
        logger.info(
            "Selected %g A %s breaker (%d warning(s), actionable=%s)",
            rating, standard.value, len(warnings), result.actionable
        )
        return result


def quick_breaker_lookup(table: StandardsTable, current_a: float, standard: Standard) -> Optional[float]:
    """
    Continuous-duty standard rating for a load current, no analyses.

    Returns:
        Breaker rating in Amps, or None above the largest standard size
    """
    factor = table.entry("safety_factor", f"{standard.value}.{Duty.CONTINUOUS.value}").value
    return table.ladder("breaker_rating", standard.value).select(current_a * factor)


def recalculate_with_standard(
    engine: CalculationEngine,
    design: Union[DesignInput, InputParameters],
    standard: Standard
) -> CalculationResult:
    """Re-run a design under the other standard, keeping every other input."""
    if isinstance(design, InputParameters):
        design = BaseDesign(design)
    params = replace(design.params, standard=standard)
    return engine.calculate(replace(design, params=params))
