"""
Breaker Sizing Data Model
Typed inputs, intermediate factors and the immutable calculation result.

All quantities are canonical SI (A, V, W, m, mm², °C, kA) unless a field name
says otherwise. Every record here is frozen; a new calculation produces new
objects and nothing is updated in place.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class Standard(str, Enum):
    NEC = "NEC"
    IEC = "IEC"


class Phase(str, Enum):
    SINGLE = "single"
    THREE = "three"


class LoadMode(str, Enum):
    POWER = "power"      # load_value in kW
    CURRENT = "current"  # load_value in A


class Duty(str, Enum):
    CONTINUOUS = "continuous"
    NONCONTINUOUS = "noncontinuous"


class LoadType(str, Enum):
    RESISTIVE = "resistive"
    INDUCTIVE = "inductive"
    MIXED = "mixed"
    CAPACITIVE = "capacitive"


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ConductorMaterial(str, Enum):
    COPPER = "copper"
    ALUMINUM = "aluminum"


class InstallationMethod(str, Enum):
    """IEC 60364-5-52 Table B.52.1 reference installation methods."""
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"


# =============================================================================
# INPUTS
# =============================================================================

@dataclass(frozen=True)
class CableRun:
    """One-way cable run used by the voltage drop analysis."""
    length_m: float
    conductor_size_mm2: float
    material: ConductorMaterial = ConductorMaterial.COPPER
    size_label: Optional[str] = None


@dataclass(frozen=True)
class InputParameters:
    standard: Standard
    voltage_v: float
    phase: Phase
    load_mode: LoadMode
    load_value: float
    power_factor: float = 0.8
    duty: Duty = Duty.CONTINUOUS
    load_type: LoadType = LoadType.MIXED
    unit_system: UnitSystem = UnitSystem.METRIC
    short_circuit_ka: Optional[float] = None
    cable_run: Optional[CableRun] = None


@dataclass(frozen=True)
class EnvironmentalConditions:
    ambient_temp_c: Optional[float] = None
    grouped_conductors: Optional[int] = None
    installation_method: Optional[InstallationMethod] = None
    insulation_rating_c: int = 75


@dataclass(frozen=True)
class BaseDesign:
    """Circuit without environmental conditions; derating stage is skipped."""
    params: InputParameters


@dataclass(frozen=True)
class EnvironmentalDesign:
    """Circuit with environmental conditions; derating stage runs."""
    params: InputParameters
    environment: EnvironmentalConditions


DesignInput = Union[BaseDesign, EnvironmentalDesign]


def design_input(
    params: InputParameters,
    environment: Optional[EnvironmentalConditions] = None
) -> DesignInput:
    """Wrap parameters in the design variant matching the supplied conditions."""
    if environment is None:
        return BaseDesign(params)
    return EnvironmentalDesign(params, environment)


# =============================================================================
# INTERMEDIATE RECORDS
# =============================================================================

@dataclass(frozen=True)
class CalculationWarning:
    severity: Severity
    code: str
    message: str
    citation: Optional[str] = None


@dataclass(frozen=True)
class FieldError:
    field: str
    value: object
    constraint: str

    @property
    def message(self) -> str:
        return f"{self.constraint} (got {self.value!r})"


@dataclass(frozen=True)
class ValidationReport:
    errors: Tuple[FieldError, ...] = ()
    warnings: Tuple[CalculationWarning, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class DeratingFactor:
    """
    One environmental correction factor.

    table_rows holds the (x, factor) rows the value was read or
    interpolated from, so every factor is traceable to at most two rows.
    """
    label: str
    factor: float
    citation: str
    input_value: Optional[object] = None
    table_rows: Tuple[Tuple[float, float], ...] = ()
    extrapolated: bool = False


@dataclass(frozen=True)
class DeratingSet:
    factors: Tuple[DeratingFactor, ...] = ()

    @property
    def combined_factor(self) -> float:
        combined = 1.0
        for f in self.factors:
            combined *= f.factor
        return combined

    def __len__(self) -> int:
        return len(self.factors)


@dataclass(frozen=True)
class Formula:
    stage: str
    expression: str
    substituted: str
    value: float
    unit: str


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class TripCurveRecommendation:
    standard: Standard
    recommendation: str
    display_name: str
    inrush_capability: str
    rationale: str
    applications: Tuple[str, ...]
    notes: str
    citation: str


@dataclass(frozen=True)
class BreakerSpecification:
    rating_a: float
    interrupting_rating_ka: float
    trip_characteristic: str
    standard: Standard
    code_section: str
    is_safe: bool = True


@dataclass(frozen=True)
class VoltageDropAnalysis:
    current_a: float
    length_m: float
    conductor_size_mm2: float
    material: ConductorMaterial
    resistance_ohm_per_m: float
    reactance_ohm_per_m: float
    voltage_drop_v: float
    voltage_drop_pct: float
    voltage_at_load_v: float
    power_loss_w: float
    limit_branch_pct: float
    limit_combined_pct: float
    status: str
    recommended_size_mm2: Optional[float] = None
    recommended_vd_pct: Optional[float] = None


@dataclass(frozen=True)
class ShortCircuitAnalysis:
    fault_current_ka: float
    interrupting_rating_ka: Optional[float]
    margin_pct: Optional[float]
    adequate: bool
    citation: str


@dataclass(frozen=True)
class CalculationResult:
    design: DesignInput
    load_current_a: float
    safety_factor: float
    minimum_rating_a: float
    adjusted_requirement_a: float
    recommended_rating_a: float
    ladder_citation: str
    breaker: BreakerSpecification
    trip_curve: TripCurveRecommendation
    derating: Optional[DeratingSet] = None
    voltage_drop: Optional[VoltageDropAnalysis] = None
    short_circuit: Optional[ShortCircuitAnalysis] = None
    warnings: Tuple[CalculationWarning, ...] = ()
    formulas: Tuple[Formula, ...] = ()
    notes: Tuple[str, ...] = ()
    calculation_version: str = "1.0.0"
    calculated_at: str = field(default="", compare=False)

    @property
    def params(self) -> InputParameters:
        return self.design.params

    @property
    def actionable(self) -> bool:
        """False when any error-severity warning flags the result unsafe."""
        return not any(w.severity is Severity.ERROR for w in self.warnings)
